"""Product service: cached catalogue reads and invalidating writes."""

from app.application.dtos.product import ProductData, ProductResult
from app.application.services.cached_entity_service import CachedEntityService
from app.domain.enums import CacheEntity


class ProductService(CachedEntityService[ProductResult, ProductData]):
    """Products have no secondary index; writes drop the product's own keys."""

    entity = CacheEntity.PRODUCT
    result_type = ProductResult
