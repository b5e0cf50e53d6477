"""Product repository. Returns application DTOs."""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.product import ProductData, ProductResult
from app.domain.exceptions import DuplicateResourceException, ResourceInUseException
from app.infrastructure.persistence.models.product import Product
from app.infrastructure.persistence.repositories.base import BaseRepository


def _product_to_result(p: Product) -> ProductResult:
    """Map ORM Product to application ProductResult."""
    return ProductResult(id=p.id, name=p.name, description=p.description, price=p.price)


class ProductRepository(BaseRepository[Product, ProductResult, ProductData]):
    """Product repository. Unique name; products in use by orders cannot be deleted."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Product)

    def _to_result(self, obj: Product) -> ProductResult:
        return _product_to_result(obj)

    def _new(self, data: ProductData) -> Product:
        return Product(name=data.name, description=data.description, price=data.price)

    def _apply(self, obj: Product, data: ProductData) -> None:
        obj.name = data.name
        obj.description = data.description
        obj.price = data.price

    def _translate_integrity_error(
        self, error: IntegrityError, data: ProductData | None, entity_id: int | None
    ) -> None:
        if data is None:
            raise ResourceInUseException("product", entity_id or "?", "order_item") from error
        raise DuplicateResourceException("product", "name", data.name) from error
