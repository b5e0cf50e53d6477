"""Application services: cached domain facades over the repositories."""

from app.application.services.cached_entity_service import CachedEntityService
from app.application.services.customer_service import CustomerService
from app.application.services.order_service import OrderService
from app.application.services.product_service import ProductService

__all__ = [
    "CachedEntityService",
    "CustomerService",
    "OrderService",
    "ProductService",
]
