"""Application DTOs (no ORM dependency)."""

from app.application.dtos.customer import CustomerData, CustomerResult
from app.application.dtos.order import OrderData, OrderItemData, OrderItemResult, OrderResult
from app.application.dtos.product import ProductData, ProductResult

__all__ = [
    "CustomerData",
    "CustomerResult",
    "OrderData",
    "OrderItemData",
    "OrderItemResult",
    "OrderResult",
    "ProductData",
    "ProductResult",
]
