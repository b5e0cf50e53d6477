"""Pydantic request/response schemas for the API."""

from app.schemas.customer import CustomerRequest, CustomerResponse
from app.schemas.health import CacheHealthResponse, HealthResponse
from app.schemas.order import OrderItemRequest, OrderItemResponse, OrderRequest, OrderResponse
from app.schemas.product import ProductRequest, ProductResponse

__all__ = [
    "CacheHealthResponse",
    "CustomerRequest",
    "CustomerResponse",
    "HealthResponse",
    "OrderItemRequest",
    "OrderItemResponse",
    "OrderRequest",
    "OrderResponse",
    "ProductRequest",
    "ProductResponse",
]
