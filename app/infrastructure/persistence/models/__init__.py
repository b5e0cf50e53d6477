"""Persistence models: ORM entities and mixins."""

from app.infrastructure.persistence.models.customer import Customer
from app.infrastructure.persistence.models.mixins import IntIdMixin, TimestampMixin
from app.infrastructure.persistence.models.order import Order, OrderItem
from app.infrastructure.persistence.models.product import Product

__all__ = [
    "Customer",
    "IntIdMixin",
    "Order",
    "OrderItem",
    "Product",
    "TimestampMixin",
]
