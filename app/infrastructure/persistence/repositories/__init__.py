"""Persistence repositories. Re-exports for dependency injection."""

from app.infrastructure.persistence.repositories.base import BaseRepository
from app.infrastructure.persistence.repositories.customer_repo import CustomerRepository
from app.infrastructure.persistence.repositories.order_repo import OrderRepository
from app.infrastructure.persistence.repositories.product_repo import ProductRepository

__all__ = [
    "BaseRepository",
    "CustomerRepository",
    "OrderRepository",
    "ProductRepository",
]
