"""Application layer: DTOs, interfaces, cached domain services.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (repositories, cache).
"""

from app.application.interfaces import (
    ICacheService,
    ICustomerRepository,
    IEntityRepository,
    IOrderRepository,
    IProductRepository,
)
from app.application.services import (
    CachedEntityService,
    CustomerService,
    OrderService,
    ProductService,
)

__all__ = [
    "CachedEntityService",
    "CustomerService",
    "ICacheService",
    "ICustomerRepository",
    "IEntityRepository",
    "IOrderRepository",
    "IProductRepository",
    "OrderService",
    "ProductService",
]
