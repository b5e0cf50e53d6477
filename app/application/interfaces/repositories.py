"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.

Writes flush but do not commit; callers commit with save_changes() so the
commit can precede cache invalidation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, TypeVar

if TYPE_CHECKING:
    from app.application.dtos.customer import CustomerData, CustomerResult
    from app.application.dtos.order import OrderData, OrderResult
    from app.application.dtos.product import ProductData, ProductResult


ResultT = TypeVar("ResultT")
DataT = TypeVar("DataT")


# Shared CRUD contract used by CachedEntityService
class IEntityRepository(Protocol[ResultT, DataT]):
    """Protocol for a per-entity repository returning read-model DTOs."""

    async def get_all(self) -> list[ResultT]:
        """Return every row ordered by id."""

    async def get_page(self, page: int, page_size: int) -> list[ResultT]:
        """Return one 1-based page ordered by id."""

    async def get_by_id(self, entity_id: int) -> ResultT | None:
        """Return one row, or None."""

    async def create(self, data: DataT) -> ResultT:
        """Insert and flush; raises DuplicateResourceException on unique violations."""

    async def update(self, entity_id: int, data: DataT) -> ResultT | None:
        """Replace fields and flush; None when the row does not exist."""

    async def delete(self, entity_id: int) -> bool:
        """Delete and flush; False when the row does not exist."""

    async def save_changes(self) -> None:
        """Commit the unit of work."""


class IProductRepository(IEntityRepository["ProductResult", "ProductData"], Protocol):
    """Protocol for product repository (DIP)."""


class ICustomerRepository(IEntityRepository["CustomerResult", "CustomerData"], Protocol):
    """Protocol for customer repository (DIP)."""

    async def get_order_ids(self, customer_id: int) -> list[int]:
        """Return ids of the customer's orders (removed with the customer on delete)."""


class IOrderRepository(IEntityRepository["OrderResult", "OrderData"], Protocol):
    """Protocol for order repository (DIP)."""

    async def get_by_customer(self, customer_id: int) -> list[OrderResult]:
        """Return the customer's orders ordered by id (empty for unknown customers)."""
