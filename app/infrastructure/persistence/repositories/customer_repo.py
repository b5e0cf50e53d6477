"""Customer repository. Returns application DTOs."""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.customer import CustomerData, CustomerResult
from app.domain.exceptions import DuplicateResourceException
from app.infrastructure.persistence.models.customer import Customer
from app.infrastructure.persistence.models.order import Order
from app.infrastructure.persistence.repositories.base import BaseRepository


class CustomerRepository(BaseRepository[Customer, CustomerResult, CustomerData]):
    """Customer repository. Unique email; deleting a customer deletes their orders (DB cascade)."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Customer)

    def _to_result(self, obj: Customer) -> CustomerResult:
        return CustomerResult(id=obj.id, name=obj.name, email=obj.email)

    def _new(self, data: CustomerData) -> Customer:
        return Customer(name=data.name, email=data.email)

    def _apply(self, obj: Customer, data: CustomerData) -> None:
        obj.name = data.name
        obj.email = data.email

    def _translate_integrity_error(
        self, error: IntegrityError, data: CustomerData | None, entity_id: int | None
    ) -> None:
        if data is not None:
            raise DuplicateResourceException("customer", "email", data.email) from error

    async def get_order_ids(self, customer_id: int) -> list[int]:
        """Return ids of the customer's orders, ascending."""
        result = await self.db.execute(
            select(Order.id).where(Order.customer_id == customer_id).order_by(Order.id)
        )
        return list(result.scalars().all())
