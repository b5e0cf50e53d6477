"""Customer service. Deleting a customer also deletes their orders."""

from __future__ import annotations

from app.application.dtos.customer import CustomerData, CustomerResult
from app.application.interfaces.repositories import ICustomerRepository
from app.application.services.cached_entity_service import CachedEntityService, RelatedRefs
from app.domain.enums import CacheEntity


class CustomerService(CachedEntityService[CustomerResult, CustomerData]):
    """Customer writes; a delete also drops the cached views of the cascaded orders."""

    entity = CacheEntity.CUSTOMER
    result_type = CustomerResult
    _repo: ICustomerRepository

    async def _related_for_delete(self, before: CustomerResult) -> RelatedRefs:
        order_ids = await self._repo.get_order_ids(before.id)
        return [(CacheEntity.ORDER, order_id) for order_id in order_ids]
