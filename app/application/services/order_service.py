"""Order service: cached order reads, including orders by customer."""

from __future__ import annotations

from typing import Any

from app.application.dtos.order import OrderData, OrderResult
from app.application.interfaces.repositories import IOrderRepository
from app.application.services.cached_entity_service import CachedEntityService, RelatedRefs
from app.domain.enums import CacheEntity, CacheOperation


class OrderService(CachedEntityService[OrderResult, OrderData]):
    """Order writes also drop the order list of every customer involved.

    On update that is both the old and the new customer, so moving an
    order between customers refreshes both lists.
    """

    entity = CacheEntity.ORDER
    result_type = OrderResult
    _repo: IOrderRepository

    async def get_by_customer(self, customer_id: int) -> list[OrderResult]:
        """Return a customer's orders (cached under order:customer:<id>)."""

        async def load() -> list[dict[str, Any]]:
            return [o.to_dict() for o in await self._repo.get_by_customer(customer_id)]

        data = await self._cached(
            self._keys.customer_orders_key(customer_id), CacheOperation.CUSTOMER, load
        )
        return [OrderResult.from_dict(d) for d in data]

    def _related(self, before: OrderResult | None, after: OrderResult | None) -> RelatedRefs:
        customer_ids = {o.customer_id for o in (before, after) if o is not None}
        return [(CacheEntity.CUSTOMER, cid) for cid in sorted(customer_ids)]
