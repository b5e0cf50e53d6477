"""Order repository. Returns application DTOs with order lines."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.order import OrderData, OrderItemResult, OrderResult
from app.domain.exceptions import RelatedResourceMissingException, ValidationException
from app.infrastructure.persistence.models.customer import Customer
from app.infrastructure.persistence.models.order import Order, OrderItem
from app.infrastructure.persistence.models.product import Product
from app.infrastructure.persistence.repositories.base import BaseRepository, missing_ids
from app.shared.utils.datetime import ensure_utc


def _order_to_result(o: Order) -> OrderResult:
    """Map ORM Order (items loaded) to application OrderResult."""
    return OrderResult(
        id=o.id,
        customer_id=o.customer_id,
        order_date=ensure_utc(o.order_date),
        items=tuple(
            OrderItemResult(
                product_id=item.product_id,
                quantity=item.quantity,
                unit_price=item.unit_price,
            )
            for item in sorted(o.items, key=lambda i: i.product_id)
        ),
    )


def _new_items(data: OrderData) -> list[OrderItem]:
    return [
        OrderItem(product_id=item.product_id, quantity=item.quantity, unit_price=item.unit_price)
        for item in data.items
    ]


class OrderRepository(BaseRepository[Order, OrderResult, OrderData]):
    """Order repository. Validates customer and product references before writing."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Order)

    def _to_result(self, obj: Order) -> OrderResult:
        return _order_to_result(obj)

    def _new(self, data: OrderData) -> Order:
        return Order(customer_id=data.customer_id, items=_new_items(data))

    def _apply(self, obj: Order, data: OrderData) -> None:
        obj.customer_id = data.customer_id
        obj.items = _new_items(data)

    async def _before_write(self, data: OrderData) -> None:
        product_ids = [item.product_id for item in data.items]
        if len(set(product_ids)) != len(product_ids):
            raise ValidationException("Each product may appear only once per order", "items")
        if await self.db.get(Customer, data.customer_id) is None:
            raise RelatedResourceMissingException("customer", data.customer_id)
        if product_ids:
            result = await self.db.execute(select(Product.id).where(Product.id.in_(product_ids)))
            missing = missing_ids(product_ids, list(result.scalars().all()))
            if missing:
                raise RelatedResourceMissingException("product", missing[0])

    async def get_by_customer(self, customer_id: int) -> list[OrderResult]:
        """Return the customer's orders ordered by id."""
        return [self._to_result(o) for o in await self.find(Order.customer_id == customer_id)]
