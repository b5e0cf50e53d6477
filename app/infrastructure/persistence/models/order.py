"""Order and OrderItem ORM models.

Order belongs to one customer (CASCADE on customer delete). OrderItem has
a composite primary key (order_id, product_id); a product that appears in
any order cannot be deleted (RESTRICT).
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import IntIdMixin, TimestampMixin
from app.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from app.infrastructure.persistence.models.customer import Customer


class Order(IntIdMixin, TimestampMixin, Base):
    """Customer order with line items (loaded eagerly with selectin)."""

    __tablename__ = "order"

    customer_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("customer.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    order_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, index=True
    )

    customer: Mapped[Customer] = relationship(back_populates="orders")
    items: Mapped[list[OrderItem]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderItem.product_id",
    )


class OrderItem(Base):
    """Order line: quantity of one product at the price charged."""

    __tablename__ = "order_item"

    order_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("order.id", ondelete="CASCADE"), primary_key=True
    )
    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("product.id", ondelete="RESTRICT"), primary_key=True, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)

    order: Mapped[Order] = relationship(back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="order_item_quantity_positive"),
        CheckConstraint("unit_price >= 0", name="order_item_unit_price_non_negative"),
    )
