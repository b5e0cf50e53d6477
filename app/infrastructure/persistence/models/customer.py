"""Customer ORM model. Table: customer. Email is unique; orders are deleted with the customer."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import IntIdMixin, TimestampMixin

if TYPE_CHECKING:
    from app.infrastructure.persistence.models.order import Order


class Customer(IntIdMixin, TimestampMixin, Base):
    """Shop customer."""

    __tablename__ = "customer"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)

    orders: Mapped[list[Order]] = relationship(
        back_populates="customer",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
