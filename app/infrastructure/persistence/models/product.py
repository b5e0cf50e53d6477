"""Product ORM model. Table: product. Name is unique."""

from decimal import Decimal

from sqlalchemy import CheckConstraint, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import IntIdMixin, TimestampMixin


class Product(IntIdMixin, TimestampMixin, Base):
    """Catalogue product."""

    __tablename__ = "product"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)

    __table_args__ = (CheckConstraint("price >= 0", name="product_price_non_negative"),)
