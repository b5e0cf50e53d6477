"""DTOs for orders and order lines (no dependency on ORM).

Cached order payloads carry decimals as strings and order_date as an
ISO 8601 string; from_dict restores both.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any


@dataclass(frozen=True)
class OrderItemData:
    """One requested order line."""

    product_id: int
    quantity: int
    unit_price: Decimal


@dataclass(frozen=True)
class OrderData:
    """Fields written by create and update (update replaces the lines)."""

    customer_id: int
    items: tuple[OrderItemData, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class OrderItemResult:
    """Order line read-model."""

    product_id: int
    quantity: int
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict[str, Any]:
        return {
            "product_id": self.product_id,
            "quantity": self.quantity,
            "unit_price": str(self.unit_price),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OrderItemResult":
        return cls(
            product_id=data["product_id"],
            quantity=data["quantity"],
            unit_price=Decimal(data["unit_price"]),
        )


@dataclass(frozen=True)
class OrderResult:
    """Order read-model with its lines."""

    id: int
    customer_id: int
    order_date: datetime
    items: tuple[OrderItemResult, ...] = ()

    @property
    def total(self) -> Decimal:
        return sum((item.line_total for item in self.items), Decimal("0"))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "order_date": self.order_date.isoformat(),
            "items": [item.to_dict() for item in self.items],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OrderResult":
        return cls(
            id=data["id"],
            customer_id=data["customer_id"],
            order_date=datetime.fromisoformat(data["order_date"]),
            items=tuple(OrderItemResult.from_dict(item) for item in data.get("items", [])),
        )
