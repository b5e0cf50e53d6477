"""DTOs for products (no dependency on ORM)."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any


@dataclass(frozen=True)
class ProductData:
    """Fields written by create and update (update replaces all of them)."""

    name: str
    price: Decimal
    description: str | None = None


@dataclass(frozen=True)
class ProductResult:
    """Product read-model (result of get_by_id, get_all, create, update)."""

    id: int
    name: str
    description: str | None
    price: Decimal

    def to_dict(self) -> dict[str, Any]:
        """Cacheable form; price as a string to keep exact decimal digits."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": str(self.price),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProductResult":
        return cls(
            id=data["id"],
            name=data["name"],
            description=data.get("description"),
            price=Decimal(data["price"]),
        )
