"""DTOs for customers (no dependency on ORM)."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CustomerData:
    """Fields written by create and update."""

    name: str
    email: str


@dataclass(frozen=True)
class CustomerResult:
    """Customer read-model."""

    id: int
    name: str
    email: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "email": self.email}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CustomerResult":
        return cls(id=data["id"], name=data["name"], email=data["email"])
