"""Domain enumerations for the e-shop application.

Enums represent fixed sets of domain values: cached entity types, the
operation dimension of cache keys, operation classes for TTLs, and
write operations that trigger invalidation.
"""

from enum import Enum


class CacheEntity(str, Enum):
    """Entity types that appear as the second field of a cache key."""

    PRODUCT = "product"
    CUSTOMER = "customer"
    ORDER = "order"

    @classmethod
    def values(cls) -> list[str]:
        """Return all entity names as strings."""
        return [entity.value for entity in cls]


class CacheOperation(str, Enum):
    """Operation dimension of a cache key (third field)."""

    ALL = "all"
    ID = "id"
    PAGE = "page"
    CUSTOMER = "customer"

    @property
    def requires_identifier(self) -> bool:
        """True when keys for this operation carry a fourth (identifier) field."""
        return self is not CacheOperation.ALL

    @property
    def operation_class(self) -> "OperationClass":
        """Map the operation to its TTL class (list or item)."""
        if self in (CacheOperation.ALL, CacheOperation.PAGE):
            return OperationClass.LIST
        return OperationClass.ITEM


class OperationClass(str, Enum):
    """TTL class of a cached read: whole lists/pages vs single items or scoped lookups."""

    LIST = "list"
    ITEM = "item"


class WriteOperation(str, Enum):
    """Write that produced an invalidation event."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
