"""Cache key builder. Single place for key format (DRY).

Format: {version}:{entity}:{operation}[:{identifier}]

    v1:product:all
    v1:product:id:123
    v1:product:page:1
    v1:order:customer:456

Key components must not contain CACHE_KEY_SEP to avoid ambiguous or
colliding keys. The version comes from configuration: bumping it makes
every older key unreachable without deleting anything.
"""

from __future__ import annotations

from dataclasses import dataclass

from app.core.constants import CACHE_KEY_MIN_FIELDS, CACHE_KEY_SEP
from app.domain.enums import CacheEntity, CacheOperation
from app.infrastructure.cache.exceptions import InvalidCacheKeyError

_LIST_OPERATIONS = frozenset({CacheOperation.ALL.value, CacheOperation.PAGE.value})


def _validate_key_component(value: str, name: str) -> None:
    """Raise InvalidCacheKeyError if value is empty, non-ASCII or contains the separator.

    Args:
        value: String component used in a cache key.
        name: Name of the component (for error message).

    Raises:
        InvalidCacheKeyError: If the component is unusable.
    """
    if not value:
        raise InvalidCacheKeyError(f"Cache key component {name!r} must not be empty", name)
    if CACHE_KEY_SEP in value:
        raise InvalidCacheKeyError(
            f"Cache key component {name!r} must not contain separator {CACHE_KEY_SEP!r}",
            name,
        )
    if not value.isascii():
        raise InvalidCacheKeyError(f"Cache key component {name!r} must be ASCII", name)


def _component(value: CacheEntity | CacheOperation | str) -> str:
    return value.value if isinstance(value, (CacheEntity, CacheOperation)) else value


@dataclass(frozen=True)
class ParsedCacheKey:
    """Fields of a cache key, as produced by CacheKeyBuilder.parse."""

    version: str
    entity: str
    operation: str
    identifier: int | None = None

    @property
    def is_list(self) -> bool:
        return self.operation in _LIST_OPERATIONS


class CacheKeyBuilder:
    """Builds and parses versioned cache keys. Pure: no state beyond the version."""

    def __init__(self, version: str) -> None:
        _validate_key_component(version, "version")
        self._version = version

    @property
    def version(self) -> str:
        return self._version

    def build(
        self,
        entity: CacheEntity | str,
        operation: CacheOperation | str,
        identifier: int | None = None,
    ) -> str:
        """Build a key from entity, operation and optional identifier.

        Args:
            entity: Entity type (e.g. CacheEntity.PRODUCT or 'product').
            operation: One of all, id, page, customer.
            identifier: Required for id/page/customer, forbidden for all.
                Must be a non-negative integer.

        Returns:
            The cache key string.

        Raises:
            InvalidCacheKeyError: On any malformed component.
        """
        entity_name = _component(entity)
        operation_name = _component(operation)
        _validate_key_component(entity_name, "entity")
        _validate_key_component(operation_name, "operation")
        try:
            op = CacheOperation(operation_name)
        except ValueError:
            raise InvalidCacheKeyError(
                f"Unknown cache operation {operation_name!r}", "operation"
            ) from None

        parts = [self._version, entity_name, op.value]
        if op.requires_identifier:
            if identifier is None:
                raise InvalidCacheKeyError(
                    f"Cache operation {op.value!r} requires an identifier", "identifier"
                )
            if isinstance(identifier, bool) or not isinstance(identifier, int):
                raise InvalidCacheKeyError(
                    f"Cache key identifier must be an integer, got {type(identifier).__name__}",
                    "identifier",
                )
            if identifier < 0:
                raise InvalidCacheKeyError(
                    f"Cache key identifier must be non-negative, got {identifier}",
                    "identifier",
                )
            parts.append(str(identifier))
        elif identifier is not None:
            raise InvalidCacheKeyError(
                f"Cache operation {op.value!r} does not take an identifier", "identifier"
            )
        return CACHE_KEY_SEP.join(parts)

    def all_key(self, entity: CacheEntity | str) -> str:
        """Key for the full list of an entity (e.g. v1:product:all)."""
        return self.build(entity, CacheOperation.ALL)

    def item_key(self, entity: CacheEntity | str, entity_id: int) -> str:
        """Key for a single entity by ID (e.g. v1:product:id:123)."""
        return self.build(entity, CacheOperation.ID, entity_id)

    def page_key(self, entity: CacheEntity | str, page: int) -> str:
        """Key for one page of an entity list (e.g. v1:product:page:1)."""
        return self.build(entity, CacheOperation.PAGE, page)

    def customer_orders_key(self, customer_id: int) -> str:
        """Key for the orders of one customer (e.g. v1:order:customer:456)."""
        return self.build(CacheEntity.ORDER, CacheOperation.CUSTOMER, customer_id)

    @staticmethod
    def parse(key: str) -> ParsedCacheKey | None:
        """Split a key into its fields; None if it does not have the built shape."""
        parts = key.split(CACHE_KEY_SEP)
        if len(parts) < CACHE_KEY_MIN_FIELDS or len(parts) > CACHE_KEY_MIN_FIELDS + 1:
            return None
        if not all(parts):
            return None
        identifier: int | None = None
        if len(parts) == CACHE_KEY_MIN_FIELDS + 1:
            if not (parts[3].isascii() and parts[3].isdigit()):
                return None
            identifier = int(parts[3])
        return ParsedCacheKey(
            version=parts[0],
            entity=parts[1],
            operation=parts[2],
            identifier=identifier,
        )

    @staticmethod
    def entity_of(key: str) -> str | None:
        """Return the entity field of a key, or None when it has fewer than three fields."""
        parts = key.split(CACHE_KEY_SEP)
        if len(parts) < CACHE_KEY_MIN_FIELDS:
            return None
        return parts[1] or None

    @staticmethod
    def is_list_key(key: str) -> bool:
        """True iff the operation field is 'all' or 'page'."""
        parts = key.split(CACHE_KEY_SEP)
        return len(parts) >= CACHE_KEY_MIN_FIELDS and parts[2] in _LIST_OPERATIONS

    def pattern_for(self, entity: CacheEntity | str) -> str:
        """Prefix shared by every key of an entity under the current version.

        Stores with prefix scan (Redis SCAN MATCH '<prefix>*') can use it for
        bulk removal; HybridCache itself never scans.
        """
        entity_name = _component(entity)
        _validate_key_component(entity_name, "entity")
        return f"{self._version}{CACHE_KEY_SEP}{entity_name}{CACHE_KEY_SEP}"

    def is_key_for_entity(self, key: str, entity: CacheEntity | str) -> bool:
        """True if key belongs to entity under the current version."""
        return key.startswith(self.pattern_for(entity))
