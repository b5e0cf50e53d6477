"""Entity-aware cache invalidation.

Maps a committed write to the exact set of keys whose cached value may
now be stale. Pure: computes keys only, HybridCache.remove_all applies them.

Rules:
    * every write drops the entity's list keys (all + cacheable pages)
      and the item key of the written id. For CREATE this clears a
      cached "not found" for the new id.
    * an order related to a customer drops that customer's order list
      (old and new customer on update).
    * a customer delete related to orders drops each order's item key,
      the order list keys and the deleted customer's order list.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from app.domain.enums import CacheEntity, WriteOperation
from app.infrastructure.cache.keys import CacheKeyBuilder

RelatedRef = tuple[CacheEntity, int]


@dataclass(frozen=True)
class InvalidationEvent:
    """A committed write and the rows it touched besides the written one."""

    entity: CacheEntity
    operation: WriteOperation
    entity_id: int
    related: tuple[RelatedRef, ...] = field(default_factory=tuple)


class InvalidationPolicy:
    """Computes invalidation key sets for write events."""

    def __init__(self, key_builder: CacheKeyBuilder, max_cached_pages: int) -> None:
        self.key_builder = key_builder
        self.max_cached_pages = max_cached_pages

    def list_keys(self, entity: CacheEntity) -> set[str]:
        """The 'all' key plus every page key that may be cached."""
        keys = {self.key_builder.all_key(entity)}
        keys.update(
            self.key_builder.page_key(entity, page)
            for page in range(1, self.max_cached_pages + 1)
        )
        return keys

    def on_write(
        self,
        entity: CacheEntity,
        operation: WriteOperation,
        entity_id: int,
        related: Iterable[RelatedRef] = (),
    ) -> set[str]:
        """Return the keys to remove after a successful write."""
        entity = CacheEntity(entity)
        operation = WriteOperation(operation)
        keys = self.list_keys(entity)
        keys.add(self.key_builder.item_key(entity, entity_id))

        for related_entity, related_id in related:
            related_entity = CacheEntity(related_entity)
            if entity is CacheEntity.ORDER and related_entity is CacheEntity.CUSTOMER:
                keys.add(self.key_builder.customer_orders_key(related_id))
            elif entity is CacheEntity.CUSTOMER and related_entity is CacheEntity.ORDER:
                keys.add(self.key_builder.item_key(CacheEntity.ORDER, related_id))
                keys.update(self.list_keys(CacheEntity.ORDER))
            else:
                keys.add(self.key_builder.item_key(related_entity, related_id))

        if entity is CacheEntity.CUSTOMER and operation is WriteOperation.DELETE:
            keys.add(self.key_builder.customer_orders_key(entity_id))
        return keys

    def for_event(self, event: InvalidationEvent) -> set[str]:
        return self.on_write(event.entity, event.operation, event.entity_id, event.related)
