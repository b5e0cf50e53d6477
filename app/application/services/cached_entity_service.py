"""Cache-aside domain service shared by products, customers and orders.

Reads go through the read-through cache with the TTL from the policy
table. Writes follow a fixed sequence:

    (a) mutate and commit through the repository
    (b) compute the invalidation key set from pre/post state
    (c) remove those keys from every cache tier
    (d) return the result

A failure in (a) propagates and skips (b)/(c). A failure in (c) is
logged by the cache and never turns a committed write into an error.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from app.application.interfaces.repositories import IEntityRepository
from app.application.interfaces.services import ICacheService
from app.domain.enums import CacheEntity, CacheOperation, WriteOperation
from app.domain.exceptions import ResourceNotFoundException, ValidationException

if TYPE_CHECKING:
    from app.infrastructure.cache.invalidation import InvalidationPolicy
    from app.infrastructure.cache.policy import TtlPolicy

logger = logging.getLogger(__name__)

RelatedRefs = Iterable[tuple[CacheEntity, int]]

ResultT = TypeVar("ResultT")
DataT = TypeVar("DataT")


class CachedEntityService(Generic[ResultT, DataT]):
    """Cached reads and invalidating writes for one entity type.

    Subclasses set entity and result_type, and override _related to name
    rows touched by a write besides the written one.
    """

    entity: ClassVar[CacheEntity]
    result_type: ClassVar[Any]

    def __init__(
        self,
        repo: IEntityRepository[ResultT, DataT],
        cache: ICacheService,
        ttl_policy: TtlPolicy,
        invalidation: InvalidationPolicy,
        *,
        page_size: int = 20,
    ) -> None:
        self._repo = repo
        self._cache = cache
        self._ttl_policy = ttl_policy
        self._invalidation = invalidation
        self._keys = invalidation.key_builder
        self._page_size = page_size

    @property
    def max_cached_pages(self) -> int:
        return self._invalidation.max_cached_pages

    def _from_dict(self, data: dict[str, Any]) -> ResultT:
        return self.result_type.from_dict(data)

    async def _cached(self, key: str, operation: CacheOperation, loader: Any) -> Any:
        return await self._cache.get_or_create(
            key, loader, self._ttl_policy.ttl_for(self.entity, operation)
        )

    # Reads

    async def get_all(self) -> list[ResultT]:
        """Return every record (cached under <entity>:all)."""

        async def load() -> list[dict[str, Any]]:
            return [r.to_dict() for r in await self._repo.get_all()]

        data = await self._cached(self._keys.all_key(self.entity), CacheOperation.ALL, load)
        return [self._from_dict(d) for d in data]

    async def get_page(self, page: int) -> list[ResultT]:
        """Return one 1-based page. Pages past max_cached_pages are read uncached.

        Raises:
            ValidationException: If page is not positive.
        """
        if page < 1:
            raise ValidationException(f"page must be >= 1, got {page}", "page")
        if page > self.max_cached_pages:
            return await self._repo.get_page(page, self._page_size)

        async def load() -> list[dict[str, Any]]:
            return [r.to_dict() for r in await self._repo.get_page(page, self._page_size)]

        data = await self._cached(
            self._keys.page_key(self.entity, page), CacheOperation.PAGE, load
        )
        return [self._from_dict(d) for d in data]

    async def get_by_id(self, entity_id: int) -> ResultT | None:
        """Return one record or None. "Not found" is cached too, until the next write."""

        async def load() -> dict[str, Any] | None:
            result = await self._repo.get_by_id(entity_id)
            return result.to_dict() if result is not None else None

        data = await self._cached(
            self._keys.item_key(self.entity, entity_id), CacheOperation.ID, load
        )
        return self._from_dict(data) if data is not None else None

    # Writes

    async def create(self, data: DataT) -> ResultT:
        result = await self._repo.create(data)
        await self._repo.save_changes()
        await self._invalidate(
            WriteOperation.CREATE, self._id_of(result), self._related(None, result)
        )
        return result

    async def update(self, entity_id: int, data: DataT) -> ResultT:
        """Replace a record.

        Raises:
            ResourceNotFoundException: If the record does not exist.
        """
        before = await self._repo.get_by_id(entity_id)
        if before is None:
            raise ResourceNotFoundException(self.entity.value, entity_id)
        result = await self._repo.update(entity_id, data)
        if result is None:
            raise ResourceNotFoundException(self.entity.value, entity_id)
        await self._repo.save_changes()
        await self._invalidate(WriteOperation.UPDATE, entity_id, self._related(before, result))
        return result

    async def delete(self, entity_id: int) -> None:
        """Delete a record.

        Raises:
            ResourceNotFoundException: If the record does not exist.
        """
        before = await self._repo.get_by_id(entity_id)
        if before is None:
            raise ResourceNotFoundException(self.entity.value, entity_id)
        # Collected before the delete: cascaded rows are gone afterwards.
        related = list(await self._related_for_delete(before))
        if not await self._repo.delete(entity_id):
            raise ResourceNotFoundException(self.entity.value, entity_id)
        await self._repo.save_changes()
        await self._invalidate(WriteOperation.DELETE, entity_id, related)

    async def _invalidate(
        self, operation: WriteOperation, entity_id: int, related: RelatedRefs
    ) -> None:
        keys = self._invalidation.on_write(self.entity, operation, entity_id, related)
        failed = await self._cache.remove_all(keys)
        if failed:
            logger.warning(
                "%s %s %s committed; %d stale cache keys left to expire",
                self.entity.value,
                entity_id,
                operation.value,
                len(failed),
            )

    @staticmethod
    def _id_of(result: Any) -> int:
        return result.id

    def _related(self, before: ResultT | None, after: ResultT | None) -> RelatedRefs:
        """Rows besides the written one whose cached views the write changes."""
        return ()

    async def _related_for_delete(self, before: ResultT) -> RelatedRefs:
        return self._related(before, None)
