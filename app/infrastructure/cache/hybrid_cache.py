"""Two-tier read-through cache engine.

Lookup order is L1 (process memory) -> L2 (Redis, optional) -> loader.
An L2 hit back-fills L1 with the local TTL; a loader result is written to
both tiers. Concurrent misses on the same key in this process share one
fill task, so the loader runs once per key per expiry. A fill invalidated
while running keeps its slot until it finishes but stores nothing.

L2 failures never fail a read or a write: they are logged and the call
continues as if L2 were not configured. Loader exceptions propagate
unchanged and nothing is cached.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import asdict, dataclass
from datetime import timedelta
from typing import Any

from app.infrastructure.cache.cache_protocol import CacheTier
from app.infrastructure.cache.circuit_breaker import CircuitBreakerTier
from app.infrastructure.cache.exceptions import CacheTierUnavailableError
from app.infrastructure.cache.memory_cache import MemoryCacheTier
from app.infrastructure.cache.policy import CacheConfig
from app.infrastructure.cache.serializers import PayloadSerializer, get_serializer

logger = logging.getLogger(__name__)

Loader = Callable[[], Awaitable[Any]]

# Errors from the L2 tier that mean "L2 absent for this call".
_L2_FAILURES: tuple[type[BaseException], ...] = (
    CacheTierUnavailableError,
    TimeoutError,
    OSError,
)


@dataclass
class CacheStats:
    """Running counters since process start (or the last reset)."""

    l1_hits: int = 0
    l2_hits: int = 0
    misses: int = 0
    loads: int = 0
    load_failures: int = 0
    bypasses: int = 0
    stampede_joins: int = 0
    stampede_timeouts: int = 0
    l2_errors: int = 0
    invalidations: int = 0
    invalidation_failures: int = 0

    @property
    def lookups(self) -> int:
        return self.l1_hits + self.l2_hits + self.misses

    @property
    def hit_rate_percent(self) -> float:
        if self.lookups == 0:
            return 0.0
        return round(100.0 * (self.l1_hits + self.l2_hits) / self.lookups, 2)


@dataclass(frozen=True)
class _Fill:
    """Outcome of one fill task: a payload to decode, or a raw uncacheable value."""

    payload: bytes | None = None
    value: Any = None


class HybridCache:
    """Read-through cache over an L1 tier and an optional L2 tier.

    Args:
        config: Immutable cache configuration snapshot.
        l1: Local tier; defaults to a MemoryCacheTier sized from config.
        l2: Shared tier (usually a RedisCacheTier behind a CircuitBreakerTier).
        serializer: Payload codec; defaults to config.serialization_format.
    """

    def __init__(
        self,
        config: CacheConfig,
        l1: CacheTier | None = None,
        l2: CacheTier | None = None,
        serializer: PayloadSerializer | None = None,
    ) -> None:
        self.config = config
        self.l1 = l1 if l1 is not None else MemoryCacheTier(config.l1_max_entries)
        self.l2 = l2
        self.serializer = serializer or get_serializer(config.serialization_format)
        self.counters = CacheStats()
        self._inflight: dict[str, asyncio.Task[_Fill]] = {}
        # Fills invalidated while running: they keep their slot but never store.
        self._superseded: set[asyncio.Task[_Fill]] = set()

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def _log_op(self, message: str, *args: Any) -> None:
        if self.config.log_operations:
            logger.debug(message, *args)

    async def get_or_create(
        self,
        key: str,
        loader: Loader,
        ttl: timedelta | None = None,
    ) -> Any:
        """Return the cached value for key, calling loader on a miss.

        Args:
            key: Cache key built by CacheKeyBuilder.
            loader: Zero-argument coroutine function producing the value.
                Values must be serializable by the configured codec.
            ttl: L2 time-to-live; L1 uses ttl * l1_to_l2_ratio, or the full ttl
                when L2 did not take the value. Defaults to the TTL policy default.

        Returns:
            The decoded cached value, or the freshly loaded one.

        Raises:
            Exception: Whatever loader raises, unchanged. Nothing is cached.
        """
        if not self.config.enabled:
            self.counters.bypasses += 1
            return await loader()
        if len(key) > self.config.max_key_length:
            self.counters.bypasses += 1
            logger.warning(
                "Cache key longer than %d characters, serving uncached: %s...",
                self.config.max_key_length,
                key[:64],
            )
            return await loader()

        ttl = ttl if ttl is not None else self.config.ttl_policy.default
        lock_timeout = self.config.stampede_lock_timeout.total_seconds() or None
        while True:
            payload = await self.l1.get(key)
            if payload is not None:
                self.counters.l1_hits += 1
                self._log_op("Cache L1 HIT: %s", key)
                return self.serializer.loads(payload)

            task = self._inflight.get(key)
            if task is not None and task in self._superseded:
                # An invalidated fill still holds the slot; its value may predate
                # the write, so wait it out and start a fresh fill afterwards.
                self._log_op("Cache fill for %s superseded, waiting for it to finish", key)
                done, _ = await asyncio.wait((task,), timeout=lock_timeout)
                if not done:
                    return await self._load_uncached(key, loader, lock_timeout)
                self._release(key, task)
                continue
            break

        timeout: float | None = None
        if task is None:
            task = asyncio.create_task(self._fill(key, loader, ttl), name=f"cache-fill:{key}")
            self._inflight[key] = task
            task.add_done_callback(lambda done, key=key: self._release(key, done))
        else:
            # Only joiners are bounded; the caller that started the fill waits for its own loader.
            self.counters.stampede_joins += 1
            self._log_op("Cache fill in progress, waiting: %s", key)
            timeout = lock_timeout

        # asyncio.wait never cancels the task, so a cancelled caller leaves the
        # shared fill running for everyone else.
        done, _ = await asyncio.wait((task,), timeout=timeout)
        if not done:
            return await self._load_uncached(key, loader, timeout)

        fill = task.result()
        if fill.payload is None:
            return fill.value
        # Each caller decodes its own copy so shared results are never aliased.
        return self.serializer.loads(fill.payload)

    async def _load_uncached(self, key: str, loader: Loader, waited: float | None) -> Any:
        self.counters.stampede_timeouts += 1
        logger.warning(
            "Waited %.1fs for cache fill of %s; loading without cache",
            waited or 0.0,
            key,
        )
        return await loader()

    async def _fill(self, key: str, loader: Loader, ttl: timedelta) -> _Fill:
        payload = await self._l2_get(key)
        if payload is not None:
            self.counters.l2_hits += 1
            self._log_op("Cache L2 HIT: %s", key)
            if self._owns_slot(key):
                await self.l1.set(key, payload, self.config.local_ttl(ttl))
            return _Fill(payload=payload)

        self.counters.misses += 1
        self.counters.loads += 1
        self._log_op("Cache MISS: %s", key)
        try:
            value = await loader()
        except Exception:
            self.counters.load_failures += 1
            raise

        try:
            payload = self.serializer.dumps(value)
        except (TypeError, ValueError, OverflowError) as e:
            logger.warning("Cache value for %s is not serializable, serving uncached: %s", key, e)
            return _Fill(value=value)
        if len(payload) > self.config.max_payload_bytes:
            logger.warning(
                "Cache payload for %s is %d bytes (limit %d), serving uncached",
                key,
                len(payload),
                self.config.max_payload_bytes,
            )
            return _Fill(value=value)

        if not self._owns_slot(key):
            # Removed while loading: the result may predate the write.
            self._log_op("Cache fill for %s superseded by invalidation, not stored", key)
            return _Fill(payload=payload)
        # L1 is the only copy when L2 is absent or refused the write, so it keeps the full TTL.
        stored_in_l2 = await self._l2_set(key, payload, ttl)
        if self._owns_slot(key):
            await self.l1.set(key, payload, self.config.local_ttl(ttl) if stored_in_l2 else ttl)
        return _Fill(payload=payload)

    def _owns_slot(self, key: str) -> bool:
        task = asyncio.current_task()
        return self._inflight.get(key) is task and task not in self._superseded

    def _release(self, key: str, task: asyncio.Task[_Fill]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        self._superseded.discard(task)
        if task.done() and not task.cancelled():
            # Mark the exception retrieved; waiters re-raise it via result().
            task.exception()

    def _l2_ready(self) -> bool:
        return self.l2 is not None and self.l2.is_available()

    def _l2_failed(self, operation: str, key: str, error: BaseException) -> None:
        self.counters.l2_errors += 1
        logger.warning(
            "L2 cache %s failed for %s, continuing without L2: %s",
            operation,
            key,
            str(error) or type(error).__name__,
        )

    def _l2_deadline(self) -> float | None:
        # A breaker with its own call timeout must see the timeout itself,
        # otherwise the cancellation never counts as a failure.
        if isinstance(self.l2, CircuitBreakerTier) and self.l2.call_timeout is not None:
            return None
        return self.config.l2_timeout.total_seconds()

    async def _l2_get(self, key: str) -> bytes | None:
        if not self._l2_ready():
            return None
        try:
            return await asyncio.wait_for(self.l2.get(key), timeout=self._l2_deadline())
        except _L2_FAILURES as e:
            self._l2_failed("get", key, e)
            return None

    async def _l2_set(self, key: str, payload: bytes, ttl: timedelta) -> bool:
        """Write to L2; False when L2 is absent or the write failed."""
        if not self._l2_ready():
            return False
        try:
            await asyncio.wait_for(self.l2.set(key, payload, ttl), timeout=self._l2_deadline())
        except _L2_FAILURES as e:
            self._l2_failed("set", key, e)
            return False
        return True

    async def _l2_delete(self, key: str) -> bool:
        if self.l2 is None:
            return True
        if not self.l2.is_available():
            self._l2_failed("delete", key, CacheTierUnavailableError(self.l2.name, "delete"))
            return False
        try:
            await asyncio.wait_for(self.l2.delete(key), timeout=self._l2_deadline())
        except _L2_FAILURES as e:
            self._l2_failed("delete", key, e)
            return False
        return True

    async def _remove_one(self, key: str) -> bool:
        # A fill started before this removal keeps its slot until it finishes
        # but does not store its (possibly stale) result.
        task = self._inflight.get(key)
        if task is not None:
            self._superseded.add(task)
        ok = True
        try:
            await self.l1.delete(key)
        except Exception:
            logger.exception("L1 cache delete failed for %s", key)
            ok = False
        if not await self._l2_delete(key):
            ok = False
        return ok

    async def remove(self, key: str) -> None:
        """Remove key from both tiers. Idempotent; failures are logged, never raised."""
        if not await self._remove_one(key):
            self.counters.invalidation_failures += 1
        self.counters.invalidations += 1
        self._log_op("Cache REMOVE: %s", key)

    async def remove_all(self, keys: Iterable[str]) -> set[str]:
        """Remove every key from both tiers, best effort.

        A failure on one key or tier does not stop the others. Keys left
        behind expire by TTL.

        Returns:
            Keys whose removal failed on at least one tier (empty on success).
        """
        ordered = sorted(set(keys))
        if not ordered:
            return set()
        results = await asyncio.gather(*(self._remove_one(key) for key in ordered))
        failed = {key for key, ok in zip(ordered, results) if not ok}
        self.counters.invalidations += len(ordered)
        self.counters.invalidation_failures += len(failed)
        if failed:
            logger.warning(
                "Cache invalidation incomplete: %d of %d keys not removed from every tier, "
                "they will expire by TTL: %s",
                len(failed),
                len(ordered),
                sorted(failed),
            )
        else:
            self._log_op("Cache INVALIDATE: %s", ordered)
        return failed

    async def clear(self) -> None:
        """Empty L1 and this version's L2 namespace. Used by scripts and tests."""
        self._superseded.update(self._inflight.values())
        await self.l1.clear()
        if self._l2_ready():
            try:
                await self.l2.clear()
            except _L2_FAILURES as e:
                self._l2_failed("clear", "*", e)
        logger.info("Cache cleared (version %s)", self.config.version)

    def stats(self) -> dict[str, Any]:
        """Snapshot of counters plus tier and configuration facts for monitoring."""
        data: dict[str, Any] = asdict(self.counters)
        data["lookups"] = self.counters.lookups
        data["hit_rate_percent"] = self.counters.hit_rate_percent
        data["target_hit_rate_percent"] = self.config.target_hit_rate_percent
        data["meets_target"] = (
            self.counters.lookups > 0
            and self.counters.hit_rate_percent >= self.config.target_hit_rate_percent
        )
        data["enabled"] = self.config.enabled
        data["version"] = self.config.version
        data["serialization_format"] = self.serializer.format_name
        data["l1_entries"] = len(self.l1) if hasattr(self.l1, "__len__") else None
        data["l2_configured"] = self.l2 is not None
        data["l2_available"] = self._l2_ready()
        state = getattr(self.l2, "state", None)
        data["l2_circuit_state"] = state.value if state is not None else None
        data["inflight_fills"] = len(self._inflight)
        return data

    def reset_stats(self) -> None:
        self.counters = CacheStats()
