"""In-process L1 cache tier.

LRU store backed by an OrderedDict with an absolute expiry per entry.
Methods never await while touching the store, so each operation is
atomic with respect to other tasks on the event loop.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Entry:
    value: bytes
    expires_at: float


class MemoryCacheTier:
    """Process-local cache tier with per-entry expiry and capacity-based LRU eviction.

    The clock is injectable (monotonic seconds) so tests can move time
    forward without sleeping.
    """

    name = "memory"

    def __init__(
        self,
        max_entries: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError(f"max_entries must be positive, got {max_entries}")
        self._max_entries = max_entries
        self._clock = clock
        self._store: OrderedDict[str, _Entry] = OrderedDict()
        self.evictions = 0

    def is_available(self) -> bool:
        return True

    async def get(self, key: str) -> bytes | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._store[key]
            return None
        self._store.move_to_end(key)
        return entry.value

    async def set(self, key: str, value: bytes, ttl: timedelta) -> None:
        seconds = ttl.total_seconds()
        if seconds <= 0:
            self._store.pop(key, None)
            return
        self._store[key] = _Entry(value=value, expires_at=self._clock() + seconds)
        self._store.move_to_end(key)
        while len(self._store) > self._max_entries:
            evicted_key, _ = self._store.popitem(last=False)
            self.evictions += 1
            logger.debug("L1 cache evicted LRU key: %s", evicted_key)

    async def delete(self, key: str) -> None:
        self._store.pop(key, None)

    async def clear(self) -> None:
        self._store.clear()
        logger.debug("L1 cache cleared")

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: object) -> bool:
        """True if key is stored and not expired (does not refresh LRU order)."""
        if not isinstance(key, str):
            return False
        entry = self._store.get(key)
        return entry is not None and entry.expires_at > self._clock()
