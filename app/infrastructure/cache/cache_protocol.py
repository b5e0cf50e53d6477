"""Cache tier protocol used by HybridCache (DIP).

A tier stores opaque serialized payloads with an independent per-entry
TTL. L1 (MemoryCacheTier) and L2 (RedisCacheTier, optionally wrapped in
CircuitBreakerTier) both implement it.
"""

from datetime import timedelta
from typing import Protocol


class CacheTier(Protocol):
    """Protocol for cache tiers. L2 implementations raise CacheTierUnavailableError on failure."""

    name: str

    def is_available(self) -> bool:
        """Return True if the tier is connected and usable."""
        ...

    async def get(self, key: str) -> bytes | None:
        """Return the stored payload, or None on miss or expiry."""
        ...

    async def set(self, key: str, value: bytes, ttl: timedelta) -> None:
        """Store payload; it expires after ttl."""
        ...

    async def delete(self, key: str) -> None:
        """Remove key. Absent keys are not an error."""
        ...

    async def clear(self) -> None:
        """Remove every entry this tier owns."""
        ...
