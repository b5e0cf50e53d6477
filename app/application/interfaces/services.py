"""Service interfaces (ports) for the application layer.

Protocols define contracts for infrastructure services (DIP).
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from datetime import timedelta
from typing import Any, Protocol


# Read-through cache interface (implemented by HybridCache)
class ICacheService(Protocol):
    """Protocol for the read-through cache used by domain services."""

    async def get_or_create(
        self,
        key: str,
        loader: Callable[[], Awaitable[Any]],
        ttl: timedelta | None = None,
    ) -> Any:
        """Return the cached value for key, calling loader on a miss."""

    async def remove(self, key: str) -> None:
        """Remove key from every tier; never raises."""

    async def remove_all(self, keys: Iterable[str]) -> set[str]:
        """Remove keys best effort; return those that failed on some tier."""
