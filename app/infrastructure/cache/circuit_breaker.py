"""Circuit breaker wrapper for an L2 cache tier.

After failure_threshold consecutive tier failures the circuit opens and
every call raises CircuitOpenError without touching the tier. Once
reset_timeout has passed, one trial call is let through (half-open): a
success closes the circuit, a failure opens it again for another window.
With call_timeout set, a call that outlasts it raises TimeoutError and
counts as a failure, so a hung tier trips the circuit like a dead one.
HybridCache treats CircuitOpenError like any other tier failure.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import TypeVar

from app.infrastructure.cache.cache_protocol import CacheTier
from app.infrastructure.cache.exceptions import CacheTierUnavailableError, CircuitOpenError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Failing, reject calls
    HALF_OPEN = "half_open"  # One trial call in flight


@dataclass
class CircuitBreakerMetrics:
    """Counters for monitoring the breaker."""

    total_calls: int = 0
    failed_calls: int = 0
    rejected_calls: int = 0
    circuit_opens: int = 0


class CircuitBreakerTier:
    """CacheTier decorator that short-circuits a failing tier for a cool-down window."""

    def __init__(
        self,
        inner: CacheTier,
        *,
        failure_threshold: int = 5,
        reset_timeout: timedelta = timedelta(seconds=30),
        call_timeout: timedelta | None = None,
        failure_exceptions: tuple[type[BaseException], ...] = (
            CacheTierUnavailableError,
            TimeoutError,
            OSError,
        ),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if failure_threshold < 1:
            raise ValueError(f"failure_threshold must be positive, got {failure_threshold}")
        self.inner = inner
        self.name = inner.name
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout.total_seconds()
        self.call_timeout = call_timeout.total_seconds() if call_timeout is not None else None
        self.failure_exceptions = failure_exceptions
        self._clock = clock
        self.state = CircuitState.CLOSED
        self.failure_count = 0
        self.opened_at: float | None = None
        self.metrics = CircuitBreakerMetrics()

    def is_available(self) -> bool:
        return self.inner.is_available()

    def _before_call(self, operation: str) -> None:
        if self.state is CircuitState.CLOSED:
            return
        if self.state is CircuitState.HALF_OPEN:
            # A trial call is already in flight; keep shedding load until it settles.
            self.metrics.rejected_calls += 1
            raise CircuitOpenError(self.name, operation, 0.0)
        elapsed = self._clock() - (self.opened_at or 0.0)
        if elapsed >= self.reset_timeout:
            self.state = CircuitState.HALF_OPEN
            logger.info("Circuit breaker for %s cache tier half-open; trying one call", self.name)
            return
        self.metrics.rejected_calls += 1
        raise CircuitOpenError(self.name, operation, self.reset_timeout - elapsed)

    def _record_success(self) -> None:
        if self.state is not CircuitState.CLOSED:
            logger.info("Circuit breaker for %s cache tier closed", self.name)
        self.state = CircuitState.CLOSED
        self.failure_count = 0
        self.opened_at = None

    def _record_failure(self) -> None:
        self.metrics.failed_calls += 1
        self.failure_count += 1
        if self.state is CircuitState.HALF_OPEN or self.failure_count >= self.failure_threshold:
            self.state = CircuitState.OPEN
            self.opened_at = self._clock()
            self.metrics.circuit_opens += 1
            logger.warning(
                "Circuit breaker for %s cache tier opened after %d consecutive failures; "
                "skipping it for %.0fs",
                self.name,
                self.failure_count,
                self.reset_timeout,
            )

    async def _call(self, operation: str, func: Callable[[], Awaitable[T]]) -> T:
        self._before_call(operation)
        self.metrics.total_calls += 1
        try:
            async with asyncio.timeout(self.call_timeout):
                result = await func()
        except self.failure_exceptions:
            self._record_failure()
            raise
        except BaseException:
            # Cancellation or a programming error: not evidence the tier is down.
            if self.state is CircuitState.HALF_OPEN:
                self.state = CircuitState.OPEN
                self.opened_at = self._clock()
            raise
        self._record_success()
        return result

    async def get(self, key: str) -> bytes | None:
        return await self._call("get", lambda: self.inner.get(key))

    async def set(self, key: str, value: bytes, ttl: timedelta) -> None:
        await self._call("set", lambda: self.inner.set(key, value, ttl))

    async def delete(self, key: str) -> None:
        await self._call("delete", lambda: self.inner.delete(key))

    async def clear(self) -> None:
        await self._call("clear", self.inner.clear)
