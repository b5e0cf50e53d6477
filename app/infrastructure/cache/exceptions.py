"""Cache-layer exceptions.

InvalidCacheKeyError is a programmer error and always propagates.
CacheTierUnavailableError (and CircuitOpenError) are raised by L2 tiers
and recovered inside HybridCache; callers of the engine never see them.
"""

from app.domain.exceptions import EShopException


class InvalidCacheKeyError(EShopException, ValueError):
    """Raised when a cache key cannot be built from the given components."""

    def __init__(self, message: str, component: str | None = None) -> None:
        details = {"component": component} if component else {}
        super().__init__(message, "INVALID_CACHE_KEY", details)


class CacheTierUnavailableError(EShopException):
    """Raised by a cache tier when its backing service errors or times out."""

    def __init__(self, tier: str, operation: str, reason: str = "") -> None:
        """Initialize with tier name, failed operation and reason.

        Args:
            tier: Tier identifier (e.g. 'redis').
            operation: Operation that failed ('get', 'set', 'delete', ...).
            reason: Underlying error text.
        """
        message = f"Cache tier {tier} unavailable during {operation}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            message,
            "CACHE_TIER_UNAVAILABLE",
            {"tier": tier, "operation": operation},
        )


class CircuitOpenError(CacheTierUnavailableError):
    """Raised without calling the tier while its circuit breaker is open."""

    def __init__(self, tier: str, operation: str, retry_after: float) -> None:
        super().__init__(tier, operation, f"circuit open, retry in {retry_after:.1f}s")
        self.error_code = "CACHE_CIRCUIT_OPEN"
        self.details["retry_after"] = retry_after
