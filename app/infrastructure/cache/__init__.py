"""Cache: two-tier hybrid read-through cache and its collaborators.

Key format lives in keys.py (single place); tiers implement CacheTier;
HybridCache combines them; InvalidationPolicy maps writes to stale keys.
"""

from app.infrastructure.cache.cache_protocol import CacheTier
from app.infrastructure.cache.circuit_breaker import CircuitBreakerTier, CircuitState
from app.infrastructure.cache.exceptions import (
    CacheTierUnavailableError,
    CircuitOpenError,
    InvalidCacheKeyError,
)
from app.infrastructure.cache.factory import build_hybrid_cache, build_invalidation_policy
from app.infrastructure.cache.hybrid_cache import CacheStats, HybridCache
from app.infrastructure.cache.invalidation import InvalidationEvent, InvalidationPolicy
from app.infrastructure.cache.keys import CacheKeyBuilder, ParsedCacheKey
from app.infrastructure.cache.memory_cache import MemoryCacheTier
from app.infrastructure.cache.policy import CacheConfig, TtlPolicy
from app.infrastructure.cache.redis_cache import RedisCacheTier
from app.infrastructure.cache.serializers import (
    JsonSerializer,
    MsgPackSerializer,
    PayloadSerializer,
    get_serializer,
)

__all__ = [
    "CacheConfig",
    "CacheKeyBuilder",
    "CacheStats",
    "CacheTier",
    "CacheTierUnavailableError",
    "CircuitBreakerTier",
    "CircuitOpenError",
    "CircuitState",
    "HybridCache",
    "InvalidCacheKeyError",
    "InvalidationEvent",
    "InvalidationPolicy",
    "JsonSerializer",
    "MemoryCacheTier",
    "MsgPackSerializer",
    "ParsedCacheKey",
    "PayloadSerializer",
    "RedisCacheTier",
    "TtlPolicy",
    "build_hybrid_cache",
    "build_invalidation_policy",
    "get_serializer",
]
