"""Builds the cache stack from settings.

L1 is always a MemoryCacheTier. L2 is a RedisCacheTier wrapped in a
CircuitBreakerTier when cache_redis_url is set, otherwise absent.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.infrastructure.cache.circuit_breaker import CircuitBreakerTier
from app.infrastructure.cache.hybrid_cache import HybridCache
from app.infrastructure.cache.invalidation import InvalidationPolicy
from app.infrastructure.cache.keys import CacheKeyBuilder
from app.infrastructure.cache.memory_cache import MemoryCacheTier
from app.infrastructure.cache.policy import CacheConfig
from app.infrastructure.cache.redis_cache import RedisCacheTier

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


def build_hybrid_cache(settings: Settings) -> tuple[HybridCache, RedisCacheTier | None]:
    """Create the engine and return it with the raw Redis tier (for connect/disconnect).

    Redis is not contacted here; call RedisCacheTier.connect() on startup.
    """
    config = CacheConfig.from_settings(settings)
    l1 = MemoryCacheTier(max_entries=config.l1_max_entries)
    redis_tier: RedisCacheTier | None = None
    l2: CircuitBreakerTier | None = None
    if settings.cache_redis_url:
        redis_tier = RedisCacheTier(
            settings.cache_redis_url,
            timeout_seconds=config.l2_timeout.total_seconds(),
            namespace_pattern=f"{config.version}:*",
        )
        l2 = CircuitBreakerTier(
            redis_tier,
            failure_threshold=config.l2_failure_threshold,
            reset_timeout=config.l2_circuit_reset,
            call_timeout=config.l2_timeout,
        )
    logger.info(
        "Cache configured: enabled=%s version=%s l2=%s format=%s",
        config.enabled,
        config.version,
        "redis" if l2 is not None else "none",
        config.serialization_format,
    )
    return HybridCache(config, l1=l1, l2=l2), redis_tier


def build_invalidation_policy(config: CacheConfig) -> InvalidationPolicy:
    return InvalidationPolicy(CacheKeyBuilder(config.version), config.max_cached_pages)
