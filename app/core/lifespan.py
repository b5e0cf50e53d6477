"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic (SRP). Used by main.py;
no business logic here, only wiring of infrastructure (hybrid cache,
Redis connection, DB tables in development, DB engine dispose).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.core.config import get_settings
from app.infrastructure.cache import build_hybrid_cache, build_invalidation_policy

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: hybrid cache (L1, plus Redis L2 when CACHE_REDIS_URL is
    set), optional table creation. Shutdown order: Redis disconnect, SQL
    engine dispose.
    """
    settings = get_settings()

    # ---- Startup ----
    cache, redis_tier = build_hybrid_cache(settings)
    if redis_tier is not None:
        # A failed ping is logged inside connect(); the app still starts on L1.
        await redis_tier.connect()
    app.state.cache = cache
    app.state.redis_tier = redis_tier
    app.state.invalidation_policy = build_invalidation_policy(cache.config)

    if settings.database_create_tables:
        from app.infrastructure.persistence.database import create_tables

        await create_tables()

    yield

    # ---- Shutdown ----
    if getattr(app.state, "redis_tier", None) is not None:
        await app.state.redis_tier.disconnect()
        app.state.redis_tier = None

    stats = app.state.cache.stats()
    logger.info(
        "Cache stats at shutdown: hit rate %.2f%% over %d lookups (target %d%%)",
        stats["hit_rate_percent"],
        stats["lookups"],
        stats["target_hit_rate_percent"],
    )

    from app.infrastructure.persistence.database import dispose_engine

    await dispose_engine()
