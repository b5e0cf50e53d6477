"""Health check endpoints. Liveness has no dependencies; /cache reports cache statistics."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.v1.dependencies import get_cache
from app.core.config import get_settings
from app.infrastructure.cache import HybridCache
from app.schemas.health import CacheHealthResponse, HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse(version=get_settings().app_version)


@router.get("/cache", response_model=CacheHealthResponse)
async def cache_health(cache: Annotated[HybridCache, Depends(get_cache)]) -> CacheHealthResponse:
    """Return hit rate against the configured target, plus raw counters.

    Status is 'degraded' when Redis is configured but unavailable or its
    circuit breaker is not closed; reads still succeed from L1 and the store.
    """
    stats = cache.stats()
    degraded = stats["l2_configured"] and (
        not stats["l2_available"] or stats["l2_circuit_state"] not in (None, "closed")
    )
    return CacheHealthResponse(
        status="degraded" if degraded else "ok",
        hit_rate_percent=stats["hit_rate_percent"],
        target_hit_rate_percent=stats["target_hit_rate_percent"],
        meets_target=stats["meets_target"],
        stats=stats,
    )
