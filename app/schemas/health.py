"""Health check API schemas."""

from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health (liveness)."""

    status: str = Field(default="ok", description="Service status")
    version: str | None = Field(default=None, description="Application version")


class CacheHealthResponse(BaseModel):
    """Response for GET /health/cache: counters and tier status of the hybrid cache."""

    status: str = Field(default="ok", description="'ok', or 'degraded' when L2 is configured but down")
    hit_rate_percent: float
    target_hit_rate_percent: int
    meets_target: bool
    stats: dict[str, Any] = Field(default_factory=dict, description="Raw engine counters")
