"""Smoke tests for health and app wiring."""

from httpx import AsyncClient

from tests.fakes import FailingTier, Services


async def test_health_returns_ok(client: AsyncClient) -> None:
    """GET /api/v1/health returns 200 and status ok."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data.get("status") == "ok"
    assert data.get("version")


async def test_cache_health_reports_hit_rate(client: AsyncClient) -> None:
    """GET /api/v1/health/cache reflects lookups made through the API."""
    await client.post("/api/v1/products", json={"name": "Laptop", "price": "1299.99"})
    for _ in range(5):
        await client.get("/api/v1/products/1")

    response = await client.get("/api/v1/health/cache")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["hit_rate_percent"] == 80.0
    assert data["target_hit_rate_percent"] == 80
    assert data["meets_target"] is True
    assert data["stats"]["l1_hits"] == 4
    assert data["stats"]["misses"] == 1


async def test_cache_health_degraded_when_redis_down(client: AsyncClient, services: Services) -> None:
    services.cache.l2 = FailingTier(available=False)
    response = await client.get("/api/v1/health/cache")
    assert response.status_code == 200
    assert response.json()["status"] == "degraded"


async def test_unknown_route_returns_json_404(client: AsyncClient) -> None:
    response = await client.get("/api/v1/nope")
    assert response.status_code == 404
    assert response.json()["error"] == "HTTP_ERROR"
