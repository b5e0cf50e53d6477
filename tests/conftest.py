"""Pytest configuration and fixtures for eshop.

Cache and service tests run against in-memory tiers and fake
repositories with a manual clock. HTTP tests use a fresh app from
create_app() with the service dependencies overridden, so they need
neither Postgres nor Redis. DB-dependent fixtures skip when Postgres is
not reachable.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from datetime import timedelta
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.dependencies import (
    get_customer_service,
    get_order_service,
    get_product_service,
)
from app.application.services import CustomerService, OrderService, ProductService
from app.infrastructure.cache import (
    CacheConfig,
    HybridCache,
    InvalidationPolicy,
    MemoryCacheTier,
    TtlPolicy,
    build_invalidation_policy,
)
from app.main import create_app
from tests.fakes import (
    FakeClock,
    Services,
    linked_repositories,
)

DEFAULT_TTL = timedelta(minutes=10)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_config() -> Callable[..., CacheConfig]:
    """Factory for CacheConfig with test-friendly defaults (uniform 10 minute TTL)."""

    def _make(**overrides: Any) -> CacheConfig:
        values: dict[str, Any] = {
            "ttl_policy": TtlPolicy.uniform(DEFAULT_TTL),
            "log_operations": True,
        }
        values.update(overrides)
        return CacheConfig(**values)

    return _make


@pytest.fixture
def make_cache(clock: FakeClock, make_config) -> Callable[..., HybridCache]:
    """Factory for a HybridCache on clock-driven memory tiers.

    make_cache() has L1 and a memory L2; make_cache(l2=None) is L1 only;
    make_cache(l2=FailingTier()) simulates Redis being down.
    """
    sentinel = object()

    def _make(l2: Any = sentinel, **config_overrides: Any) -> HybridCache:
        config = make_config(**config_overrides)
        l1 = MemoryCacheTier(max_entries=config.l1_max_entries, clock=clock)
        if l2 is sentinel:
            l2 = MemoryCacheTier(clock=clock)
        return HybridCache(config, l1=l1, l2=l2)

    return _make


@pytest.fixture
def cache(make_cache) -> HybridCache:
    return make_cache()


@pytest.fixture
def invalidation(cache: HybridCache) -> InvalidationPolicy:
    return build_invalidation_policy(cache.config)


@pytest.fixture
def services(cache: HybridCache, invalidation: InvalidationPolicy) -> Services:
    product_repo, customer_repo, order_repo = linked_repositories()
    ttl_policy = cache.config.ttl_policy
    return Services(
        products=ProductService(product_repo, cache, ttl_policy, invalidation, page_size=2),
        customers=CustomerService(customer_repo, cache, ttl_policy, invalidation, page_size=2),
        orders=OrderService(order_repo, cache, ttl_policy, invalidation, page_size=2),
        product_repo=product_repo,
        customer_repo=customer_repo,
        order_repo=order_repo,
        cache=cache,
    )


@pytest.fixture
def app(services: Services) -> FastAPI:
    """Fresh app with cache state set and services bound to the fake repositories."""
    application = create_app()
    application.state.cache = services.cache
    application.state.invalidation_policy = build_invalidation_policy(services.cache.config)
    application.dependency_overrides[get_product_service] = lambda: services.products
    application.dependency_overrides[get_customer_service] = lambda: services.customers
    application.dependency_overrides[get_order_service] = lambda: services.orders
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def db_session() -> AsyncSession:
    """Database session for repository integration tests. Rolls back after test.

    Requires DATABASE_URL pointing at Postgres. Skips (pytest.skip) when it
    is unset or unreachable. Use @pytest.mark.requires_db to mark tests that
    need this fixture; run without DB via: pytest -m 'not requires_db'.
    """
    if not os.environ.get("DATABASE_URL"):
        pytest.skip("Postgres not configured: set DATABASE_URL")

    from app.infrastructure.persistence import database

    try:
        await database.create_tables()
    except (OSError, DBAPIError) as e:
        pytest.skip(f"Postgres not reachable: {e}")
    assert database.AsyncSessionLocal is not None
    async with database.AsyncSessionLocal() as session:
        # Writes are flushed but never committed, so every test starts clean.
        session.commit = session.flush  # type: ignore[method-assign]
        yield session
        await session.rollback()
    await database.dispose_engine()
