"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for DB sessions, the shared hybrid cache and
the cached domain services. Services are built from infrastructure
implementations here; routes depend only on these dependencies, not on
infra directly.

The cache and its policies are process-wide and live on app.state (set by
the lifespan); repositories and services are per request.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.services import CustomerService, OrderService, ProductService
from app.core.config import Settings, get_settings
from app.infrastructure.cache import HybridCache, InvalidationPolicy, TtlPolicy
from app.infrastructure.persistence.database import get_db
from app.infrastructure.persistence.repositories import (
    CustomerRepository,
    OrderRepository,
    ProductRepository,
)


def get_cache(request: Request) -> HybridCache:
    """Process-wide hybrid cache created by the lifespan."""
    return request.app.state.cache


def get_invalidation_policy(request: Request) -> InvalidationPolicy:
    return request.app.state.invalidation_policy


def get_ttl_policy(request: Request) -> TtlPolicy:
    return request.app.state.cache.config.ttl_policy


CacheDep = Annotated[HybridCache, Depends(get_cache)]
InvalidationDep = Annotated[InvalidationPolicy, Depends(get_invalidation_policy)]
TtlDep = Annotated[TtlPolicy, Depends(get_ttl_policy)]
SessionDep = Annotated[AsyncSession, Depends(get_db)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


async def get_product_service(
    db: SessionDep,
    cache: CacheDep,
    ttl_policy: TtlDep,
    invalidation: InvalidationDep,
    settings: SettingsDep,
) -> ProductService:
    """Product service bound to this request's session."""
    return ProductService(
        ProductRepository(db), cache, ttl_policy, invalidation, page_size=settings.page_size
    )


async def get_customer_service(
    db: SessionDep,
    cache: CacheDep,
    ttl_policy: TtlDep,
    invalidation: InvalidationDep,
    settings: SettingsDep,
) -> CustomerService:
    """Customer service bound to this request's session."""
    return CustomerService(
        CustomerRepository(db), cache, ttl_policy, invalidation, page_size=settings.page_size
    )


async def get_order_service(
    db: SessionDep,
    cache: CacheDep,
    ttl_policy: TtlDep,
    invalidation: InvalidationDep,
    settings: SettingsDep,
) -> OrderService:
    """Order service bound to this request's session."""
    return OrderService(
        OrderRepository(db), cache, ttl_policy, invalidation, page_size=settings.page_size
    )
