"""Cache configuration snapshot and TTL policy table.

CacheConfig is built once from Settings and passed to the key builder,
engine and invalidation policy at construction. It is frozen: changing
the cache version or a TTL means building a new snapshot, never mutating
shared state.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from types import MappingProxyType
from typing import TYPE_CHECKING

from app.core.constants import CACHE_DEFAULT_VERSION
from app.domain.enums import CacheEntity, CacheOperation, OperationClass

if TYPE_CHECKING:
    from app.core.config import Settings

_DEFAULT_TTL = timedelta(minutes=10)


@dataclass(frozen=True)
class TtlPolicy:
    """Static (entity, operation class) -> TTL table with per-operation overrides.

    Overrides take precedence (orders by customer have their own TTL);
    unknown pairs fall back to default.
    """

    table: Mapping[tuple[CacheEntity, OperationClass], timedelta]
    overrides: Mapping[tuple[CacheEntity, CacheOperation], timedelta] = field(
        default_factory=lambda: MappingProxyType({})
    )
    default: timedelta = _DEFAULT_TTL

    def ttl_for(self, entity: CacheEntity, operation: CacheOperation) -> timedelta:
        """Return the L2 TTL for a read of entity via operation."""
        override = self.overrides.get((entity, operation))
        if override is not None:
            return override
        return self.table.get((entity, operation.operation_class), self.default)

    @classmethod
    def from_settings(cls, settings: Settings) -> TtlPolicy:
        """Build the table from the *_minutes settings."""
        minutes = timedelta(minutes=1)
        table = {
            (CacheEntity.PRODUCT, OperationClass.LIST): settings.cache_ttl_products_list_minutes * minutes,
            (CacheEntity.PRODUCT, OperationClass.ITEM): settings.cache_ttl_products_item_minutes * minutes,
            (CacheEntity.CUSTOMER, OperationClass.LIST): settings.cache_ttl_customers_list_minutes * minutes,
            (CacheEntity.CUSTOMER, OperationClass.ITEM): settings.cache_ttl_customers_item_minutes * minutes,
            (CacheEntity.ORDER, OperationClass.LIST): settings.cache_ttl_orders_list_minutes * minutes,
            (CacheEntity.ORDER, OperationClass.ITEM): settings.cache_ttl_orders_item_minutes * minutes,
        }
        overrides = {
            (CacheEntity.ORDER, CacheOperation.CUSTOMER): settings.cache_ttl_orders_by_customer_minutes
            * minutes,
        }
        return cls(table=MappingProxyType(table), overrides=MappingProxyType(overrides))

    @classmethod
    def uniform(cls, ttl: timedelta) -> TtlPolicy:
        """Same TTL for every entity and class (handy for tests and scripts)."""
        table = {
            (entity, op_class): ttl for entity in CacheEntity for op_class in OperationClass
        }
        return cls(table=MappingProxyType(table), default=ttl)


@dataclass(frozen=True)
class CacheConfig:
    """Immutable snapshot of every setting the cache layer reads."""

    enabled: bool = True
    version: str = CACHE_DEFAULT_VERSION
    l1_to_l2_ratio: float = 0.5
    l1_max_entries: int = 10_000
    max_payload_bytes: int = 1024 * 1024
    max_key_length: int = 256
    l2_timeout: timedelta = timedelta(seconds=5)
    l2_failure_threshold: int = 5
    l2_circuit_reset: timedelta = timedelta(seconds=30)
    serialization_format: str = "json"
    log_operations: bool = True
    target_hit_rate_percent: int = 80
    stampede_lock_timeout: timedelta = timedelta(seconds=10)
    max_cached_pages: int = 20
    ttl_policy: TtlPolicy = field(default_factory=lambda: TtlPolicy.uniform(_DEFAULT_TTL))

    def __post_init__(self) -> None:
        if not 0 < self.l1_to_l2_ratio <= 1:
            raise ValueError(
                f"l1_to_l2_ratio must be greater than 0 and at most 1, got {self.l1_to_l2_ratio}"
            )
        if self.max_cached_pages < 0:
            raise ValueError(f"max_cached_pages must be >= 0, got {self.max_cached_pages}")

    def local_ttl(self, ttl: timedelta) -> timedelta:
        """L1 TTL derived from the L2 TTL so the local tier refreshes more often."""
        return ttl * self.l1_to_l2_ratio

    @classmethod
    def from_settings(cls, settings: Settings) -> CacheConfig:
        """Snapshot the cache_* settings."""
        return cls(
            enabled=settings.cache_enabled,
            version=settings.cache_version,
            l1_to_l2_ratio=settings.cache_l1_to_l2_ratio,
            l1_max_entries=settings.cache_l1_max_entries,
            max_payload_bytes=settings.cache_max_payload_bytes,
            max_key_length=settings.cache_max_key_length,
            l2_timeout=timedelta(milliseconds=settings.cache_redis_timeout_ms),
            l2_failure_threshold=settings.cache_redis_failure_threshold,
            l2_circuit_reset=timedelta(seconds=settings.cache_circuit_breaker_timeout_seconds),
            serialization_format=settings.cache_serialization_format,
            log_operations=settings.cache_log_operations,
            target_hit_rate_percent=settings.cache_target_hit_rate_percent,
            stampede_lock_timeout=timedelta(milliseconds=settings.cache_stampede_lock_timeout_ms),
            max_cached_pages=settings.cache_max_cached_pages,
            ttl_policy=TtlPolicy.from_settings(settings),
        )
