"""Tests for InvalidationPolicy: which keys a committed write removes."""

import pytest

from app.domain.enums import CacheEntity, WriteOperation
from app.infrastructure.cache.invalidation import InvalidationEvent, InvalidationPolicy
from app.infrastructure.cache.keys import CacheKeyBuilder


@pytest.fixture
def policy() -> InvalidationPolicy:
    return InvalidationPolicy(CacheKeyBuilder("v1"), max_cached_pages=3)


def _pages(entity: str, count: int = 3) -> set[str]:
    return {f"v1:{entity}:page:{n}" for n in range(1, count + 1)}


def test_list_keys_cover_all_and_every_cacheable_page(policy: InvalidationPolicy) -> None:
    assert policy.list_keys(CacheEntity.PRODUCT) == {"v1:product:all"} | _pages("product")


def test_list_keys_without_page_caching() -> None:
    policy = InvalidationPolicy(CacheKeyBuilder("v2"), max_cached_pages=0)
    assert policy.list_keys(CacheEntity.ORDER) == {"v2:order:all"}


def test_product_update_removes_lists_and_item_only(policy: InvalidationPolicy) -> None:
    keys = policy.on_write(CacheEntity.PRODUCT, WriteOperation.UPDATE, 5)
    assert keys == {"v1:product:all", "v1:product:id:5"} | _pages("product")
    assert not any(k.startswith(("v1:customer:", "v1:order:")) for k in keys)


def test_create_removes_the_new_item_key(policy: InvalidationPolicy) -> None:
    """A cached 'not found' for the new id must not survive the create."""
    keys = policy.on_write(CacheEntity.CUSTOMER, WriteOperation.CREATE, 8)
    assert "v1:customer:id:8" in keys
    assert "v1:customer:all" in keys


def test_order_moved_between_customers(policy: InvalidationPolicy) -> None:
    keys = policy.on_write(
        CacheEntity.ORDER,
        WriteOperation.UPDATE,
        10,
        related=[(CacheEntity.CUSTOMER, 1), (CacheEntity.CUSTOMER, 2)],
    )
    assert keys == (
        {"v1:order:all", "v1:order:id:10", "v1:order:customer:1", "v1:order:customer:2"}
        | _pages("order")
    )
    assert "v1:order:customer:3" not in keys
    assert "v1:customer:id:1" not in keys


def test_customer_delete_cascades_into_orders(policy: InvalidationPolicy) -> None:
    keys = policy.on_write(
        CacheEntity.CUSTOMER,
        WriteOperation.DELETE,
        1,
        related=[(CacheEntity.ORDER, 10), (CacheEntity.ORDER, 11)],
    )
    assert {"v1:customer:all", "v1:customer:id:1", "v1:order:customer:1"} <= keys
    assert {"v1:order:id:10", "v1:order:id:11", "v1:order:all"} <= keys
    assert _pages("order") <= keys
    assert not any(k.startswith("v1:product:") for k in keys)


def test_customer_delete_without_orders_still_drops_their_order_list(
    policy: InvalidationPolicy,
) -> None:
    keys = policy.on_write(CacheEntity.CUSTOMER, WriteOperation.DELETE, 4)
    assert "v1:order:customer:4" in keys
    assert "v1:order:all" not in keys


def test_customer_update_leaves_orders_alone(policy: InvalidationPolicy) -> None:
    keys = policy.on_write(CacheEntity.CUSTOMER, WriteOperation.UPDATE, 4)
    assert not any(k.startswith("v1:order:") for k in keys)


def test_accepts_plain_string_values(policy: InvalidationPolicy) -> None:
    assert policy.on_write("product", "delete", 5) == policy.on_write(
        CacheEntity.PRODUCT, WriteOperation.DELETE, 5
    )


def test_for_event_matches_on_write(policy: InvalidationPolicy) -> None:
    event = InvalidationEvent(
        CacheEntity.ORDER, WriteOperation.CREATE, 3, related=((CacheEntity.CUSTOMER, 7),)
    )
    assert policy.for_event(event) == policy.on_write(
        CacheEntity.ORDER, WriteOperation.CREATE, 3, [(CacheEntity.CUSTOMER, 7)]
    )
