"""Tests for HybridCache: read-through, TTLs, stampede protection and L2 fallback."""

import asyncio
import logging
from datetime import timedelta

import pytest

from app.infrastructure.cache import CacheKeyBuilder, HybridCache, MemoryCacheTier
from app.infrastructure.cache.circuit_breaker import CircuitBreakerTier, CircuitState
from tests.fakes import FailingTier, FakeClock, HangingTier

KEY = "v1:product:id:1"


class CountingLoader:
    """Loader returning a fixed value and counting calls; optionally blocks until released."""

    def __init__(self, value=None, *, block: bool = False) -> None:
        self.value = {"id": 1, "name": "Laptop"} if value is None else value
        self.calls = 0
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        if not block:
            self.release.set()

    async def __call__(self):
        self.calls += 1
        self.started.set()
        await self.release.wait()
        return self.value


async def test_miss_loads_then_serves_from_l1(cache: HybridCache) -> None:
    loader = CountingLoader()
    assert await cache.get_or_create(KEY, loader) == loader.value
    assert await cache.get_or_create(KEY, loader) == loader.value
    assert loader.calls == 1
    stats = cache.stats()
    assert stats["misses"] == 1
    assert stats["l1_hits"] == 1


async def test_l2_hit_backfills_l1(cache: HybridCache) -> None:
    loader = CountingLoader()
    await cache.get_or_create(KEY, loader)
    await cache.l1.clear()

    assert await cache.get_or_create(KEY, loader) == loader.value
    assert loader.calls == 1
    assert cache.stats()["l2_hits"] == 1
    assert KEY in cache.l1


async def test_ttl_respected_on_both_tiers(cache: HybridCache, clock: FakeClock) -> None:
    """L1 lives ttl * ratio (5 min), L2 lives ttl (10 min)."""
    loader = CountingLoader()
    ttl = timedelta(minutes=10)
    await cache.get_or_create(KEY, loader, ttl)

    clock.advance(timedelta(minutes=4))
    await cache.get_or_create(KEY, loader, ttl)
    assert cache.stats()["l1_hits"] == 1

    clock.advance(timedelta(minutes=1))
    await cache.get_or_create(KEY, loader, ttl)
    assert cache.stats()["l2_hits"] == 1
    assert loader.calls == 1

    clock.advance(timedelta(minutes=5))
    await cache.get_or_create(KEY, loader, ttl)
    assert loader.calls == 2


async def test_concurrent_misses_call_loader_once(cache: HybridCache) -> None:
    loader = CountingLoader(block=True)
    tasks = [asyncio.create_task(cache.get_or_create(KEY, loader)) for _ in range(50)]
    await loader.started.wait()
    loader.release.set()

    results = await asyncio.gather(*tasks)

    assert loader.calls == 1
    assert all(r == loader.value for r in results)
    assert cache.stats()["stampede_joins"] == 49
    assert cache.stats()["inflight_fills"] == 0


async def test_concurrent_callers_get_independent_copies(cache: HybridCache) -> None:
    loader = CountingLoader(block=True)
    first = asyncio.create_task(cache.get_or_create(KEY, loader))
    second = asyncio.create_task(cache.get_or_create(KEY, loader))
    await loader.started.wait()
    loader.release.set()
    a, b = await asyncio.gather(first, second)
    a["name"] = "changed"
    assert b["name"] == "Laptop"
    assert (await cache.get_or_create(KEY, loader))["name"] == "Laptop"


async def test_different_keys_load_independently(cache: HybridCache) -> None:
    loaders = {f"v1:product:id:{i}": CountingLoader({"id": i}) for i in range(5)}
    results = await asyncio.gather(*(cache.get_or_create(k, f) for k, f in loaders.items()))
    assert [r["id"] for r in results] == list(range(5))
    assert all(f.calls == 1 for f in loaders.values())


async def test_loader_failure_propagates_and_releases_slot(cache: HybridCache) -> None:
    calls = 0

    async def failing():
        nonlocal calls
        calls += 1
        await asyncio.sleep(0)
        raise RuntimeError("database down")

    results = await asyncio.gather(
        *(cache.get_or_create(KEY, failing) for _ in range(3)), return_exceptions=True
    )
    assert calls == 1
    assert all(isinstance(r, RuntimeError) for r in results)
    assert KEY not in cache.l1
    assert cache.stats()["inflight_fills"] == 0
    assert cache.stats()["load_failures"] == 1

    loader = CountingLoader()
    assert await cache.get_or_create(KEY, loader) == loader.value
    assert loader.calls == 1


async def test_cancelled_caller_does_not_cancel_shared_load(cache: HybridCache) -> None:
    loader = CountingLoader(block=True)
    first = asyncio.create_task(cache.get_or_create(KEY, loader))
    second = asyncio.create_task(cache.get_or_create(KEY, loader))
    await loader.started.wait()

    first.cancel()
    with pytest.raises(asyncio.CancelledError):
        await first
    loader.release.set()

    assert await second == loader.value
    assert loader.calls == 1
    assert KEY in cache.l1


async def test_sole_caller_cancelled_fill_still_completes(cache: HybridCache) -> None:
    loader = CountingLoader(block=True)
    only = asyncio.create_task(cache.get_or_create(KEY, loader))
    await loader.started.wait()
    only.cancel()
    with pytest.raises(asyncio.CancelledError):
        await only

    later = asyncio.create_task(cache.get_or_create(KEY, loader))
    await asyncio.sleep(0)
    loader.release.set()
    assert await later == loader.value
    assert loader.calls == 1


async def test_join_wait_is_bounded_then_loads_uncached(make_cache) -> None:
    cache = make_cache(stampede_lock_timeout=timedelta(milliseconds=20))
    slow = CountingLoader({"id": 1, "v": "slow"}, block=True)
    fast = CountingLoader({"id": 1, "v": "fast"})

    owner = asyncio.create_task(cache.get_or_create(KEY, slow))
    await slow.started.wait()
    assert await cache.get_or_create(KEY, fast) == fast.value
    assert cache.stats()["stampede_timeouts"] == 1

    slow.release.set()
    assert await owner == slow.value
    assert slow.calls == 1


async def test_disabled_cache_always_calls_loader(make_cache) -> None:
    cache = make_cache(enabled=False)
    loader = CountingLoader()
    for _ in range(3):
        assert await cache.get_or_create(KEY, loader) is loader.value
    assert loader.calls == 3
    assert len(cache.l1) == 0
    assert len(cache.l2) == 0


async def test_l2_down_falls_back_to_l1_and_loader(make_cache) -> None:
    l2 = FailingTier()
    cache = make_cache(l2=l2)
    loader = CountingLoader()

    assert await cache.get_or_create(KEY, loader) == loader.value
    assert await cache.get_or_create(KEY, loader) == loader.value

    assert loader.calls == 1
    assert l2.calls["get"] == 1
    assert l2.calls["set"] == 1
    assert cache.stats()["l2_errors"] == 2


async def test_l2_timeout_is_treated_as_unavailable(make_cache) -> None:
    cache = make_cache(l2=HangingTier(), l2_timeout=timedelta(milliseconds=10))
    loader = CountingLoader()
    assert await cache.get_or_create(KEY, loader) == loader.value
    assert cache.stats()["l2_errors"] == 2


async def test_l2_timeout_is_logged_by_exception_name(make_cache, caplog) -> None:
    cache = make_cache(l2=HangingTier(), l2_timeout=timedelta(milliseconds=10))
    with caplog.at_level(logging.WARNING, logger="app.infrastructure.cache.hybrid_cache"):
        await cache.get_or_create(KEY, CountingLoader())
    assert "continuing without L2: TimeoutError" in caplog.text


async def test_unavailable_l2_is_skipped(make_cache) -> None:
    l2 = FailingTier(available=False)
    cache = make_cache(l2=l2)
    await cache.get_or_create(KEY, CountingLoader())
    assert sum(l2.calls.values()) == 0
    assert cache.stats()["l2_errors"] == 0


async def test_l1_only_cache(make_cache) -> None:
    cache = make_cache(l2=None)
    loader = CountingLoader()
    await cache.get_or_create(KEY, loader)
    await cache.get_or_create(KEY, loader)
    assert loader.calls == 1
    assert cache.stats()["l2_configured"] is False


async def test_l1_only_cache_keeps_full_ttl(make_cache, clock: FakeClock) -> None:
    cache = make_cache(l2=None)
    loader = CountingLoader()
    ttl = timedelta(minutes=10)
    await cache.get_or_create(KEY, loader, ttl)

    clock.advance(timedelta(minutes=6))
    await cache.get_or_create(KEY, loader, ttl)
    assert loader.calls == 1

    clock.advance(timedelta(minutes=4))
    await cache.get_or_create(KEY, loader, ttl)
    assert loader.calls == 2


async def test_l1_keeps_full_ttl_when_l2_write_fails(make_cache, clock: FakeClock) -> None:
    cache = make_cache(l2=FailingTier())
    loader = CountingLoader()
    ttl = timedelta(minutes=10)
    await cache.get_or_create(KEY, loader, ttl)

    clock.advance(timedelta(minutes=6))
    await cache.get_or_create(KEY, loader, ttl)
    assert loader.calls == 1
    assert cache.stats()["l1_hits"] == 1


async def test_hung_l2_opens_the_circuit(make_cache) -> None:
    hanging = HangingTier()
    breaker = CircuitBreakerTier(
        hanging, failure_threshold=2, call_timeout=timedelta(milliseconds=10)
    )
    cache = make_cache(l2=breaker)

    for i in range(5):
        loader = CountingLoader({"id": i})
        assert await cache.get_or_create(f"v1:product:id:{i}", loader) == {"id": i}

    assert breaker.state is CircuitState.OPEN
    assert breaker.metrics.failed_calls == 2
    assert hanging.calls["get"] + hanging.calls["set"] == 2
    assert breaker.metrics.rejected_calls == 8
    assert cache.stats()["l2_circuit_state"] == "open"


async def test_none_result_is_cached(cache: HybridCache) -> None:
    calls = 0

    async def missing():
        nonlocal calls
        calls += 1
        return None

    assert await cache.get_or_create(KEY, missing) is None
    assert await cache.get_or_create(KEY, missing) is None
    assert calls == 1


async def test_oversized_payload_is_served_uncached(make_cache) -> None:
    cache = make_cache(max_payload_bytes=16)
    loader = CountingLoader({"blob": "x" * 100})
    assert await cache.get_or_create(KEY, loader) == loader.value
    assert await cache.get_or_create(KEY, loader) == loader.value
    assert loader.calls == 2
    assert len(cache.l1) == 0


async def test_overlong_key_is_served_uncached(make_cache) -> None:
    cache = make_cache(max_key_length=10)
    loader = CountingLoader()
    await cache.get_or_create(KEY, loader)
    await cache.get_or_create(KEY, loader)
    assert loader.calls == 2
    assert cache.stats()["bypasses"] == 2


async def test_unserializable_value_is_served_uncached(cache: HybridCache) -> None:
    value = object()

    async def load():
        return value

    assert await cache.get_or_create(KEY, load) is value
    assert KEY not in cache.l1


async def test_msgpack_format(make_cache) -> None:
    cache = make_cache(serialization_format="msgpack")
    loader = CountingLoader({"id": 1, "tags": ["a", "b"], "price": "9.99"})
    await cache.get_or_create(KEY, loader)
    assert await cache.get_or_create(KEY, loader) == loader.value
    assert cache.stats()["serialization_format"] == "msgpack"


async def test_remove_forces_reload(cache: HybridCache) -> None:
    loader = CountingLoader()
    await cache.get_or_create(KEY, loader)
    await cache.remove(KEY)
    await cache.remove(KEY)
    await cache.get_or_create(KEY, loader)
    assert loader.calls == 2


async def test_remove_during_fill_discards_the_result(cache: HybridCache) -> None:
    loader = CountingLoader(block=True)
    reader = asyncio.create_task(cache.get_or_create(KEY, loader))
    await loader.started.wait()

    await cache.remove(KEY)
    loader.release.set()

    assert await reader == loader.value
    assert KEY not in cache.l1
    assert await cache.l2.get(KEY) is None


async def test_remove_during_fill_keeps_one_loader_running(cache: HybridCache) -> None:
    running = peak = calls = 0
    started = asyncio.Event()
    release = asyncio.Event()

    async def load():
        nonlocal running, peak, calls
        calls += 1
        n = calls
        running += 1
        peak = max(peak, running)
        started.set()
        try:
            await release.wait()
            return {"id": 1, "load": n}
        finally:
            running -= 1

    first = asyncio.create_task(cache.get_or_create(KEY, load))
    await started.wait()
    await cache.remove(KEY)

    second = asyncio.create_task(cache.get_or_create(KEY, load))
    for _ in range(5):
        await asyncio.sleep(0)
    assert calls == 1

    release.set()
    assert await first == {"id": 1, "load": 1}
    assert await second == {"id": 1, "load": 2}
    assert peak == 1
    assert await cache.get_or_create(KEY, load) == {"id": 1, "load": 2}
    assert calls == 2
    assert cache.stats()["inflight_fills"] == 0


async def test_clear_during_fill_keeps_one_loader_running(cache: HybridCache) -> None:
    loader = CountingLoader(block=True)
    first = asyncio.create_task(cache.get_or_create(KEY, loader))
    await loader.started.wait()
    await cache.clear()

    second = asyncio.create_task(cache.get_or_create(KEY, loader))
    await asyncio.sleep(0)
    assert loader.calls == 1

    loader.release.set()
    await asyncio.gather(first, second)
    assert loader.calls == 2


async def test_remove_all_reports_nothing_on_success(cache: HybridCache) -> None:
    keys = {f"v1:product:id:{i}" for i in range(3)}
    for key in keys:
        await cache.get_or_create(key, CountingLoader())
    assert await cache.remove_all(keys) == set()
    assert len(cache.l1) == 0
    assert len(cache.l2) == 0


async def test_remove_all_is_best_effort_when_l2_down(make_cache) -> None:
    cache = make_cache(l2=FailingTier())
    keys = {"v1:product:all", "v1:product:id:1"}
    for key in keys:
        await cache.get_or_create(key, CountingLoader())

    failed = await cache.remove_all(keys)

    assert failed == keys
    assert len(cache.l1) == 0
    assert cache.stats()["invalidation_failures"] == 2


async def test_version_bump_makes_old_entries_unreachable(make_cache, clock: FakeClock) -> None:
    shared_l2 = MemoryCacheTier(clock=clock)
    v1_cache = make_cache(l2=shared_l2, version="v1")
    v2_cache = make_cache(l2=shared_l2, version="v2")
    old_key = CacheKeyBuilder("v1").item_key("product", 5)
    new_key = CacheKeyBuilder("v2").item_key("product", 5)

    await v1_cache.get_or_create(old_key, CountingLoader({"id": 5, "name": "old"}))
    fresh = CountingLoader({"id": 5, "name": "new"})

    assert await v2_cache.get_or_create(new_key, fresh) == {"id": 5, "name": "new"}
    assert fresh.calls == 1


async def test_clear_empties_both_tiers(cache: HybridCache) -> None:
    await cache.get_or_create(KEY, CountingLoader())
    await cache.clear()
    assert len(cache.l1) == 0
    assert len(cache.l2) == 0


async def test_stats_hit_rate_against_target(cache: HybridCache) -> None:
    loader = CountingLoader()
    for _ in range(4):
        await cache.get_or_create(KEY, loader)
    stats = cache.stats()
    assert stats["lookups"] == 4
    assert stats["hit_rate_percent"] == 75.0
    assert stats["target_hit_rate_percent"] == 80
    assert stats["meets_target"] is False

    await cache.get_or_create(KEY, loader)
    assert cache.stats()["meets_target"] is True

    cache.reset_stats()
    assert cache.stats()["lookups"] == 0
