"""Unit tests for the per-merchant snapshot cache."""

import asyncio

import pytest

from app.services.errors import PromotionStoreError
from app.services.snapshot_cache import SnapshotCache
from conftest import flash_sale_payload, multi_buy_payload


class FakeClock:
    def __init__(self):
        self.value = 1000.0

    def __call__(self):
        return self.value

    def advance(self, seconds):
        self.value += seconds


class FakeStore:
    """Store whose responses are controlled by the test."""

    def __init__(self, records=None):
        self.records = records if records is not None else [flash_sale_payload()]
        self.calls = 0
        self.gate = None
        self.error = None

    async def list_active(self, merchant_id):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return list(self.records)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.mark.asyncio
async def test_first_get_loads_and_parses(clock):
    store = FakeStore()
    cache = SnapshotCache(store, ttl_seconds=30, clock=clock)
    snapshot = await cache.get("m-1")
    assert [p.id for p in snapshot] == ["promo-flash"]
    assert store.calls == 1


@pytest.mark.asyncio
async def test_fresh_entry_served_without_fetch(clock):
    store = FakeStore()
    cache = SnapshotCache(store, ttl_seconds=30, clock=clock)
    await cache.get("m-1")
    clock.advance(10)
    await cache.get("m-1")
    assert store.calls == 1


@pytest.mark.asyncio
async def test_concurrent_misses_share_one_refresh(clock):
    store = FakeStore()
    store.gate = asyncio.Event()
    cache = SnapshotCache(store, clock=clock)

    waiters = [asyncio.create_task(cache.get("m-1")) for _ in range(5)]
    await asyncio.sleep(0)
    assert cache.is_refreshing("m-1")
    store.gate.set()
    results = await asyncio.gather(*waiters)

    assert store.calls == 1
    assert all(r == results[0] for r in results)
    assert not cache.is_refreshing("m-1")


@pytest.mark.asyncio
async def test_merchants_refresh_independently(clock):
    store = FakeStore()
    cache = SnapshotCache(store, clock=clock)
    await asyncio.gather(cache.get("m-1"), cache.get("m-2"))
    assert store.calls == 2


@pytest.mark.asyncio
async def test_stale_entry_served_while_refreshing(clock):
    store = FakeStore()
    cache = SnapshotCache(store, ttl_seconds=30, clock=clock)
    first = await cache.get("m-1")

    clock.advance(31)
    store.records = [multi_buy_payload()]
    store.gate = asyncio.Event()

    stale = await cache.get("m-1")
    assert stale == first
    assert cache.is_refreshing("m-1")

    store.gate.set()
    await cache.refresh("m-1")
    assert [p.id for p in await cache.get("m-1")] == ["promo-multi"]
    assert store.calls == 2


@pytest.mark.asyncio
async def test_failure_without_history_is_empty(clock):
    store = FakeStore()
    store.error = PromotionStoreError("down")
    cache = SnapshotCache(store, clock=clock)
    assert await cache.get("m-1") == ()


@pytest.mark.asyncio
async def test_failure_keeps_last_known_good(clock):
    store = FakeStore()
    cache = SnapshotCache(store, ttl_seconds=30, clock=clock)
    good = await cache.get("m-1")

    clock.advance(31)
    store.error = RuntimeError("boom")
    assert await cache.refresh("m-1") == good
    assert await cache.get("m-1") == good


@pytest.mark.asyncio
async def test_timeout_falls_back(clock):
    store = FakeStore()
    store.gate = asyncio.Event()
    cache = SnapshotCache(store, timeout_seconds=0.01, clock=clock)
    assert await cache.get("m-1") == ()
    assert not cache.is_refreshing("m-1")


@pytest.mark.asyncio
async def test_waiter_cancellation_does_not_cancel_refresh(clock):
    store = FakeStore()
    store.gate = asyncio.Event()
    cache = SnapshotCache(store, clock=clock)

    waiter = asyncio.create_task(cache.get("m-1"))
    await asyncio.sleep(0)
    waiter.cancel()
    with pytest.raises(asyncio.CancelledError):
        await waiter

    assert cache.is_refreshing("m-1")
    store.gate.set()
    snapshot = await cache.refresh("m-1")
    assert [p.id for p in snapshot] == ["promo-flash"]


@pytest.mark.asyncio
async def test_malformed_records_dropped_on_load(clock):
    store = FakeStore(records=[{"id": "junk"}, flash_sale_payload()])
    cache = SnapshotCache(store, clock=clock)
    assert [p.id for p in await cache.get("m-1")] == ["promo-flash"]


@pytest.mark.asyncio
async def test_invalidate_forces_reload(clock):
    store = FakeStore()
    cache = SnapshotCache(store, clock=clock)
    await cache.get("m-1")
    cache.invalidate("m-1")
    await cache.get("m-1")
    assert store.calls == 2


@pytest.mark.asyncio
async def test_aclose_cancels_inflight(clock):
    store = FakeStore()
    store.gate = asyncio.Event()
    cache = SnapshotCache(store, clock=clock)
    task = cache.refresh("m-1")
    await asyncio.sleep(0)
    await cache.aclose()
    assert task.done()
    assert not cache.is_refreshing("m-1")


@pytest.mark.asyncio
async def test_entry_count_is_bounded(clock):
    store = FakeStore(records=[])
    cache = SnapshotCache(store, ttl_seconds=0, max_entries=100, clock=clock)
    for i in range(5000):
        await cache.get(f"merchant-{i}")
    assert len(cache) == 100


@pytest.mark.asyncio
async def test_least_recently_used_evicted_first(clock):
    store = FakeStore()
    cache = SnapshotCache(store, ttl_seconds=30, max_entries=2, clock=clock)
    await cache.get("m-1")
    await cache.get("m-2")
    await cache.get("m-1")
    await cache.get("m-3")

    assert len(cache) == 2
    calls = store.calls
    await cache.get("m-1")
    assert store.calls == calls
    await cache.get("m-2")
    assert store.calls == calls + 1


@pytest.mark.asyncio
async def test_unparseable_payload_falls_back(clock):
    store = FakeStore()
    cache = SnapshotCache(store, ttl_seconds=30, clock=clock)
    good = await cache.get("m-1")

    class Broken:
        async def list_active(self, merchant_id):
            return 42

    cache.store = Broken()
    clock.advance(31)
    assert await cache.refresh("m-1") == good
    assert await cache.get("m-2") == ()
