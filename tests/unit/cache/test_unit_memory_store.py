# tests/unit/cache/test_unit_memory_store.py — v1
"""Tests for cache/memory_store.py — TTL, eviction and lifecycle."""

from __future__ import annotations

import pytest

from rentroll.cache.base_cache_store import BaseCacheStore, CacheUnavailableError
from rentroll.cache.memory_store import DEFAULT_TTL_SECONDS, InMemoryCacheStore
from rentroll.cache.models import CacheEntry


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestCacheEntry:
    def test_expiry_is_strict(self, sample_detection):
        e = CacheEntry(key="k", header_detection=sample_detection, created_at=0, expires_at=10)
        assert e.is_expired(10) is False
        assert e.is_expired(10.001) is True


class TestInMemoryCacheStore:
    def test_is_cache_store(self):
        assert isinstance(InMemoryCacheStore(), BaseCacheStore)

    def test_default_ttl(self):
        assert InMemoryCacheStore().ttl_seconds == DEFAULT_TTL_SECONDS == 86400

    def test_invalid_ttl(self):
        with pytest.raises(ValueError):
            InMemoryCacheStore(ttl_seconds=0)

    @pytest.mark.asyncio
    async def test_miss(self):
        assert await InMemoryCacheStore().get("nope") is None

    @pytest.mark.asyncio
    async def test_set_then_get(self, sample_detection):
        store = InMemoryCacheStore()
        await store.set("k", sample_detection)
        assert await store.get("k") == sample_detection

    @pytest.mark.asyncio
    async def test_replace(self, sample_detection):
        store = InMemoryCacheStore()
        await store.set("k", sample_detection)
        other = sample_detection.model_copy(update={"confidence_score": 0.4})
        await store.set("k", other)
        assert (await store.get("k")).confidence_score == 0.4
        assert store.stats().size == 1

    @pytest.mark.asyncio
    async def test_expired_entry_evicted_on_get(self, sample_detection):
        clock = FakeClock()
        store = InMemoryCacheStore(ttl_seconds=60, clock=clock)
        await store.set("k", sample_detection)
        clock.now += 60
        assert await store.get("k") == sample_detection
        clock.now += 1
        assert await store.get("k") is None
        assert store.stats().size == 0

    @pytest.mark.asyncio
    async def test_set_sweeps_expired(self, sample_detection):
        clock = FakeClock()
        store = InMemoryCacheStore(ttl_seconds=60, clock=clock)
        await store.set("old1", sample_detection)
        await store.set("old2", sample_detection)
        assert store.stats().size == 2
        clock.now += 120
        await store.set("new", sample_detection)
        stats = store.stats()
        assert stats.size == 1
        assert stats.keys == ["new"]

    @pytest.mark.asyncio
    async def test_no_sliding_refresh(self, sample_detection):
        clock = FakeClock()
        store = InMemoryCacheStore(ttl_seconds=60, clock=clock)
        await store.set("k", sample_detection)
        clock.now += 50
        await store.get("k")
        clock.now += 20
        assert await store.get("k") is None

    @pytest.mark.asyncio
    async def test_delete_and_clear(self, sample_detection):
        store = InMemoryCacheStore()
        await store.set("a", sample_detection)
        await store.set("b", sample_detection)
        await store.delete("a")
        await store.delete("missing")
        assert store.stats().keys == ["b"]
        store.clear()
        assert store.stats().size == 0

    @pytest.mark.asyncio
    async def test_closed_store_unavailable(self, sample_detection):
        store = InMemoryCacheStore()
        await store.set("k", sample_detection)
        store.close()
        assert store.stats().size == 0
        with pytest.raises(CacheUnavailableError):
            await store.get("k")
        with pytest.raises(CacheUnavailableError):
            await store.set("k", sample_detection)
