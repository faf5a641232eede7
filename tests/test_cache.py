"""Tests for the TTL result cache."""

from __future__ import annotations

from strokesight.cache import TTLCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_make_key_is_order_independent():
    a = TTLCache.make_key("classifier", digest="abc", top_k=3)
    b = TTLCache.make_key("classifier", top_k=3, digest="abc")
    assert a == b
    assert a[0] == "classifier"
    assert TTLCache.make_key("detector", digest="abc", top_k=3) != a


def test_get_within_ttl():
    clock = FakeClock()
    cache = TTLCache(ttl_seconds=10, clock=clock)
    cache.set(("op", "k"), [1, 2])
    clock.now += 9.9
    assert cache.get(("op", "k")) == [1, 2]
    assert cache.hits == 1


def test_expired_entry_is_dropped_on_access():
    clock = FakeClock()
    cache = TTLCache(ttl_seconds=10, clock=clock)
    cache.set(("op", "k"), "value")
    clock.now += 10
    assert ("op", "k") not in cache
    assert cache.get(("op", "k")) is None
    assert len(cache) == 0
    assert cache.misses == 1


def test_evict_expired():
    clock = FakeClock()
    cache = TTLCache(ttl_seconds=10, clock=clock)
    cache.set(("op", "old"), 1)
    clock.now += 6
    cache.set(("op", "new"), 2)
    clock.now += 5
    assert cache.evict_expired() == 1
    assert ("op", "new") in cache
    assert len(cache) == 1


def test_full_cache_evicts_oldest():
    cache = TTLCache(max_entries=2)
    cache.set(("op", "a"), 1)
    cache.set(("op", "b"), 2)
    cache.set(("op", "a"), 3)
    cache.set(("op", "c"), 4)
    assert ("op", "b") not in cache
    assert cache.get(("op", "a")) == 3
    assert cache.get(("op", "c")) == 4


def test_clear():
    cache = TTLCache()
    cache.set(("op", "a"), 1)
    cache.clear()
    assert len(cache) == 0
