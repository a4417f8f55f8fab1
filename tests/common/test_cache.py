"""
tests/common/test_cache.py

Covers:
  - Hit / miss accounting and LRU eviction
  - TTL expiry with an injected clock
  - Disabled cache (capacity 0)
  - memoize wrapper and construction from config
"""

import pytest

from planner.cache import CalculationCache
from planner.config import PlannerConfig


class FakeClock:

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return CalculationCache(capacity=2, ttl=10.0, clock=clock)


class TestStore:

    def test_miss_then_hit(self, cache):
        assert cache.get("a") is None
        cache.set("a", 1)
        assert cache.get("a") == 1
        stats = cache.stats()
        assert (stats.hits, stats.misses, stats.size) == (1, 1, 1)
        assert stats.hit_rate == 0.5

    def test_lru_eviction(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)
        assert cache.get("b") is None
        assert cache.get("a") == 1
        assert cache.stats().evictions == 1
        assert len(cache) == 2

    def test_ttl_expiry(self, cache, clock):
        cache.set("a", 1)
        clock.now = 10.0
        assert cache.get("a") == 1
        clock.now = 10.5
        assert cache.get("a", "gone") == "gone"
        assert len(cache) == 0

    def test_falsy_values_are_cached(self, cache):
        calls = []
        compute = lambda: calls.append(1) or 0  # noqa: E731
        assert cache.get_or_compute("z", compute) == 0
        assert cache.get_or_compute("z", compute) == 0
        assert len(calls) == 1

    def test_clear(self, cache):
        cache.set("a", 1)
        cache.clear()
        assert len(cache) == 0


class TestDisabled:

    def test_capacity_zero_never_stores(self):
        cache = CalculationCache(capacity=0)
        assert not cache.enabled
        calls = []
        for _ in range(3):
            cache.get_or_compute("k", lambda: calls.append(1))
        assert len(calls) == 3
        assert len(cache) == 0

    def test_bad_arguments(self):
        with pytest.raises(ValueError):
            CalculationCache(capacity=-1)
        with pytest.raises(ValueError):
            CalculationCache(ttl=0)


class TestMemoize:

    def test_memoize(self, cache):
        calls = []

        def square(x):
            calls.append(x)
            return x * x

        fast = cache.memoize(square)
        assert fast(3) == 9
        assert fast(3) == 9
        assert fast(4) == 16
        assert calls == [3, 4]
        assert fast.__wrapped__ is square

    def test_custom_key(self, cache):
        fast = cache.memoize(lambda items: sum(items), key=lambda items: tuple(items))
        assert fast([1, 2]) == 3
        assert fast([1, 2]) == 3
        assert cache.stats().hits == 1


class TestFromConfig:

    def test_make_cache(self):
        cache = PlannerConfig(cache_capacity=5, cache_ttl_seconds=1.5).make_cache()
        assert (cache.capacity, cache.ttl) == (5, 1.5)
        assert "capacity=5" in repr(cache)
