"""
planner.cache
~~~~~~~~~~~~~

Optional memoization for the pure calculation functions.  A cache is always
an explicit object handed to the functions that accept ``cache=``; results
are identical with and without it, so tests can run with it disabled::

    cache = CalculationCache(capacity=128, ttl=60.0)
    allocation = project_allocation_map(..., cache=cache)

    CalculationCache(capacity=0)     # disabled: never stores anything
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Optional, TypeVar

from planner.logging_config import get_logger

logger = get_logger("cache")

T = TypeVar("T")

_MISSING = object()


@dataclass(frozen=True)
class CacheStats:
    hits: int
    misses: int
    evictions: int
    size: int

    @property
    def hit_rate(self) -> float:
        checks = self.hits + self.misses
        return self.hits / checks if checks else 0.0


class CalculationCache:
    """Fixed-capacity, time-expiring key → value store with LRU eviction."""

    def __init__(
        self,
        capacity: int = 256,
        ttl: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity < 0:
            raise ValueError("Capacity must be non-negative.")
        if ttl <= 0:
            raise ValueError("TTL must be positive.")
        self._capacity = capacity
        self._ttl = ttl
        self._clock = clock
        self._entries: OrderedDict[Hashable, tuple[float, Any]] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    # ── lookup / store ───────────────────────────────────────────────────

    def get(self, key: Hashable, default: Any = None) -> Any:
        with self._lock:
            entry = self._entries.get(key, _MISSING)
            if entry is _MISSING:
                self._misses += 1
                return default
            stored_at, value = entry
            if self._clock() - stored_at > self._ttl:
                del self._entries[key]
                self._misses += 1
                return default
            self._entries.move_to_end(key)
            self._hits += 1
            return value

    def set(self, key: Hashable, value: Any) -> None:
        if self._capacity == 0:
            return
        with self._lock:
            self._entries[key] = (self._clock(), value)
            self._entries.move_to_end(key)
            while len(self._entries) > self._capacity:
                self._entries.popitem(last=False)
                self._evictions += 1

    def get_or_compute(self, key: Hashable, compute: Callable[[], T]) -> T:
        value = self.get(key, _MISSING)
        if value is _MISSING:
            value = compute()
            self.set(key, value)
        return value

    def memoize(
        self,
        fn: Callable[..., T],
        key: Optional[Callable[..., Hashable]] = None,
    ) -> Callable[..., T]:
        """Wrap ``fn``; arguments must be hashable unless ``key`` is given."""
        name = getattr(fn, "__qualname__", repr(fn))

        def wrapper(*args: Any, **kwargs: Any) -> T:
            k = key(*args, **kwargs) if key is not None else (
                name, args, tuple(sorted(kwargs.items()))
            )
            return self.get_or_compute(k, lambda: fn(*args, **kwargs))

        wrapper.__wrapped__ = fn  # type: ignore[attr-defined]
        return wrapper

    def clear(self) -> None:
        with self._lock:
            dropped = len(self._entries)
            self._entries.clear()
        logger.debug("cache_cleared", extra={"dropped": dropped})

    # ── properties / repr ────────────────────────────────────────────────

    @property
    def enabled(self) -> bool:
        return self._capacity > 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def ttl(self) -> float:
        return self._ttl

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(self._hits, self._misses, self._evictions, len(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return (
            f"CalculationCache(capacity={self._capacity}, "
            f"ttl={self._ttl}, "
            f"size={len(self._entries)})"
        )
