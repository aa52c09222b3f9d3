"""Memory-aware LRU cache with TTL expiry."""

import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Hashable
from typing import Any, Generic, TypeVar

from fileseek.cache.base import CacheEntry, CacheStats, estimate_size

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class MemoryAwareLRUCache(Generic[K, V]):
    """Bounded least-recently-used cache.

    Entries are evicted strictly in LRU order when the entry count exceeds
    ``max_size``, when an optional memory ceiling is crossed, or when the
    owner asks for a trim (e.g. under memory pressure). Entries older than
    ``time_to_live`` seconds are treated as misses and removed on read.

    All operations take the cache's lock, so an instance may be shared by
    worker threads.

    Attributes:
        name: Cache name, used in stats and logs.
    """

    def __init__(
        self,
        max_size: int = 100,
        time_to_live: float | None = None,
        *,
        max_memory_bytes: int | None = None,
        name: str = "cache",
        clock: Callable[[], float] = time.monotonic,
        sizer: Callable[[Any], int] = estimate_size,
    ) -> None:
        """Initialize the cache.

        Args:
            max_size: Maximum number of entries (at least 1).
            time_to_live: Seconds before an entry expires (None = never).
            max_memory_bytes: Optional ceiling on the estimated size of all
                entries; crossing it trims LRU entries immediately.
            name: Cache name.
            clock: Time source in seconds (monotonic by default).
            sizer: Function estimating the size of a key or value in bytes.
        """
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.name = name
        self._max_size = max_size
        self._time_to_live = time_to_live
        self._max_memory_bytes = max_memory_bytes
        self._clock = clock
        self._sizer = sizer

        self._entries: OrderedDict[K, CacheEntry[V]] = OrderedDict()
        self._lock = threading.RLock()
        self._memory_bytes = 0

        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @property
    def max_size(self) -> int:
        return self._max_size

    @max_size.setter
    def max_size(self, value: int) -> None:
        if value < 1:
            raise ValueError("max_size must be at least 1")
        with self._lock:
            self._max_size = value
            self._evict_over_capacity()

    @property
    def time_to_live(self) -> float | None:
        return self._time_to_live

    @time_to_live.setter
    def time_to_live(self, value: float | None) -> None:
        with self._lock:
            self._time_to_live = value
            self.remove_expired()

    @property
    def max_memory_bytes(self) -> int | None:
        return self._max_memory_bytes

    @max_memory_bytes.setter
    def max_memory_bytes(self, value: int | None) -> None:
        with self._lock:
            self._max_memory_bytes = value
            if value is not None:
                # Sizes were not tracked without a ceiling
                self._memory_bytes = 0
                for key, entry in self._entries.items():
                    entry.size_estimate = self._estimate(key, entry.value)
                    self._memory_bytes += entry.size_estimate
                self._evict_over_memory()

    def get(self, key: K, default: V | None = None) -> V | None:
        """Return the cached value for ``key``, or ``default`` on a miss.

        A hit marks the entry as most recently used.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return default

            now = self._clock()
            if entry.is_expired(now, self._time_to_live):
                self._remove(key)
                self._evictions += 1
                self._misses += 1
                return default

            entry.last_access = now
            self._entries.move_to_end(key)
            self._hits += 1
            return entry.value

    def set(self, key: K, value: V) -> None:
        """Store ``value`` under ``key`` as the most recently used entry."""
        with self._lock:
            now = self._clock()
            if key in self._entries:
                self._remove(key)

            size = self._estimate(key, value) if self._tracks_memory else 0
            self._entries[key] = CacheEntry(
                value=value,
                last_access=now,
                inserted_at=now,
                size_estimate=size,
            )
            self._memory_bytes += size

            self._evict_over_capacity()
            self._evict_over_memory()

    def delete(self, key: K) -> bool:
        """Remove ``key``; returns True if it was present."""
        with self._lock:
            if key not in self._entries:
                return False
            self._remove(key)
            return True

    def clear(self) -> int:
        """Remove every entry and reset counters; returns entries removed."""
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
            self._memory_bytes = 0
            self._hits = 0
            self._misses = 0
            self._evictions = 0
            return removed

    def trim_to_size(self, target: int) -> int:
        """Evict least-recently-used entries until at most ``target`` remain.

        Returns:
            Number of entries removed.
        """
        target = max(0, int(target))
        with self._lock:
            removed = 0
            while len(self._entries) > target:
                self._pop_lru()
                removed += 1
            return removed

    def remove_expired(self) -> int:
        """Drop all expired entries; returns how many were removed."""
        if self._time_to_live is None:
            return 0
        with self._lock:
            now = self._clock()
            expired = [
                key
                for key, entry in self._entries.items()
                if entry.is_expired(now, self._time_to_live)
            ]
            for key in expired:
                self._remove(key)
            self._evictions += len(expired)
            return len(expired)

    def get_estimated_memory_usage(self) -> int:
        """Approximate bytes held by keys and values."""
        with self._lock:
            if self._tracks_memory:
                return self._memory_bytes
            return sum(
                self._estimate(key, entry.value)
                for key, entry in self._entries.items()
            )

    def keys(self) -> list[K]:
        """Keys from least to most recently used."""
        with self._lock:
            return list(self._entries.keys())

    def stats(self) -> CacheStats:
        """Snapshot of the cache counters."""
        with self._lock:
            return CacheStats(
                name=self.name,
                size=len(self._entries),
                capacity=self._max_size,
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
                memory_bytes=self.get_estimated_memory_usage(),
                time_to_live=self._time_to_live,
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            entry = self._entries.get(key)  # type: ignore[arg-type]
            if entry is None:
                return False
            if entry.is_expired(self._clock(), self._time_to_live):
                self._remove(key)  # type: ignore[arg-type]
                self._evictions += 1
                return False
            return True

    def __repr__(self) -> str:
        return (
            f"MemoryAwareLRUCache(name={self.name!r}, size={len(self)}, "
            f"max_size={self._max_size})"
        )

    @property
    def _tracks_memory(self) -> bool:
        return self._max_memory_bytes is not None

    def _estimate(self, key: K, value: V) -> int:
        return self._sizer(key) + self._sizer(value)

    def _remove(self, key: K) -> None:
        entry = self._entries.pop(key)
        self._memory_bytes -= entry.size_estimate

    def _pop_lru(self) -> None:
        key, entry = self._entries.popitem(last=False)
        self._memory_bytes -= entry.size_estimate
        self._evictions += 1

    def _evict_over_capacity(self) -> None:
        while len(self._entries) > self._max_size:
            self._pop_lru()

    def _evict_over_memory(self) -> None:
        if self._max_memory_bytes is None:
            return
        # Always keep the newest entry, even if it alone exceeds the ceiling
        while self._memory_bytes > self._max_memory_bytes and len(self._entries) > 1:
            self._pop_lru()
