"""Named cache registry owned by the composition root."""

import logging
import threading
from enum import Enum
from typing import Any

from fileseek.cache.base import CacheStats, MemoryPressure
from fileseek.cache.lru import MemoryAwareLRUCache
from fileseek.cache.memory import MemoryMonitor, MemoryStats
from fileseek.exceptions import CacheError
from fileseek.utils.logging import get_logger, log_with_context

logger = get_logger(__name__)


class CacheProfile(str, Enum):
    """How hard a cache is trimmed under memory pressure.

    LIGHT caches hold small values (file stats); HEAVY caches hold file
    content, word indexes or derived match results.
    """

    LIGHT = "light"
    HEAVY = "heavy"


# Fraction of current entries each profile keeps at a given pressure level
RETAIN_FRACTIONS: dict[CacheProfile, dict[MemoryPressure, float]] = {
    CacheProfile.LIGHT: {
        MemoryPressure.LOW: 1.0,
        MemoryPressure.MEDIUM: 0.7,
        MemoryPressure.HIGH: 0.3,
    },
    CacheProfile.HEAVY: {
        MemoryPressure.LOW: 1.0,
        MemoryPressure.MEDIUM: 0.5,
        MemoryPressure.HIGH: 0.0,
    },
}


class CacheRegistry:
    """Creates caches by name and trims them when memory gets tight.

    Usage:
        registry = CacheRegistry()
        stats = registry.get_or_create_cache("file_stats", max_size=100)
        registry.apply_memory_pressure("high")
    """

    def __init__(self) -> None:
        self._caches: dict[str, MemoryAwareLRUCache[Any, Any]] = {}
        self._profiles: dict[str, CacheProfile] = {}
        self._lock = threading.Lock()

    def create_cache(
        self,
        name: str,
        max_size: int,
        time_to_live: float | None = None,
        *,
        max_memory_bytes: int | None = None,
        profile: CacheProfile | str = CacheProfile.HEAVY,
    ) -> MemoryAwareLRUCache[Any, Any]:
        """Create and register a new cache.

        Raises:
            CacheError: If a cache with this name already exists.
        """
        with self._lock:
            if name in self._caches:
                raise CacheError(f"Cache '{name}' already exists")
            return self._create(name, max_size, time_to_live, max_memory_bytes, profile)

    def get_or_create_cache(
        self,
        name: str,
        max_size: int,
        time_to_live: float | None = None,
        *,
        max_memory_bytes: int | None = None,
        profile: CacheProfile | str = CacheProfile.HEAVY,
    ) -> MemoryAwareLRUCache[Any, Any]:
        """Return the cache registered as ``name``, creating it if needed.

        Settings only apply on creation; an existing cache is returned as-is.
        """
        with self._lock:
            existing = self._caches.get(name)
            if existing is not None:
                return existing
            return self._create(name, max_size, time_to_live, max_memory_bytes, profile)

    def get_cache(self, name: str) -> MemoryAwareLRUCache[Any, Any] | None:
        with self._lock:
            return self._caches.get(name)

    def remove_cache(self, name: str) -> bool:
        with self._lock:
            self._profiles.pop(name, None)
            return self._caches.pop(name, None) is not None

    def names(self) -> list[str]:
        with self._lock:
            return list(self._caches)

    def clear_all(self) -> int:
        """Empty every cache; returns the total number of entries removed."""
        return sum(cache.clear() for cache in self._snapshot().values())

    def stats(self) -> list[CacheStats]:
        return [cache.stats() for cache in self._snapshot().values()]

    def total_memory_usage(self) -> int:
        return sum(
            cache.get_estimated_memory_usage() for cache in self._snapshot().values()
        )

    def apply_memory_pressure(
        self, level: MemoryPressure | str
    ) -> dict[str, int]:
        """Trim caches according to their profile and the pressure level.

        Args:
            level: "low", "medium" or "high".

        Returns:
            Mapping of cache name to entries removed (only caches trimmed).
        """
        pressure = MemoryPressure(level)
        if pressure is MemoryPressure.LOW:
            return {}

        removed: dict[str, int] = {}
        with self._lock:
            targets = [
                (name, cache, self._profiles[name])
                for name, cache in self._caches.items()
            ]

        for name, cache, profile in targets:
            keep = RETAIN_FRACTIONS[profile][pressure]
            count = cache.trim_to_size(int(len(cache) * keep))
            if count:
                removed[name] = count

        if removed:
            log_with_context(
                logger,
                logging.INFO,
                "Trimmed caches under memory pressure",
                pressure=pressure.value,
                **removed,
            )
        return removed

    def attach(self, monitor: MemoryMonitor) -> None:
        """Trim caches whenever ``monitor`` reports medium or high pressure."""
        monitor.add_listener(self._on_memory_stats)

    def detach(self, monitor: MemoryMonitor) -> None:
        monitor.remove_listener(self._on_memory_stats)

    def _on_memory_stats(self, stats: MemoryStats) -> None:
        self.apply_memory_pressure(stats.pressure)

    def _create(
        self,
        name: str,
        max_size: int,
        time_to_live: float | None,
        max_memory_bytes: int | None,
        profile: CacheProfile | str,
    ) -> MemoryAwareLRUCache[Any, Any]:
        cache: MemoryAwareLRUCache[Any, Any] = MemoryAwareLRUCache(
            max_size,
            time_to_live,
            max_memory_bytes=max_memory_bytes,
            name=name,
        )
        self._caches[name] = cache
        self._profiles[name] = CacheProfile(profile)
        return cache

    def _snapshot(self) -> dict[str, MemoryAwareLRUCache[Any, Any]]:
        with self._lock:
            return dict(self._caches)
