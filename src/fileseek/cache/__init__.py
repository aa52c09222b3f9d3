"""In-memory caching for fileseek."""

from fileseek.cache.base import CacheEntry, CacheStats, MemoryPressure, estimate_size
from fileseek.cache.lru import MemoryAwareLRUCache
from fileseek.cache.memory import MemoryMonitor, MemoryStats, system_memory_fraction
from fileseek.cache.registry import RETAIN_FRACTIONS, CacheProfile, CacheRegistry

__all__ = [
    "RETAIN_FRACTIONS",
    "CacheEntry",
    "CacheProfile",
    "CacheRegistry",
    "CacheStats",
    "MemoryAwareLRUCache",
    "MemoryMonitor",
    "MemoryPressure",
    "MemoryStats",
    "estimate_size",
    "system_memory_fraction",
]
