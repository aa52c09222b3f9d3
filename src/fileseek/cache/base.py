"""Cache entry, statistics and size estimation."""

import sys
from dataclasses import dataclass, fields, is_dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

V = TypeVar("V")


class MemoryPressure(str, Enum):
    """Memory pressure classification fed into cache trimming."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass
class CacheEntry(Generic[V]):
    """A cached value and its bookkeeping.

    Attributes:
        value: The cached value.
        last_access: Monotonic time of the last read or write.
        inserted_at: Monotonic time the value was stored.
        size_estimate: Approximate size of key and value in bytes.
    """

    value: V
    last_access: float
    inserted_at: float
    size_estimate: int = 0

    def is_expired(self, now: float, time_to_live: float | None) -> bool:
        """Check whether the entry is older than ``time_to_live`` seconds."""
        if time_to_live is None:
            return False
        return now - self.inserted_at > time_to_live


@dataclass
class CacheStats:
    """Snapshot of a cache's counters."""

    name: str
    size: int
    capacity: int
    hits: int
    misses: int
    evictions: int
    memory_bytes: int
    time_to_live: float | None = None

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "size": self.size,
            "capacity": self.capacity,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "hit_rate": round(self.hit_rate, 4),
            "memory_bytes": self.memory_bytes,
            "time_to_live": self.time_to_live,
        }


def estimate_size(obj: Any, _depth: int = 0) -> int:
    """Roughly estimate the memory held by ``obj`` in bytes.

    Strings count two bytes per character, numbers eight. Containers and
    dataclasses are summed recursively (bounded depth); anything else falls
    back to ``sys.getsizeof``.
    """
    if obj is None:
        return 0
    if isinstance(obj, bool):
        return 4
    if isinstance(obj, (int, float)):
        return 8
    if isinstance(obj, str):
        return len(obj) * 2
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return len(obj)
    if _depth > 4:
        return sys.getsizeof(obj)

    if isinstance(obj, dict):
        return sum(
            estimate_size(k, _depth + 1) + estimate_size(v, _depth + 1)
            for k, v in obj.items()
        )
    sizer = getattr(obj, "size_estimate", None)
    if callable(sizer):
        return int(sizer())

    if isinstance(obj, (list, tuple, set, frozenset)):
        return sum(estimate_size(item, _depth + 1) for item in obj)
    if is_dataclass(obj) and not isinstance(obj, type):
        return sum(
            estimate_size(getattr(obj, f.name), _depth + 1) for f in fields(obj)
        )
    return sys.getsizeof(obj)
