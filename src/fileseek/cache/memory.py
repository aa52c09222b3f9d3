"""System memory sampling and pressure classification."""

import logging
import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass

import psutil

from fileseek.cache.base import MemoryPressure
from fileseek.utils.logging import get_logger, log_with_context

logger = get_logger(__name__)

MemoryListener = Callable[["MemoryStats"], None]


@dataclass(frozen=True)
class MemoryStats:
    """One memory sample.

    Attributes:
        used_fraction: Fraction of system memory in use (0.0-1.0).
        pressure: Classification of ``used_fraction``.
        timestamp: Wall-clock time of the sample.
    """

    used_fraction: float
    pressure: MemoryPressure
    timestamp: float


def system_memory_fraction() -> float:
    """Fraction of physical memory currently in use."""
    return psutil.virtual_memory().percent / 100.0


class MemoryMonitor:
    """Tracks memory usage and tells listeners about it.

    Listeners receive every sample whose pressure is medium or high, plus
    any sample where the pressure level changes. Sampling happens on demand
    via ``check()`` or on a background thread via ``start_monitoring()``.
    """

    def __init__(
        self,
        medium_threshold: float = 0.70,
        high_threshold: float = 0.85,
        *,
        history_limit: int = 20,
        sampler: Callable[[], float] = system_memory_fraction,
    ) -> None:
        if medium_threshold > high_threshold:
            raise ValueError("medium_threshold must not exceed high_threshold")
        self.medium_threshold = medium_threshold
        self.high_threshold = high_threshold
        self._sampler = sampler
        self._history: deque[MemoryStats] = deque(maxlen=history_limit)
        self._listeners: list[MemoryListener] = []
        self._last_pressure = MemoryPressure.LOW
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def history(self) -> list[MemoryStats]:
        with self._lock:
            return list(self._history)

    @property
    def pressure(self) -> MemoryPressure:
        """Pressure level of the most recent sample."""
        return self._last_pressure

    def classify(self, used_fraction: float) -> MemoryPressure:
        if used_fraction >= self.high_threshold:
            return MemoryPressure.HIGH
        if used_fraction >= self.medium_threshold:
            return MemoryPressure.MEDIUM
        return MemoryPressure.LOW

    def sample(self) -> MemoryStats:
        """Take a sample and record it without notifying anyone."""
        used = self._sampler()
        stats = MemoryStats(
            used_fraction=used,
            pressure=self.classify(used),
            timestamp=time.time(),
        )
        with self._lock:
            self._history.append(stats)
        return stats

    def check(self) -> MemoryStats:
        """Sample memory and notify listeners when action may be needed."""
        stats = self.sample()
        changed = stats.pressure is not self._last_pressure
        self._last_pressure = stats.pressure

        if changed:
            level = (
                logging.WARNING
                if stats.pressure is MemoryPressure.HIGH
                else logging.INFO
            )
            log_with_context(
                logger,
                level,
                "Memory pressure changed",
                pressure=stats.pressure.value,
                used=f"{stats.used_fraction:.0%}",
            )

        if changed or stats.pressure is not MemoryPressure.LOW:
            for listener in list(self._listeners):
                listener(stats)
        return stats

    def add_listener(self, listener: MemoryListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: MemoryListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def start_monitoring(self, interval: float = 30.0) -> None:
        """Poll memory every ``interval`` seconds on a daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            args=(interval,),
            name="fileseek-memory-monitor",
            daemon=True,
        )
        self._thread.start()

    def stop_monitoring(self) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            self._thread = None

    @property
    def is_monitoring(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self, interval: float) -> None:
        while not self._stop_event.wait(interval):
            try:
                self.check()
            except Exception:
                logger.exception("Memory check failed")
