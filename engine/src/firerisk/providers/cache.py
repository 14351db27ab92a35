"""Time-bounded response cache shared across requests."""

from __future__ import annotations

import threading
import time
from typing import Callable, Generic, TypeVar

T = TypeVar("T")


def coordinate_key(lat: float, lon: float, decimals: int) -> str:
    return f"{lat:.{decimals}f},{lon:.{decimals}f}"


class TTLCache(Generic[T]):
    """Thread-safe mapping whose entries expire after ``ttl_seconds``.

    Safe for concurrent get/set from request handlers running on
    different threads.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, T]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> T | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, value = entry
            if self._expired(stored_at, self._clock()):
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: T) -> None:
        """Store a value and drop every entry that has already expired."""
        with self._lock:
            now = self._clock()
            stale = [
                k for k, (stored_at, _) in self._entries.items() if self._expired(stored_at, now)
            ]
            for k in stale:
                del self._entries[k]
            self._entries[key] = (now, value)

    def _expired(self, stored_at: float, now: float) -> bool:
        return now - stored_at >= self.ttl_seconds

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
