from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Hashable, Optional, TypeVar

from .models import Snapshot

V = TypeVar("V")

Clock = Callable[[], float]


@dataclass
class CacheEntry(Generic[V]):
    stored_at: float
    value: V


class TTLCache(Generic[V]):
    """In-memory cache whose entries expire ``ttl_seconds`` after being stored."""

    def __init__(self, ttl_seconds: float, *, clock: Clock = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Hashable, CacheEntry[V]] = {}

    def get(self, key: Hashable) -> Optional[V]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at >= self.ttl_seconds:
            return None
        return entry.value

    def set(self, key: Hashable, value: V) -> None:
        self._entries[key] = CacheEntry(stored_at=self._clock(), value=value)

    def clear(self) -> None:
        self._entries.clear()


class SnapshotCache:
    """Single-slot cache holding the latest :class:`Snapshot`.

    A new snapshot replaces the previous one in a single assignment. Concurrent
    misses may each rebuild; the last one to finish wins.
    """

    _KEY = "state"

    def __init__(self, ttl_seconds: float, *, clock: Clock = time.monotonic) -> None:
        self._slot: TTLCache[Snapshot] = TTLCache(ttl_seconds, clock=clock)

    @property
    def ttl_seconds(self) -> float:
        return self._slot.ttl_seconds

    def get(self) -> Optional[Snapshot]:
        return self._slot.get(self._KEY)

    def set(self, snapshot: Snapshot) -> None:
        self._slot.set(self._KEY, snapshot)

    def clear(self) -> None:
        self._slot.clear()
