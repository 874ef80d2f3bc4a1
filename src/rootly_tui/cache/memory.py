"""In-process cache tier guarded by a reader/writer lock."""

from __future__ import annotations

import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional

from rootly_tui.cache.base import CacheEntry, Clock, TTLCache, V
from rootly_tui.debug import DebugLog


class RWLock:
    """Shared/exclusive lock: many readers or one writer.

    Waiting writers block new readers so a steady stream of reads cannot
    starve a ``set``.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class MemoryCache(TTLCache[V]):
    """TTL cache holding values as live Python objects.

    Values are returned by reference, so callers store immutable records
    (the domain models are frozen).

    Example::

        cache: MemoryCache[IncidentPage] = MemoryCache(ttl=30, log=log)
        cache.set("incidents:page=1:pageSize=25", page)
        value, found = cache.get("incidents:page=1:pageSize=25")
    """

    def __init__(self, ttl: float, log: DebugLog, clock: Clock = time.time) -> None:
        super().__init__(ttl, log, clock)
        self._lock = RWLock()
        self._data: dict[str, CacheEntry[V]] = {}

    def get(self, key: str) -> tuple[Optional[V], bool]:
        with self._lock.read():
            entry = self._data.get(key)
        if entry is None:
            return None, False
        if self._is_expired(entry.expires_at):
            self._schedule_eviction(key)
            return None, False
        return entry.payload, True

    def set(self, key: str, value: V) -> None:
        entry = CacheEntry(key=key, payload=value, expires_at=self._deadline())
        with self._lock.write():
            self._data[key] = entry

    def delete(self, key: str) -> None:
        with self._lock.write():
            self._data.pop(key, None)

    def clear(self) -> None:
        with self._lock.write():
            self._data = {}

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._data)

    def _evict_if_expired(self, key: str) -> None:
        with self._lock.write():
            entry = self._data.get(key)
            if entry is not None and self._is_expired(entry.expires_at):
                del self._data[key]
