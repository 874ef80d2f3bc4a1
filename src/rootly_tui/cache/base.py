"""Shared contract for the TTL cache tiers.

Both tiers expire entries lazily: a read past the deadline is a miss, and the
stale entry is removed on a background thread instead of on the read path.
There are no sweep timers. Each instance has exactly one TTL, fixed at
construction, so list pages and detail records live in separate instances.
"""

from __future__ import annotations

import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Generic, Optional, TypeVar

from pydantic import TypeAdapter, ValidationError

from rootly_tui.debug import DebugLog

V = TypeVar("V")
T = TypeVar("T")

Clock = Callable[[], float]


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    """One stored value and its absolute expiry (seconds since the epoch).

    Entries are never updated in place: ``set`` replaces the whole entry.
    """

    key: str
    payload: V
    expires_at: float


@lru_cache(maxsize=None)
def type_adapter(type_: Any) -> TypeAdapter:
    return TypeAdapter(type_)


class TTLCache(ABC, Generic[V]):
    """Abstract TTL cache.

    Args:
        ttl: Lifetime of every entry in seconds.
        log: Logging handle for hits, misses and failures.
        clock: Time source returning seconds since the epoch.
    """

    def __init__(self, ttl: float, log: DebugLog, clock: Clock = time.time) -> None:
        self._ttl = float(ttl)
        self._log = log
        self._clock = clock

    @property
    def ttl(self) -> float:
        return self._ttl

    @abstractmethod
    def get(self, key: str) -> tuple[Optional[V], bool]:
        """Return ``(value, True)`` for a live entry, ``(None, False)`` otherwise."""

    @abstractmethod
    def set(self, key: str, value: V) -> None:
        """Store *value* under *key*, replacing any existing entry."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove *key* if present."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every entry."""

    def close(self) -> None:
        """Release any resources held by the cache."""

    def get_typed(self, key: str, type_: type[T]) -> tuple[Optional[T], bool]:
        """Like :meth:`get`, but validate the value as *type_*.

        A value that does not validate is reported as a miss, so a caller
        re-fetches and the next ``set`` supersedes the bad entry.
        """
        value, found = self.get(key)
        if not found:
            return None, False
        try:
            return type_adapter(type_).validate_python(value), True
        except ValidationError as exc:
            self._log.warning(
                "Cached value has unexpected shape",
                key=key,
                errors=exc.error_count(),
            )
            return None, False

    # ------------------------------------------------------------------ #
    # Expiry
    # ------------------------------------------------------------------ #

    def _deadline(self) -> float:
        return self._clock() + self._ttl

    def _is_expired(self, expires_at: float) -> bool:
        return self._clock() > expires_at

    def _schedule_eviction(self, key: str) -> None:
        """Remove *key* on a daemon thread if it is still expired by then."""
        thread = threading.Thread(
            target=self._evict_if_expired,
            args=(key,),
            name="cache-evict",
            daemon=True,
        )
        thread.start()

    @abstractmethod
    def _evict_if_expired(self, key: str) -> None:
        """Delete *key* only when the stored entry is expired.

        A ``set`` racing with eviction must win, so implementations re-check
        the deadline under their write lock.
        """
