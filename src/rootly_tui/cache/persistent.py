"""Durable cache tier that survives restarts.

Each entry is stored as a JSON envelope::

    {"value": <JSON-compatible payload>, "expires_at": 1718000030.5}

Expiry is tracked in the envelope, not by diskcache, so the read path
applies the same lazy-expiry rules as the memory tier. Values come back as
plain JSON data; use :meth:`~rootly_tui.cache.base.TTLCache.get_typed` to
get model instances back.

Store failures are logged and treated as a miss or a skipped write. They
never reach the caller.
"""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any, Optional

from rootly_tui.cache.base import Clock, TTLCache, type_adapter
from rootly_tui.cache.store import STORE_ERRORS, PersistentStore
from rootly_tui.debug import DebugLog


class PersistentCache(TTLCache[Any]):
    """TTL cache backed by a :class:`~rootly_tui.cache.store.PersistentStore`.

    Prefer :func:`open_persistent_cache`, which turns an unopenable store
    into ``None``.
    """

    def __init__(
        self,
        store: PersistentStore,
        ttl: float,
        log: DebugLog,
        clock: Clock = time.time,
    ) -> None:
        super().__init__(ttl, log, clock)
        self._store = store

    @property
    def store(self) -> PersistentStore:
        return self._store

    def get(self, key: str) -> tuple[Optional[Any], bool]:
        try:
            raw = self._store.get(key)
        except STORE_ERRORS as exc:
            self._log.warning("Cache read failed", key=key, error=exc)
            return None, False
        if raw is None:
            return None, False

        envelope = self._decode(key, raw)
        if envelope is None:
            return None, False
        if self._is_expired(envelope["expires_at"]):
            self._schedule_eviction(key)
            return None, False
        return envelope["value"], True

    def set(self, key: str, value: Any) -> None:
        try:
            payload = type_adapter(Any).dump_python(value, mode="json")
            raw = json.dumps({"value": payload, "expires_at": self._deadline()})
        except (TypeError, ValueError) as exc:
            self._log.warning("Cache value is not serialisable", key=key, error=exc)
            return
        try:
            self._store.put(key, raw)
        except STORE_ERRORS as exc:
            self._log.warning("Cache write failed", key=key, error=exc)

    def delete(self, key: str) -> None:
        try:
            self._store.delete(key)
        except STORE_ERRORS as exc:
            self._log.warning("Cache delete failed", key=key, error=exc)

    def clear(self) -> None:
        try:
            removed = self._store.clear()
        except STORE_ERRORS as exc:
            self._log.warning("Cache clear failed", error=exc)
            return
        self._log.debug("Cache cleared", directory=self._store.directory, removed=removed)

    def cleanup(self) -> int:
        """Remove every expired entry and return how many were removed.

        Keys are scanned without the write lock; the expired subset is then
        deleted in a single write transaction. The scan is not a snapshot, so
        each candidate is checked again under the write lock and an entry
        rewritten in between is kept.
        """
        try:
            expired = [
                key for key, raw in self._store.items() if self._raw_expired(raw)
            ]
            if not expired:
                return 0
            removed = self._store.delete_many(expired, self._raw_expired)
        except STORE_ERRORS as exc:
            self._log.warning("Cache cleanup failed", error=exc)
            return 0
        self._log.debug("Cache cleanup", removed=removed)
        return removed

    def stats(self) -> dict[str, Any]:
        try:
            stats = self._store.stats()
        except STORE_ERRORS as exc:
            self._log.warning("Cache stats failed", error=exc)
            stats = {"directory": str(self._store.directory)}
        stats["ttl_seconds"] = self._ttl
        return stats

    def close(self) -> None:
        try:
            self._store.close()
        except STORE_ERRORS as exc:
            self._log.warning("Cache close failed", error=exc)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _decode(self, key: str, raw: str) -> Optional[dict[str, Any]]:
        try:
            envelope = json.loads(raw)
            return {"value": envelope["value"], "expires_at": float(envelope["expires_at"])}
        except (json.JSONDecodeError, TypeError, KeyError, ValueError) as exc:
            self._log.warning("Cache entry is corrupt", key=key, error=exc)
            return None

    def _raw_expired(self, raw: Optional[str]) -> bool:
        # Corrupt entries count as expired so cleanup removes them.
        if raw is None:
            return False
        try:
            return self._is_expired(float(json.loads(raw)["expires_at"]))
        except (json.JSONDecodeError, TypeError, KeyError, ValueError):
            return True

    def _evict_if_expired(self, key: str) -> None:
        try:
            if self._store.delete_where(key, self._raw_expired):
                self._log.debug("Evicted expired entry", key=key)
        except STORE_ERRORS as exc:
            self._log.debug("Eviction skipped", key=key, error=exc)


def open_persistent_cache(
    directory: str | Path,
    ttl: float,
    log: DebugLog,
    clock: Clock = time.time,
) -> Optional[PersistentCache]:
    """Open a durable cache in *directory*, or return ``None`` if it cannot be opened.

    ``None`` means "no cache": callers always fetch from the remote source.
    """
    try:
        store = PersistentStore(directory)
    except STORE_ERRORS as exc:
        log.warning("Persistent cache unavailable", directory=directory, error=exc)
        return None
    log.debug("Persistent cache opened", directory=directory, ttl=ttl)
    return PersistentCache(store, ttl, log, clock)
