"""Transactional key/value store backing the durable cache tier.

A thin wrapper over :class:`diskcache.Cache` (SQLite in WAL mode: one
writer, many readers). Values are opaque strings; the caller owns the
serialisation format. Lock waits are bounded by ``timeout`` so a second
process holding the database cannot hang the UI. Calls are never retried:
a lock wait that runs out raises :class:`diskcache.Timeout`.

Errors are not handled here. Callers catch :data:`STORE_ERRORS`.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any, Callable, Optional

import diskcache

DEFAULT_LOCK_TIMEOUT = 1.0
"""Seconds to wait for the SQLite lock before giving up."""

STORE_ERRORS: tuple[type[BaseException], ...] = (
    diskcache.Timeout,
    sqlite3.Error,
    OSError,
)
"""Exceptions a store operation may raise when the backing file misbehaves."""


class PersistentStore:
    """Key/value store in a diskcache directory.

    Args:
        directory: Cache directory. Created if missing.
        timeout: SQLite lock wait in seconds.

    Raises:
        OSError: If the directory cannot be created.
        sqlite3.Error: If the database cannot be opened.
    """

    def __init__(self, directory: str | Path, timeout: float = DEFAULT_LOCK_TIMEOUT) -> None:
        self._directory = Path(directory)
        self._cache = diskcache.Cache(str(self._directory), timeout=timeout)

    @property
    def directory(self) -> Path:
        return self._directory

    def get(self, key: str) -> Optional[str]:
        """Return the raw value for *key* in a single read, or ``None``."""
        return self._cache.get(key, default=None)

    def put(self, key: str, value: str) -> None:
        """Write *value* in one write transaction.

        Raises:
            diskcache.Timeout: If the write lock is not acquired within ``timeout``.
        """
        with self._cache.transact():
            self._cache.set(key, value)

    def delete(self, key: str) -> None:
        self._cache.delete(key)

    def delete_where(self, key: str, predicate: Callable[[Optional[str]], bool]) -> bool:
        """Delete *key* if *predicate* holds for its current value.

        The read and the delete share one write transaction, so a concurrent
        ``put`` either lands before the check or after the delete.
        """
        with self._cache.transact():
            if not predicate(self._cache.get(key, default=None)):
                return False
            return self._cache.delete(key)

    def delete_many(self, keys: Iterable[str], predicate: Callable[[Optional[str]], bool]) -> int:
        """Delete every key in *keys* whose value still satisfies *predicate*.

        All deletions happen in one write transaction, and each value is
        checked again inside it. Returns the number removed.
        """
        removed = 0
        with self._cache.transact():
            for key in keys:
                if predicate(self._cache.get(key, default=None)) and self._cache.delete(key):
                    removed += 1
        return removed

    def items(self) -> Iterator[tuple[str, Optional[str]]]:
        """Yield ``(key, value)`` pairs without taking the write lock.

        diskcache has no read-only transaction, so this is a key listing
        followed by one point read per key. Writers may interleave; a key
        deleted in between comes back with ``None``.
        """
        for key in list(self._cache.iterkeys()):
            yield key, self._cache.get(key, default=None)

    def clear(self) -> int:
        """Remove every entry in one write transaction. Returns the number removed.

        Readers see either the full tier or an empty one, never a partly
        cleared tier.
        """
        with self._cache.transact():
            keys = list(self._cache.iterkeys())
            return sum(1 for key in keys if self._cache.delete(key))

    def stats(self) -> dict[str, Any]:
        return {
            "directory": str(self._directory),
            "size": len(self._cache),
            "volume_bytes": self._cache.volume(),
        }

    def __len__(self) -> int:
        return len(self._cache)

    def close(self) -> None:
        self._cache.close()
