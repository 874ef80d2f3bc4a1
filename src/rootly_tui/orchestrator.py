"""Cache-then-fetch composition for every data operation the UI needs.

Each operation builds a key, looks it up, and on a miss fetches from the
:class:`~rootly_tui.client.source.RemoteSource` and populates the cache.
Detail keys embed the record's ``updated_at``, so a record that changed
upstream is addressed by a new key and the stale entry simply ages out.

Failures are never cached. There is no single-flight guard: two concurrent
misses on one key both fetch, and the later write wins. A fetch that was
already in flight when :meth:`DataOrchestrator.clear_all` ran returns its
result but does not write it back, so a refresh never reloads pre-refresh
data from the cache.
"""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Any, Callable, Optional, TypeVar

from rootly_tui.cache.base import TTLCache
from rootly_tui.cache.keys import (
    PREFIX_ALERT_DETAIL,
    PREFIX_ALERTS,
    PREFIX_INCIDENT_DETAIL,
    PREFIX_INCIDENTS,
    detail_key,
    list_key,
)
from rootly_tui.client.source import RemoteSource
from rootly_tui.debug import DebugLog
from rootly_tui.models import Alert, AlertPage, Incident, IncidentPage

T = TypeVar("T")


class DataOrchestrator:
    """Serve list pages and detail records through the cache tiers.

    Args:
        source: Remote data source.
        list_cache: Cache for list pages, or ``None`` for no caching.
        detail_cache: Cache for detail records, or ``None`` for no caching.
        log: Logging handle.
        page_size: Page size sent with every list request.

    Safe to call from several worker threads at once.
    """

    def __init__(
        self,
        source: RemoteSource,
        list_cache: Optional[TTLCache[Any]],
        detail_cache: Optional[TTLCache[Any]],
        log: DebugLog,
        page_size: int = 25,
    ) -> None:
        self._source = source
        self._list_cache = list_cache
        self._detail_cache = detail_cache
        self._log = log
        self._page_size = page_size
        self._epoch = 0
        self._epoch_lock = threading.Lock()

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def caches(self) -> list[TTLCache[Any]]:
        """The cache tiers that are actually open."""
        return [c for c in (self._list_cache, self._detail_cache) if c is not None]

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #

    def list_incidents(self, page: int = 1, sort: str = "") -> IncidentPage:
        key = list_key(PREFIX_INCIDENTS, page, self._page_size, sort)
        return self._cached(
            self._list_cache,
            key,
            IncidentPage,
            lambda: self._source.list_incidents(page, self._page_size, sort),
        )

    def list_alerts(self, page: int = 1) -> AlertPage:
        key = list_key(PREFIX_ALERTS, page, self._page_size)
        return self._cached(
            self._list_cache,
            key,
            AlertPage,
            lambda: self._source.list_alerts(page, self._page_size),
        )

    def get_incident_detail(
        self, incident_id: str, updated_at: Optional[datetime] = None
    ) -> Incident:
        """Return the full incident, addressed by id and last known version."""
        key = detail_key(PREFIX_INCIDENT_DETAIL, incident_id, updated_at)
        return self._cached(
            self._detail_cache,
            key,
            Incident,
            lambda: self._source.get_incident(incident_id),
        )

    def get_alert_detail(self, alert_id: str, updated_at: Optional[datetime] = None) -> Alert:
        """Return the full alert, addressed by id and last known version."""
        key = detail_key(PREFIX_ALERT_DETAIL, alert_id, updated_at)
        return self._cached(
            self._detail_cache,
            key,
            Alert,
            lambda: self._source.get_alert(alert_id),
        )

    def clear_all(self) -> None:
        """Wipe every cache tier and disown fetches that are still in flight."""
        with self._epoch_lock:
            self._epoch += 1
            for cache in self.caches:
                cache.clear()
        self._log.info("Cache cleared")

    def close(self) -> None:
        """Release the cache tiers and the remote source."""
        for cache in self.caches:
            cache.close()
        self._source.close()

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _cached(
        self,
        cache: Optional[TTLCache[Any]],
        key: str,
        type_: type[T],
        fetch: Callable[[], T],
    ) -> T:
        epoch = self._epoch
        if cache is not None:
            value, found = cache.get_typed(key, type_)
            if found:
                self._log.debug("Cache hit", key=key)
                return value  # type: ignore[return-value]

        self._log.debug("Cache miss", key=key)
        result = fetch()
        if cache is None:
            return result
        with self._epoch_lock:
            if epoch != self._epoch:
                self._log.debug("Cache cleared during fetch; not storing", key=key)
                return result
            cache.set(key, result)
        self._log.debug("Cached", key=key)
        return result
