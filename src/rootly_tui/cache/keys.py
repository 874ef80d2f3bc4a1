"""Deterministic cache key construction.

A key is the resource prefix followed by ``name=value`` pairs sorted by
name::

    incidents:page=2:pageSize=25:sort=-created_at
    incident_detail:id=abc123:updatedAt=1718000000000000

Sorting makes the key independent of the order parameters were added in,
and the prefix keeps keys for different resources apart.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Optional

PREFIX_INCIDENTS = "incidents"
PREFIX_ALERTS = "alerts"
PREFIX_INCIDENT_DETAIL = "incident_detail"
PREFIX_ALERT_DETAIL = "alert_detail"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _render(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class CacheKeyBuilder:
    """Fluent builder for cache keys.

    Example::

        key = (
            CacheKeyBuilder("incidents")
            .with_param("pageSize", 25)
            .with_param("page", 1)
            .build()
        )
        # 'incidents:page=1:pageSize=25'

    Setting the same name twice keeps the last value.
    """

    def __init__(self, prefix: str) -> None:
        self._prefix = prefix
        self._params: dict[str, str] = {}

    def with_param(self, name: str, value: Any) -> CacheKeyBuilder:
        self._params[name] = _render(value)
        return self

    def build(self) -> str:
        if not self._params:
            return self._prefix
        parts = [f"{name}={self._params[name]}" for name in sorted(self._params)]
        return self._prefix + ":" + ":".join(parts)


def build_key(prefix: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """Build a key from a prefix and a mapping in one call."""
    builder = CacheKeyBuilder(prefix)
    for name, value in (params or {}).items():
        builder.with_param(name, value)
    return builder.build()


def version_stamp(updated_at: datetime) -> str:
    """Render a record's ``updated_at`` as an exact, sortable key component.

    Uses integer microseconds since the epoch so two stamps are equal only
    when the timestamps are equal.
    """
    if updated_at.tzinfo is None:
        # Naive timestamps from the API are UTC.
        updated_at = updated_at.replace(tzinfo=timezone.utc)
    delta = updated_at - _EPOCH
    return str((delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds)


def list_key(prefix: str, page: int, page_size: int, sort: str = "") -> str:
    """Key for one page of a list view; ``sort`` is omitted when empty."""
    builder = CacheKeyBuilder(prefix).with_param("page", page).with_param("pageSize", page_size)
    if sort:
        builder.with_param("sort", sort)
    return builder.build()


def detail_key(prefix: str, item_id: str, updated_at: Optional[datetime] = None) -> str:
    """Key for a detail record, addressed by id and version stamp.

    Without a version stamp the key degrades to id only.
    """
    builder = CacheKeyBuilder(prefix).with_param("id", item_id)
    if updated_at is not None:
        builder.with_param("updatedAt", version_stamp(updated_at))
    return builder.build()
