"""Build the list and detail cache tiers from configuration."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Optional

from rootly_tui.cache.base import Clock, TTLCache
from rootly_tui.cache.memory import MemoryCache
from rootly_tui.cache.persistent import PersistentCache, open_persistent_cache
from rootly_tui.debug import DebugLog
from rootly_tui.models import CacheConfig

LISTS_SUBDIR = "lists"
DETAILS_SUBDIR = "details"


def open_cache_tiers(
    config: CacheConfig,
    cache_dir: str | Path,
    log: DebugLog,
    clock: Clock = time.time,
) -> tuple[Optional[TTLCache[Any]], Optional[TTLCache[Any]]]:
    """Return ``(list_cache, detail_cache)``.

    * ``enabled=False`` -- ``(None, None)``; every read goes to the remote.
    * ``persistent=False`` -- two :class:`MemoryCache` instances.
    * otherwise -- two durable caches under *cache_dir*. A tier that cannot
      be opened comes back as ``None`` and the other is still usable.
    """
    if not config.enabled:
        log.debug("Caching disabled")
        return None, None

    if not config.persistent:
        return (
            MemoryCache(config.list_ttl_seconds, log, clock),
            MemoryCache(config.detail_ttl_seconds, log, clock),
        )

    tiers = open_durable_tiers(config, cache_dir, log, clock)
    return tiers[LISTS_SUBDIR], tiers[DETAILS_SUBDIR]


def open_durable_tiers(
    config: CacheConfig,
    cache_dir: str | Path,
    log: DebugLog,
    clock: Clock = time.time,
    create: bool = True,
) -> dict[str, Optional[PersistentCache]]:
    """Open the on-disk tiers keyed by subdirectory name.

    With ``create=False`` a tier whose directory does not exist yet is left
    out instead of being created empty.
    """
    base = Path(cache_dir)
    tiers: dict[str, Optional[PersistentCache]] = {}
    for name, ttl in (
        (LISTS_SUBDIR, config.list_ttl_seconds),
        (DETAILS_SUBDIR, config.detail_ttl_seconds),
    ):
        directory = base / name
        if not create and not directory.is_dir():
            continue
        tiers[name] = open_persistent_cache(directory, ttl, log, clock)
    return tiers
