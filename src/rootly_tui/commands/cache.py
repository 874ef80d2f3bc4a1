"""Cache commands -- inspect and maintain the on-disk cache tiers.

Memory tiers live only inside a running ``rootly-tui run`` process, so
these commands always work on the durable tiers under the cache directory.
When persistent caching is switched off they still reach whatever an
earlier configuration left on disk, but never create new tiers.
"""

from __future__ import annotations

from typing import Any

import typer

from rootly_tui.cache import PersistentCache, open_durable_tiers
from rootly_tui.commands.data import reported_errors
from rootly_tui.config import get_cache_dir
from rootly_tui.context import get_app_context
from rootly_tui.models import CacheConfig

cache_app = typer.Typer(no_args_is_help=True)


def _tiers(ctx: typer.Context) -> dict[str, PersistentCache]:
    app_ctx = get_app_context(ctx)
    with reported_errors(app_ctx):
        config: CacheConfig = app_ctx.load_config_unchecked().cache
    in_use = config.enabled and config.persistent
    if not in_use:
        app_ctx.output.info("Persistent caching is off; only existing on-disk tiers are used.")
    tiers = open_durable_tiers(config, get_cache_dir(), app_ctx.log, create=in_use)
    return {name: tier for name, tier in tiers.items() if tier is not None}


@cache_app.command("clear")
def cache_clear(ctx: typer.Context) -> None:
    """Remove every cached list page and detail record."""
    output = get_app_context(ctx).output
    tiers = _tiers(ctx)
    for tier in tiers.values():
        tier.clear()
        tier.close()
    output.success(f"Cleared {len(tiers)} cache tier(s).")


@cache_app.command("cleanup")
def cache_cleanup(ctx: typer.Context) -> None:
    """Remove only expired entries from the durable cache."""
    output = get_app_context(ctx).output
    removed = 0
    for tier in _tiers(ctx).values():
        removed += tier.cleanup()
        tier.close()
    output.success(f"Removed {removed} expired entr{'y' if removed == 1 else 'ies'}.")


@cache_app.command("stats")
def cache_stats(ctx: typer.Context) -> None:
    """Show entry counts and TTLs per on-disk cache tier."""
    output = get_app_context(ctx).output
    tiers = _tiers(ctx)
    if not tiers:
        output.info("No on-disk cache tiers.")
    stats: dict[str, Any] = {}
    for name, tier in tiers.items():
        stats[name] = tier.stats()
        tier.close()
    output.format_response(stats)
