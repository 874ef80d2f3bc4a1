"""One-shot data commands -- list and show incidents and alerts.

These go through the same :class:`~rootly_tui.orchestrator.DataOrchestrator`
as the interactive UI, so they read from and populate the same cache.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional

import typer

from rootly_tui.client.decode import parse_time
from rootly_tui.context import AppContext, get_app_context
from rootly_tui.exceptions import InvalidUsageError, RootlyTuiError
from rootly_tui.output import OutputFormat
from rootly_tui.sorting import IncidentSortField, SortDirection, SortState
from rootly_tui.tui.render import (
    ALERT_HEADERS,
    INCIDENT_HEADERS,
    alert_row,
    incident_row,
)


@contextmanager
def reported_errors(app_ctx: AppContext) -> Iterator[None]:
    """Print a :class:`RootlyTuiError` and exit with its code."""
    try:
        yield
    except RootlyTuiError as exc:
        app_ctx.log.error("Command failed", error=exc)
        app_ctx.output.error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _parse_version(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    parsed = parse_time(value)
    if parsed is None:
        raise InvalidUsageError(f"Invalid --updated-at timestamp: {value}")
    return parsed


def incidents_command(
    ctx: typer.Context,
    page: int = typer.Option(1, "--page", min=1, help="Page number."),
    sort: Optional[IncidentSortField] = typer.Option(
        None, "--sort", help="Sort field (descending unless --asc)."
    ),
    ascending: bool = typer.Option(False, "--asc", help="Sort ascending."),
) -> None:
    """List incidents.

    Example::

        rootly-tui incidents --page 2 --sort started_at
        rootly-tui --json incidents
    """
    app_ctx = get_app_context(ctx)
    with reported_errors(app_ctx):
        config = app_ctx.load_config()
        state = SortState(sort, SortDirection.ASC if ascending else SortDirection.DESC)
        orchestrator = app_ctx.open_orchestrator(config)
        try:
            result = orchestrator.list_incidents(page, state.param())
        finally:
            orchestrator.close()

    output = app_ctx.output
    if output.format == OutputFormat.JSON:
        output.format_response(result.model_dump(mode="json"))
        return
    rows = [incident_row(i, config.timezone) for i in result.items]
    output.print_table(INCIDENT_HEADERS, rows, title=f"Incidents (page {page})")
    if result.pagination.has_next:
        output.suggest(f"Next page: rootly-tui incidents --page {page + 1}")


def alerts_command(
    ctx: typer.Context,
    page: int = typer.Option(1, "--page", min=1, help="Page number."),
) -> None:
    """List alerts.

    Example::

        rootly-tui alerts --page 2
    """
    app_ctx = get_app_context(ctx)
    with reported_errors(app_ctx):
        config = app_ctx.load_config()
        orchestrator = app_ctx.open_orchestrator(config)
        try:
            result = orchestrator.list_alerts(page)
        finally:
            orchestrator.close()

    output = app_ctx.output
    if output.format == OutputFormat.JSON:
        output.format_response(result.model_dump(mode="json"))
        return
    rows = [alert_row(a, config.timezone) for a in result.items]
    output.print_table(ALERT_HEADERS, rows, title=f"Alerts (page {page})")
    if result.pagination.has_next:
        output.suggest(f"Next page: rootly-tui alerts --page {page + 1}")


def incident_command(
    ctx: typer.Context,
    incident_id: str = typer.Argument(help="Incident id."),
    updated_at: Optional[str] = typer.Option(
        None, "--updated-at", help="Last known updated_at (RFC 3339); part of the cache key."
    ),
) -> None:
    """Show one incident in full."""
    app_ctx = get_app_context(ctx)
    with reported_errors(app_ctx):
        version = _parse_version(updated_at)
        orchestrator = app_ctx.open_orchestrator()
        try:
            incident = orchestrator.get_incident_detail(incident_id, version)
        finally:
            orchestrator.close()
    app_ctx.output.format_response(incident.model_dump(mode="json"))


def alert_command(
    ctx: typer.Context,
    alert_id: str = typer.Argument(help="Alert id."),
    updated_at: Optional[str] = typer.Option(
        None, "--updated-at", help="Last known updated_at (RFC 3339); part of the cache key."
    ),
) -> None:
    """Show one alert in full."""
    app_ctx = get_app_context(ctx)
    with reported_errors(app_ctx):
        version = _parse_version(updated_at)
        orchestrator = app_ctx.open_orchestrator()
        try:
            alert = orchestrator.get_alert_detail(alert_id, version)
        finally:
            orchestrator.close()
    app_ctx.output.format_response(alert.model_dump(mode="json"))
