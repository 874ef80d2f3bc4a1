"""Rich renderables for the UI and table rows shared with the CLI commands.

Rendering is a pure function of :class:`~rootly_tui.tui.state.AppState`;
the spinner frame comes from the state, not from a clock.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from rich.console import Group, RenderableType
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from rootly_tui.models import Alert, Incident
from rootly_tui.tui.messages import Resource
from rootly_tui.tui.state import AppState, DetailLoadState, ListView

SPINNER_FRAMES = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"

LOG_PANEL_LINES = 30

KEY_HELP = (
    "tab switch  j/k move  enter detail  [/] page  s/S sort  "
    "r refresh  o open  l logs  q quit"
)

INCIDENT_HEADERS = ["ID", "Title", "Status", "Severity", "Created"]
ALERT_HEADERS = ["ID", "Summary", "Status", "Source", "Created"]

_SEVERITY_STYLES = {
    "critical": "bold red",
    "high": "red",
    "medium": "yellow",
    "low": "green",
}


# --- Formatting ---


def format_time(value: Optional[datetime], tz_name: str = "UTC") -> str:
    """``Jan 2, 2006 15:04 MST``, with the UTC time appended for non-UTC zones."""
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    try:
        zone = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        zone = ZoneInfo("UTC")
    local = value.astimezone(zone)
    text = f"{local:%b} {local.day}, {local:%Y %H:%M %Z}"
    if local.utcoffset():
        text += f" ({value.astimezone(timezone.utc):%H:%M} UTC)"
    return text


def format_duration(seconds: int) -> str:
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        mins, secs = divmod(seconds, 60)
        return f"{mins}m {secs}s" if secs else f"{mins}m"
    hours, rest = divmod(seconds, 3600)
    mins = rest // 60
    return f"{hours}h {mins}m" if mins else f"{hours}h"


def incident_row(incident: Incident, tz_name: str = "UTC") -> list[str]:
    return [
        incident.sequential_id or incident.id,
        incident.title,
        incident.status,
        incident.severity,
        format_time(incident.created_at, tz_name),
    ]


def alert_row(alert: Alert, tz_name: str = "UTC") -> list[str]:
    return [
        alert.short_id or alert.id,
        alert.summary,
        alert.status,
        alert.source,
        format_time(alert.created_at, tz_name),
    ]


# --- Panes ---


def _spinner(state: AppState) -> str:
    return SPINNER_FRAMES[state.spinner_frame % len(SPINNER_FRAMES)]


def _header(state: AppState) -> Text:
    header = Text("rootly-tui  ", style="bold magenta")
    for resource in Resource:
        label = f" {resource.value.title()} "
        style = "reverse bold" if resource is state.active else "dim"
        header.append(label, style=style)
        header.append(" ")
    if state.busy:
        header.append(f" {_spinner(state)} loading", style="cyan")
    return header


def _list_table(view: ListView, state: AppState, tz_name: str) -> Table:
    is_incidents = view.resource is Resource.INCIDENTS
    title = f"{view.resource.value.title()} - page {view.pagination.current_page}"
    if is_incidents and view.sort.enabled:
        title += f" (sorted {view.sort.describe()})"
    table = Table(title=title, expand=True, header_style="bold cyan")
    for header in INCIDENT_HEADERS if is_incidents else ALERT_HEADERS:
        table.add_column(header, overflow="ellipsis", no_wrap=True)

    for index, item in enumerate(view.items):
        row = incident_row(item, tz_name) if is_incidents else alert_row(item, tz_name)
        cells = [Text(cell) for cell in row]
        severity_style = _SEVERITY_STYLES.get(item.severity.lower()) if is_incidents else None
        if severity_style:
            cells[3].stylize(severity_style)
        table.add_row(*cells, style="reverse" if index == view.selected else "")

    if not view.items:
        message = f"{_spinner(state)} Loading..." if view.loading else (view.error or "No items")
        table.add_row(Text(message), *[""] * (len(table.columns) - 1))
    return table


def _field(lines: list[str], label: str, value: object) -> None:
    if value:
        lines.append(f"[bold]{escape(label)}:[/bold] {escape(str(value))}")


def _incident_detail(incident: Incident, tz_name: str) -> list[str]:
    lines = [f"[bold]{escape(incident.title)}[/bold]", ""]
    _field(lines, "ID", incident.sequential_id or incident.id)
    _field(lines, "Status", incident.status)
    _field(lines, "Severity", incident.severity)
    _field(lines, "Summary", incident.summary)
    _field(lines, "Created", format_time(incident.created_at, tz_name))
    _field(lines, "Started", format_time(incident.started_at, tz_name))
    _field(lines, "Detected", format_time(incident.detected_at, tz_name))
    _field(lines, "Acknowledged", format_time(incident.acknowledged_at, tz_name))
    _field(lines, "Mitigated", format_time(incident.mitigated_at, tz_name))
    _field(lines, "Resolved", format_time(incident.resolved_at, tz_name))
    if incident.started_at and incident.resolved_at:
        seconds = int((incident.resolved_at - incident.started_at).total_seconds())
        _field(lines, "Duration", format_duration(max(seconds, 0)))
    _field(lines, "Services", ", ".join(incident.services))
    _field(lines, "Environments", ", ".join(incident.environments))
    _field(lines, "Teams", ", ".join(incident.teams))
    _field(lines, "Commander", incident.commander_name)
    _field(lines, "Communicator", incident.communicator_name)
    _field(lines, "Created by", incident.created_by_name)
    _field(lines, "Causes", ", ".join(incident.causes))
    _field(lines, "Types", ", ".join(incident.incident_types))
    _field(lines, "Slack", incident.slack_channel_url)
    _field(lines, "Jira", incident.jira_issue_url)
    return lines


def _alert_detail(alert: Alert, tz_name: str) -> list[str]:
    lines = [f"[bold]{escape(alert.summary)}[/bold]", ""]
    _field(lines, "ID", alert.short_id or alert.id)
    _field(lines, "Status", alert.status)
    _field(lines, "Source", alert.source)
    _field(lines, "Urgency", alert.urgency)
    _field(lines, "Description", alert.description)
    _field(lines, "Created", format_time(alert.created_at, tz_name))
    _field(lines, "Started", format_time(alert.started_at, tz_name))
    _field(lines, "Ended", format_time(alert.ended_at, tz_name))
    _field(lines, "Services", ", ".join(alert.services))
    _field(lines, "Environments", ", ".join(alert.environments))
    _field(lines, "Groups", ", ".join(alert.groups))
    _field(lines, "Responders", ", ".join(alert.responders))
    for key in sorted(alert.labels):
        _field(lines, f"  {key}", alert.labels[key])
    _field(lines, "URL", alert.external_url)
    return lines


def _detail_panel(view: ListView, state: AppState, tz_name: str) -> Panel:
    item = view.selected_item
    if item is None:
        return Panel("Nothing selected", title="Detail")

    lines = (
        _incident_detail(item, tz_name)
        if view.resource is Resource.INCIDENTS
        else _alert_detail(item, tz_name)
    )
    detail_state = view.detail_state(item.id)
    if detail_state is DetailLoadState.LOADING:
        lines.append(f"\n{_spinner(state)} Loading details...")
    elif detail_state is DetailLoadState.ERROR:
        lines.append(f"\n[red]{escape(view.detail_errors.get(item.id, 'Failed to load details'))}[/red]")
    elif not item.detail_loaded:
        lines.append("\n[dim]Press enter for full details[/dim]")
    return Panel("\n".join(lines), title="Detail")


def _status_bar(state: AppState) -> Text:
    if state.error_message:
        return Text(f"Error: {state.error_message}", style="bold red")
    if state.status_message:
        return Text(state.status_message, style="yellow")
    return Text(KEY_HELP, style="dim")


def render(state: AppState, log_lines: list[str], tz_name: str = "UTC") -> RenderableType:
    """Build the full screen for *state*."""
    if state.show_logs:
        tail = log_lines[-LOG_PANEL_LINES:]
        body: RenderableType = Panel(
            Text("\n".join(tail) or "No log entries"),
            title="Logs (l or esc to close)",
        )
    else:
        view = state.active_view
        body = Table.grid(expand=True)
        body.add_column(ratio=3)
        body.add_column(ratio=2)
        body.add_row(_list_table(view, state, tz_name), _detail_panel(view, state, tz_name))
    return Group(_header(state), body, _status_bar(state))
