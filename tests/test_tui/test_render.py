"""Tests for the Rich renderables."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from rich.console import Console

from rootly_tui.models import Alert, Incident
from rootly_tui.sorting import IncidentSortField, SortState
from rootly_tui.tui.render import (
    KEY_HELP,
    alert_row,
    format_duration,
    format_time,
    incident_row,
    render,
)
from rootly_tui.tui.state import AppState, DetailLoadState

NOON = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)


def _text(renderable) -> str:
    console = Console(width=160, record=True, color_system=None)
    console.print(renderable)
    return console.export_text()


class TestFormatting:
    def test_utc(self) -> None:
        assert format_time(NOON) == "Jun 10, 2024 12:00 UTC"

    def test_other_zone_appends_utc(self) -> None:
        assert format_time(NOON, "Europe/Paris") == "Jun 10, 2024 14:00 CEST (12:00 UTC)"

    def test_unknown_zone_falls_back(self) -> None:
        assert format_time(NOON, "Mars/Olympus") == "Jun 10, 2024 12:00 UTC"

    def test_none(self) -> None:
        assert format_time(None) == ""

    @pytest.mark.parametrize(
        "seconds,expected",
        [(45, "45s"), (60, "1m"), (125, "2m 5s"), (3600, "1h"), (5400, "1h 30m")],
    )
    def test_duration(self, seconds: int, expected: str) -> None:
        assert format_duration(seconds) == expected

    def test_rows(self) -> None:
        incident = Incident(id="x", sequential_id="INC-1", title="Down", status="started", severity="high", created_at=NOON)
        assert incident_row(incident) == ["INC-1", "Down", "started", "high", "Jun 10, 2024 12:00 UTC"]
        alert = Alert(id="a", summary="CPU", status="open", source="datadog")
        assert alert_row(alert) == ["a", "CPU", "open", "datadog", ""]


class TestScreen:
    def test_list_and_detail(self) -> None:
        state = AppState(initial_loading=False)
        state.incidents.items = [
            Incident(id="x", sequential_id="INC-1", title="Database down", severity="critical", summary="Timeouts")
        ]
        output = _text(render(state, []))
        assert "INC-1" in output
        assert "Database down" in output
        assert "Timeouts" in output
        assert "Press enter for full details" in output
        assert KEY_HELP in output

    def test_markup_in_data_is_literal(self) -> None:
        state = AppState(initial_loading=False)
        state.incidents.items = [Incident(id="x", title="[bold]boom[/bold]", summary="[red]x")]
        output = _text(render(state, []))
        assert "[bold]boom[/bold]" in output
        assert "[red]x" in output

    def test_loading_placeholder(self) -> None:
        state = AppState()
        state.incidents.loading = True
        output = _text(render(state, []))
        assert "Loading..." in output

    def test_detail_error_shown(self) -> None:
        state = AppState(initial_loading=False)
        state.incidents.items = [Incident(id="x", title="t")]
        state.incidents.detail_states["x"] = DetailLoadState.ERROR
        state.incidents.detail_errors["x"] = "HTTP 404: gone"
        assert "HTTP 404: gone" in _text(render(state, []))

    def test_error_in_status_bar(self) -> None:
        state = AppState(initial_loading=False, error_message="HTTP 500")
        assert "Error: HTTP 500" in _text(render(state, []))

    def test_sort_in_title(self) -> None:
        state = AppState(initial_loading=False)
        state.incidents.sort = SortState().toggle(IncidentSortField.STARTED_AT)
        assert "(sorted ↓ Started)" in _text(render(state, []))

    def test_logs_panel(self) -> None:
        state = AppState(initial_loading=False, show_logs=True)
        output = _text(render(state, ["first entry", "second entry"]))
        assert "second entry" in output
        assert "Logs" in output

    def test_alert_labels(self) -> None:
        state = AppState(initial_loading=False)
        state.active = state.alerts.resource
        state.alerts.items = [Alert(id="a", short_id="ALT-1", summary="CPU", labels={"host": "web-1"})]
        output = _text(render(state, []))
        assert "ALT-1" in output
        assert "host: web-1" in output
