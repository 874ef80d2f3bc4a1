"""The remote data source seen by the orchestrator."""

from __future__ import annotations

from typing import Protocol

from rootly_tui.models import Alert, AlertPage, Incident, IncidentPage


class RemoteSource(Protocol):
    """Fetches records from the remote API.

    Implementations raise a :class:`~rootly_tui.exceptions.RootlyTuiError`
    subclass on any failure and must be safe to call from several worker
    threads at once.
    """

    def list_incidents(self, page: int, page_size: int, sort: str = "") -> IncidentPage: ...

    def list_alerts(self, page: int, page_size: int) -> AlertPage: ...

    def get_incident(self, incident_id: str) -> Incident: ...

    def get_alert(self, alert_id: str) -> Alert: ...

    def close(self) -> None: ...
