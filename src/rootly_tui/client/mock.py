"""Offline data source with sample incidents and alerts.

Used by ``--mock`` and by tests. Records carry no ``updated_at``, so detail
cache keys for mock data degrade to id-only.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from rootly_tui.exceptions import NotFoundError
from rootly_tui.models import (
    Alert,
    AlertPage,
    Incident,
    IncidentPage,
    IncidentRole,
    PaginationInfo,
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def sample_incidents(now: datetime) -> list[Incident]:
    hour_ago = now - timedelta(hours=1)
    two_hours_ago = now - timedelta(hours=2)
    day_ago = now - timedelta(days=1)
    return [
        Incident(
            id="inc_001",
            sequential_id="INC-142",
            title="Database Connection Failure",
            summary="Production database is experiencing connection timeouts",
            status="in_progress",
            severity="critical",
            kind="incident",
            created_at=two_hours_ago,
            started_at=two_hours_ago,
            detected_at=hour_ago,
            acknowledged_at=hour_ago,
            services=["api", "database", "web"],
            environments=["production"],
            teams=["Platform", "SRE"],
            slack_channel_url="https://slack.com/archives/C123456",
            jira_issue_url="https://jira.example.com/browse/INC-123",
        ),
        Incident(
            id="inc_002",
            sequential_id="INC-141",
            title="High API Latency",
            summary="API response times increased by 300%",
            status="acknowledged",
            severity="high",
            kind="incident",
            created_at=hour_ago,
            started_at=hour_ago,
            detected_at=hour_ago,
            services=["api", "gateway"],
            environments=["production"],
            teams=["Backend"],
        ),
        Incident(
            id="inc_003",
            sequential_id="INC-140",
            title="Deployment Pipeline Failed",
            summary="CI/CD pipeline failing for main branch",
            status="resolved",
            severity="medium",
            kind="incident",
            created_at=day_ago,
            started_at=day_ago,
            resolved_at=hour_ago,
            services=["ci-cd"],
            environments=["staging"],
            teams=["DevOps"],
        ),
        Incident(
            id="inc_004",
            sequential_id="INC-139",
            title="Disk Space Warning",
            summary="Log volume approaching capacity on worker nodes",
            status="mitigated",
            severity="low",
            kind="incident",
            created_at=day_ago,
            mitigated_at=hour_ago,
            services=["workers", "logging"],
            environments=["production", "staging"],
            teams=["Infrastructure"],
        ),
        Incident(
            id="inc_005",
            sequential_id="INC-143",
            title="Authentication Service Degraded",
            summary="OAuth token refresh failing intermittently",
            status="started",
            severity="high",
            kind="incident",
            created_at=now,
            started_at=now,
            services=["auth", "oauth"],
            environments=["production"],
            teams=["Security", "Platform"],
        ),
    ]


def sample_alerts(now: datetime) -> list[Alert]:
    hour_ago = now - timedelta(hours=1)
    two_hours_ago = now - timedelta(hours=2)
    day_ago = now - timedelta(days=1)
    return [
        Alert(
            id="alert_001",
            short_id="ALT-8F2A",
            summary="High CPU Usage on web-prod-1",
            description="CPU utilization has exceeded 90% for more than 5 minutes",
            status="triggered",
            source="datadog",
            created_at=now,
            started_at=now,
            external_url="https://app.datadoghq.com/monitors/123456",
            services=["web"],
            environments=["production"],
            groups=["Infrastructure"],
            labels={"severity": "warning", "host": "web-prod-1"},
        ),
        Alert(
            id="alert_002",
            short_id="ALT-7B1C",
            summary="Database Replica Lag > 30s",
            description="Replication lag on db-replica-2 has exceeded threshold",
            status="acknowledged",
            source="grafana",
            created_at=hour_ago,
            started_at=hour_ago,
            external_url="https://grafana.example.com/d/abc123",
            services=["database"],
            environments=["production"],
            groups=["Database"],
            labels={"replica": "db-replica-2", "region": "us-east-1"},
        ),
        Alert(
            id="alert_003",
            short_id="ALT-6D9E",
            summary="SSL Certificate Expiring Soon",
            description="Certificate for api.example.com expires in 7 days",
            status="open",
            source="pagerduty",
            created_at=day_ago,
            external_url="https://example.pagerduty.com/incidents/P123",
            services=["api"],
            environments=["production"],
            groups=["Security"],
            labels={"domain": "api.example.com", "days_to_expiry": "7"},
        ),
        Alert(
            id="alert_004",
            short_id="ALT-5E3F",
            summary="Memory Usage Critical on worker-3",
            description="Memory usage at 95%, potential OOM risk",
            status="resolved",
            source="datadog",
            created_at=two_hours_ago,
            started_at=two_hours_ago,
            ended_at=hour_ago,
            external_url="https://app.datadoghq.com/monitors/789",
            services=["workers"],
            environments=["production"],
            groups=["Infrastructure"],
            labels={"host": "worker-3"},
        ),
        Alert(
            id="alert_005",
            short_id="ALT-9A4B",
            summary="Error Rate Spike in Payment Service",
            description="5xx error rate increased to 5% in the last 10 minutes",
            status="triggered",
            source="grafana",
            created_at=now,
            started_at=now,
            external_url="https://grafana.example.com/d/payments",
            services=["payments", "checkout"],
            environments=["production"],
            groups=["Payments"],
            labels={"error_rate": "5%", "threshold": "1%"},
        ),
        Alert(
            id="alert_006",
            short_id="ALT-2C7D",
            summary="Kubernetes Pod CrashLoopBackOff",
            description="Pod api-deployment-abc123 is in CrashLoopBackOff state",
            status="triggered",
            source="slack",
            created_at=hour_ago,
            started_at=hour_ago,
            services=["api"],
            environments=["staging"],
            groups=["Platform"],
            labels={"pod": "api-deployment-abc123", "namespace": "default"},
        ),
    ]


def _slice(items: list, page: int, page_size: int) -> tuple[list, PaginationInfo]:
    start = (page - 1) * page_size
    chunk = items[start:start + page_size]
    total_pages = max(1, -(-len(items) // page_size))
    return chunk, PaginationInfo(
        current_page=page,
        has_next=page < total_pages,
        has_prev=page > 1,
        total_count=len(items),
        total_pages=total_pages,
    )


def _sort_incidents(items: list[Incident], sort: str) -> list[Incident]:
    if not sort:
        return items
    field = sort.lstrip("-")
    descending = sort.startswith("-")
    floor = datetime.min.replace(tzinfo=timezone.utc)
    return sorted(
        items,
        key=lambda i: getattr(i, field, None) or floor,
        reverse=descending,
    )


class MockSource:
    """In-memory :class:`~rootly_tui.client.source.RemoteSource`.

    Args:
        clock: Returns the reference time the sample timestamps are relative to.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        now = (clock or _now)()
        self._incidents = sample_incidents(now)
        self._alerts = sample_alerts(now)
        self.calls: list[tuple] = []

    def list_incidents(self, page: int, page_size: int, sort: str = "") -> IncidentPage:
        self.calls.append(("list_incidents", page, page_size, sort))
        items, pagination = _slice(_sort_incidents(self._incidents, sort), page, page_size)
        return IncidentPage(items=items, pagination=pagination)

    def list_alerts(self, page: int, page_size: int) -> AlertPage:
        self.calls.append(("list_alerts", page, page_size))
        items, pagination = _slice(self._alerts, page, page_size)
        return AlertPage(items=items, pagination=pagination)

    def get_incident(self, incident_id: str) -> Incident:
        self.calls.append(("get_incident", incident_id))
        for incident in self._incidents:
            if incident.id == incident_id:
                roles = [
                    IncidentRole(name="Commander", user_name="Jane Doe", user_email="jane@example.com"),
                    IncidentRole(name="Communicator", user_name="John Smith", user_email="john@example.com"),
                ]
                return incident.model_copy(
                    update={
                        "detail_loaded": True,
                        "roles": roles,
                        "commander_name": "Jane Doe",
                        "communicator_name": "John Smith",
                        "created_by_name": "Jane Doe",
                        "created_by_email": "jane@example.com",
                    }
                )
        raise NotFoundError(f"Incident {incident_id} not found")

    def get_alert(self, alert_id: str) -> Alert:
        self.calls.append(("get_alert", alert_id))
        for alert in self._alerts:
            if alert.id == alert_id:
                return alert.model_copy(
                    update={"detail_loaded": True, "responders": ["SRE On-Call"], "urgency": "High"}
                )
        raise NotFoundError(f"Alert {alert_id} not found")

    def close(self) -> None:
        pass
