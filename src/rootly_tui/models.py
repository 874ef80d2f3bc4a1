"""Canonical Pydantic models shared across all rootly-tui modules.

The models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`RequestConfig`, :class:`CacheConfig`, and :class:`Config`.

**Domain records** -- produced by :mod:`rootly_tui.client.decode` and stored
opaquely by the cache layer:
    :class:`Incident`, :class:`IncidentRole`, :class:`Alert`,
    :class:`PaginationInfo`, :class:`IncidentPage`, and :class:`AlertPage`.

Domain records are frozen. The cache hands the same instances to every
caller, so the reducer replaces records instead of mutating them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_ENDPOINT = "api.rootly.com"
DEFAULT_TIMEZONE = "UTC"


# --- Configuration ---


class RequestConfig(BaseModel):
    """HTTP settings applied to every API call."""

    timeout: int = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    max_retries: int = Field(default=1, description="Max retry attempts")


class CacheConfig(BaseModel):
    """Cache tiers used by the :class:`~rootly_tui.orchestrator.DataOrchestrator`.

    List and detail results live in separate cache instances because each
    instance has exactly one TTL.
    """

    enabled: bool = Field(default=True, description="Enable caching")
    persistent: bool = Field(
        default=True, description="Keep cached data on disk between runs"
    )
    list_ttl_seconds: int = Field(default=30, description="TTL for list pages")
    detail_ttl_seconds: int = Field(
        default=300, description="TTL for incident/alert detail records"
    )


class Config(BaseModel):
    """User configuration persisted at ``~/.config/rootly-tui/config.json``.

    Loaded by :func:`~rootly_tui.config.load_config`; environment variables
    and CLI flags override the stored values (see
    :func:`~rootly_tui.config.resolve_config`).
    """

    api_key: str = ""
    endpoint: str = DEFAULT_ENDPOINT
    timezone: str = DEFAULT_TIMEZONE
    page_size: int = Field(default=25, ge=1, le=100)
    request: RequestConfig = Field(default_factory=RequestConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)

    def is_valid(self) -> bool:
        """Return ``True`` when both an API key and an endpoint are set."""
        return bool(self.api_key) and bool(self.endpoint)

    @property
    def base_url(self) -> str:
        """The endpoint with an ``https://`` scheme added when none is given."""
        endpoint = self.endpoint
        if endpoint and not endpoint.startswith(("http://", "https://")):
            endpoint = "https://" + endpoint
        return endpoint.rstrip("/")


# --- Domain records ---


class IncidentRole(BaseModel):
    """A role assignment on an incident (e.g. Commander -> Jane Doe)."""

    model_config = ConfigDict(frozen=True)

    name: str
    user_name: str = ""
    user_email: str = ""


class Incident(BaseModel):
    """An incident as shown in the list and detail panes.

    Fields below ``detail_loaded`` are only populated by the detail endpoint.
    ``updated_at`` is the version stamp used to address cached details.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    sequential_id: str = ""
    title: str = ""
    summary: str = ""
    status: str = ""
    severity: str = ""
    kind: str = ""
    url: str = ""
    short_url: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    detected_at: Optional[datetime] = None
    acknowledged_at: Optional[datetime] = None
    mitigated_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    services: list[str] = Field(default_factory=list)
    environments: list[str] = Field(default_factory=list)
    teams: list[str] = Field(default_factory=list)
    slack_channel_url: str = ""
    jira_issue_url: str = ""

    detail_loaded: bool = False
    roles: list[IncidentRole] = Field(default_factory=list)
    commander_name: str = ""
    communicator_name: str = ""
    created_by_name: str = ""
    created_by_email: str = ""
    causes: list[str] = Field(default_factory=list)
    incident_types: list[str] = Field(default_factory=list)


class Alert(BaseModel):
    """An alert as shown in the list and detail panes."""

    model_config = ConfigDict(frozen=True)

    id: str
    short_id: str = ""
    summary: str = ""
    description: str = ""
    status: str = ""
    source: str = ""
    external_url: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    services: list[str] = Field(default_factory=list)
    environments: list[str] = Field(default_factory=list)
    groups: list[str] = Field(default_factory=list)
    labels: dict[str, str] = Field(default_factory=dict)

    detail_loaded: bool = False
    responders: list[str] = Field(default_factory=list)
    urgency: str = ""


class PaginationInfo(BaseModel):
    """Page cursor derived from the JSON:API ``meta`` block."""

    model_config = ConfigDict(frozen=True)

    current_page: int = 1
    has_next: bool = False
    has_prev: bool = False
    total_count: Optional[int] = None
    total_pages: Optional[int] = None


class IncidentPage(BaseModel):
    """One page of incidents plus its pagination cursor."""

    model_config = ConfigDict(frozen=True)

    items: list[Incident] = Field(default_factory=list)
    pagination: PaginationInfo = Field(default_factory=PaginationInfo)


class AlertPage(BaseModel):
    """One page of alerts plus its pagination cursor."""

    model_config = ConfigDict(frozen=True)

    items: list[Alert] = Field(default_factory=list)
    pagination: PaginationInfo = Field(default_factory=PaginationInfo)
