"""Decode Rootly JSON:API payloads into domain records.

The API nests related resources in two shapes:

* incidents wrap relations as JSON:API documents,
  ``{"data": [{"attributes": {"name": "api"}}]}``;
* alerts inline them as plain objects, ``[{"name": "api"}]``.

:func:`_name` accepts either, and every decoder tolerates missing or ``null``
attributes. Anything that is not the expected top-level document shape
raises :class:`~rootly_tui.exceptions.DecodeError`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError

from rootly_tui.exceptions import DecodeError
from rootly_tui.models import (
    Alert,
    AlertPage,
    Incident,
    IncidentPage,
    IncidentRole,
    PaginationInfo,
)

_ROLE_ASSIGNMENT_TYPES = ("incident_role_assignments", "incident_role_assignment")
_DATETIME = TypeAdapter(datetime)


# --- Field helpers ---


def parse_time(value: Any) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp; return ``None`` for empty or invalid input."""
    if not value or not isinstance(value, str):
        return None
    try:
        return _DATETIME.validate_python(value.strip())
    except ValidationError:
        return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _name(obj: Any) -> str:
    """Name of a related object in either nesting style."""
    if isinstance(obj, str):
        return obj
    if not isinstance(obj, dict):
        return ""
    data = obj.get("data")
    if isinstance(data, dict):
        obj = data
    attributes = obj.get("attributes")
    if isinstance(attributes, dict):
        obj = attributes
    return _text(obj.get("name") or obj.get("full_name"))


def _names(value: Any) -> list[str]:
    if isinstance(value, dict):
        value = value.get("data")
    if not isinstance(value, list):
        return []
    return [name for name in (_name(item) for item in value) if name]


def _user(value: Any) -> tuple[str, str]:
    """Return ``(name, email)`` for a user relation."""
    if not isinstance(value, dict):
        return "", ""
    data = value.get("data")
    if isinstance(data, dict):
        value = data
    attributes = value.get("attributes")
    if isinstance(attributes, dict):
        value = attributes
    name = value.get("full_name") or value.get("name") or ""
    return _text(name), _text(value.get("email"))


def _document(payload: Any, kind: str) -> dict[str, Any]:
    if not isinstance(payload, dict) or "data" not in payload:
        raise DecodeError(f"Unexpected {kind} response: missing 'data'")
    return payload


def _resources(payload: Any, kind: str) -> list[dict[str, Any]]:
    data = _document(payload, kind)["data"]
    if not isinstance(data, list):
        raise DecodeError(f"Unexpected {kind} response: 'data' is not a list")
    return [item for item in data if isinstance(item, dict)]


def _resource(payload: Any, kind: str) -> dict[str, Any]:
    data = _document(payload, kind)["data"]
    if not isinstance(data, dict) or not data.get("id"):
        raise DecodeError(f"Unexpected {kind} response: 'data' is not a resource")
    return data


def _attributes(resource: dict[str, Any]) -> dict[str, Any]:
    attributes = resource.get("attributes")
    return attributes if isinstance(attributes, dict) else {}


# --- Pagination ---


def decode_pagination(payload: dict[str, Any], requested_page: int) -> PaginationInfo:
    """Build a :class:`PaginationInfo` from the ``meta`` block.

    Falls back to the ``links`` block when ``meta`` has no page pointers.
    """
    meta = payload.get("meta") if isinstance(payload.get("meta"), dict) else {}
    links = payload.get("links") if isinstance(payload.get("links"), dict) else {}

    current = meta.get("current_page")
    if not isinstance(current, int) or current < 1:
        current = requested_page
    if "next_page" in meta:
        has_next = meta["next_page"] is not None
    else:
        has_next = bool(links.get("next"))
    if "prev_page" in meta:
        has_prev = meta["prev_page"] is not None
    else:
        has_prev = current > 1

    total_count = meta.get("total_count")
    total_pages = meta.get("total_pages")
    return PaginationInfo(
        current_page=current,
        has_next=has_next,
        has_prev=has_prev,
        total_count=total_count if isinstance(total_count, int) else None,
        total_pages=total_pages if isinstance(total_pages, int) else None,
    )


# --- Incidents ---


def _incident_fields(resource: dict[str, Any]) -> dict[str, Any]:
    attrs = _attributes(resource)
    sequential_id = attrs.get("sequential_id")
    return {
        "id": _text(resource.get("id")),
        "sequential_id": f"INC-{sequential_id}" if sequential_id is not None else "",
        "title": _text(attrs.get("title")),
        "summary": _text(attrs.get("summary")),
        "status": _text(attrs.get("status")),
        "severity": _name(attrs.get("severity")),
        "kind": _text(attrs.get("kind")),
        "url": _text(attrs.get("url")),
        "short_url": _text(attrs.get("short_url")),
        "created_at": parse_time(attrs.get("created_at")),
        "updated_at": parse_time(attrs.get("updated_at")),
        "started_at": parse_time(attrs.get("started_at")),
        "detected_at": parse_time(attrs.get("detected_at")),
        "acknowledged_at": parse_time(attrs.get("acknowledged_at")),
        "mitigated_at": parse_time(attrs.get("mitigated_at")),
        "resolved_at": parse_time(attrs.get("resolved_at")),
        "services": _names(attrs.get("services")),
        "environments": _names(attrs.get("environments")),
        "teams": _names(attrs.get("groups")),
        "slack_channel_url": _text(attrs.get("slack_channel_url")),
        "jira_issue_url": _text(attrs.get("jira_issue_url")),
    }


def decode_incident_page(payload: Any, requested_page: int = 1) -> IncidentPage:
    """Decode a ``GET /v1/incidents`` document."""
    items = [Incident(**_incident_fields(r)) for r in _resources(payload, "incidents")]
    return IncidentPage(items=items, pagination=decode_pagination(payload, requested_page))


def _roles(resource: dict[str, Any], included: list[Any]) -> list[IncidentRole]:
    assignments: list[dict[str, Any]] = []
    for item in included:
        if isinstance(item, dict) and item.get("type") in _ROLE_ASSIGNMENT_TYPES:
            assignments.append(_attributes(item))
    roles_attr = _attributes(resource).get("roles")
    if isinstance(roles_attr, list):
        assignments.extend(r for r in roles_attr if isinstance(r, dict))

    roles = []
    for assignment in assignments:
        role_name = _name(assignment.get("incident_role") or assignment.get("role"))
        if not role_name:
            continue
        user_name, user_email = _user(assignment.get("user"))
        roles.append(IncidentRole(name=role_name, user_name=user_name, user_email=user_email))
    return roles


def _role_holder(roles: list[IncidentRole], role: str) -> str:
    for assignment in roles:
        if role in assignment.name.lower():
            return assignment.user_name
    return ""


def decode_incident(payload: Any) -> Incident:
    """Decode a ``GET /v1/incidents/{id}`` document, including role assignments."""
    resource = _resource(payload, "incident")
    attrs = _attributes(resource)
    included = payload.get("included")
    roles = _roles(resource, included if isinstance(included, list) else [])
    creator_name, creator_email = _user(attrs.get("user"))
    return Incident(
        **_incident_fields(resource),
        detail_loaded=True,
        roles=roles,
        commander_name=_role_holder(roles, "commander"),
        communicator_name=_role_holder(roles, "communicator"),
        created_by_name=creator_name,
        created_by_email=creator_email,
        causes=_names(attrs.get("causes")),
        incident_types=_names(attrs.get("incident_types")),
    )


# --- Alerts ---


def _labels(value: Any) -> dict[str, str]:
    if isinstance(value, dict):
        return {str(k): _text(v) for k, v in value.items()}
    labels: dict[str, str] = {}
    if isinstance(value, list):
        for label in value:
            if isinstance(label, dict) and label.get("key"):
                labels[str(label["key"])] = _text(label.get("value"))
    return labels


def _alert_fields(resource: dict[str, Any]) -> dict[str, Any]:
    attrs = _attributes(resource)
    return {
        "id": _text(resource.get("id")),
        "short_id": _text(attrs.get("short_id")),
        "summary": _text(attrs.get("summary")),
        "description": _text(attrs.get("description")),
        "status": _text(attrs.get("status")),
        "source": _text(attrs.get("source")),
        "external_url": _text(attrs.get("external_url")),
        "created_at": parse_time(attrs.get("created_at")),
        "updated_at": parse_time(attrs.get("updated_at")),
        "started_at": parse_time(attrs.get("started_at")),
        "ended_at": parse_time(attrs.get("ended_at")),
        "services": _names(attrs.get("services")),
        "environments": _names(attrs.get("environments")),
        "groups": _names(attrs.get("groups")),
        "labels": _labels(attrs.get("labels")),
    }


def decode_alert_page(payload: Any, requested_page: int = 1) -> AlertPage:
    """Decode a ``GET /v1/alerts`` document."""
    items = [Alert(**_alert_fields(r)) for r in _resources(payload, "alerts")]
    return AlertPage(items=items, pagination=decode_pagination(payload, requested_page))


def decode_alert(payload: Any) -> Alert:
    """Decode a ``GET /v1/alerts/{id}`` document."""
    resource = _resource(payload, "alert")
    attrs = _attributes(resource)
    return Alert(
        **_alert_fields(resource),
        detail_loaded=True,
        responders=_names(attrs.get("responders")),
        urgency=_name(attrs.get("alert_urgency")) or _text(attrs.get("urgency")),
    )
