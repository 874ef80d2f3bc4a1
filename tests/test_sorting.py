"""Tests for incident sort state."""

from __future__ import annotations

from rootly_tui.sorting import INCIDENT_SORT_FIELDS, IncidentSortField, SortDirection, SortState


def test_default_is_disabled() -> None:
    state = SortState()
    assert not state.enabled
    assert state.param() == ""
    assert state.indicator == ""
    assert state.describe() == ""


def test_new_field_starts_descending() -> None:
    state = SortState(IncidentSortField.CREATED_AT, SortDirection.ASC).toggle(IncidentSortField.UPDATED_AT)
    assert state == SortState(IncidentSortField.UPDATED_AT, SortDirection.DESC)
    assert state.param() == "-updated_at"


def test_same_field_flips() -> None:
    state = SortState().toggle(IncidentSortField.CREATED_AT)
    flipped = state.toggle(IncidentSortField.CREATED_AT)
    assert flipped.direction is SortDirection.ASC
    assert flipped.param() == "created_at"
    assert flipped.toggle(IncidentSortField.CREATED_AT) == state


def test_next_field_wraps() -> None:
    state = SortState()
    seen = []
    for _ in range(len(INCIDENT_SORT_FIELDS) + 1):
        state = state.next_field()
        seen.append(state.field)
    assert seen[:-1] == list(INCIDENT_SORT_FIELDS)
    assert seen[-1] is INCIDENT_SORT_FIELDS[0]


def test_next_field_keeps_direction() -> None:
    state = SortState(IncidentSortField.CREATED_AT, SortDirection.ASC).next_field()
    assert state.direction is SortDirection.ASC


def test_describe() -> None:
    state = SortState(IncidentSortField.RESOLVED_AT, SortDirection.ASC)
    assert state.describe() == "↑ Resolved"
