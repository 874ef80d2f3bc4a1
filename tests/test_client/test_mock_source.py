"""Tests for the offline sample-data source."""

from __future__ import annotations

import pytest

from rootly_tui.client.mock import MockSource
from rootly_tui.exceptions import NotFoundError


@pytest.fixture()
def source(fixed_now) -> MockSource:
    return MockSource(clock=lambda: fixed_now)


def test_first_page_of_incidents(source: MockSource) -> None:
    page = source.list_incidents(page=1, page_size=2)
    assert [i.id for i in page.items] == ["inc_001", "inc_002"]
    assert page.pagination.has_next
    assert not page.pagination.has_prev
    assert page.pagination.total_count == 5
    assert page.pagination.total_pages == 3


def test_last_page_of_alerts(source: MockSource) -> None:
    page = source.list_alerts(page=2, page_size=4)
    assert len(page.items) == 2
    assert page.pagination.has_prev
    assert not page.pagination.has_next


def test_sort_descending_by_created(source: MockSource) -> None:
    page = source.list_incidents(page=1, page_size=10, sort="-created_at")
    created = [i.created_at for i in page.items]
    assert created == sorted(created, reverse=True)
    assert page.items[0].id == "inc_005"


def test_sort_ascending(source: MockSource) -> None:
    page = source.list_incidents(page=1, page_size=10, sort="created_at")
    created = [i.created_at for i in page.items]
    assert created == sorted(created)


def test_records_have_no_version(source: MockSource) -> None:
    assert all(i.updated_at is None for i in source.list_incidents(1, 10).items)


def test_incident_detail(source: MockSource) -> None:
    incident = source.get_incident("inc_001")
    assert incident.detail_loaded
    assert incident.commander_name == "Jane Doe"
    assert [r.name for r in incident.roles] == ["Commander", "Communicator"]


def test_alert_detail(source: MockSource) -> None:
    alert = source.get_alert("alert_002")
    assert alert.detail_loaded
    assert alert.urgency == "High"


def test_unknown_ids(source: MockSource) -> None:
    with pytest.raises(NotFoundError):
        source.get_incident("nope")
    with pytest.raises(NotFoundError):
        source.get_alert("nope")


def test_calls_recorded(source: MockSource) -> None:
    source.list_incidents(1, 25, "-created_at")
    source.get_alert("alert_001")
    assert source.calls == [("list_incidents", 1, 25, "-created_at"), ("get_alert", "alert_001")]
