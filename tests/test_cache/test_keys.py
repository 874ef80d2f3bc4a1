"""Tests for cache key construction."""

from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from rootly_tui.cache.keys import (
    PREFIX_ALERTS,
    PREFIX_INCIDENT_DETAIL,
    PREFIX_INCIDENTS,
    CacheKeyBuilder,
    build_key,
    detail_key,
    list_key,
    version_stamp,
)


class TestCacheKeyBuilder:
    def test_params_sorted_by_name(self) -> None:
        key = (
            CacheKeyBuilder("incidents")
            .with_param("pageSize", 25)
            .with_param("page", 1)
            .build()
        )
        assert key == "incidents:page=1:pageSize=25"

    def test_prefix_only_without_params(self) -> None:
        assert CacheKeyBuilder("alerts").build() == "alerts"

    def test_last_value_wins(self) -> None:
        key = CacheKeyBuilder("x").with_param("a", 1).with_param("a", 2).build()
        assert key == "x:a=2"

    def test_bool_rendered_lowercase(self) -> None:
        assert build_key("x", {"flag": True, "other": False}) == "x:flag=true:other=false"

    def test_insertion_order_does_not_matter(self) -> None:
        params = [("page", 3), ("pageSize", 50), ("sort", "-created_at"), ("team", "sre")]
        keys = set()
        for perm in itertools.permutations(params):
            builder = CacheKeyBuilder("incidents")
            for name, value in perm:
                builder.with_param(name, value)
            keys.add(builder.build())
        assert keys == {"incidents:page=3:pageSize=50:sort=-created_at:team=sre"}

    def test_prefix_separates_resources(self) -> None:
        assert build_key(PREFIX_INCIDENTS, {"page": 1}) != build_key(PREFIX_ALERTS, {"page": 1})


class TestListKey:
    def test_without_sort(self) -> None:
        assert list_key(PREFIX_INCIDENTS, 2, 25) == "incidents:page=2:pageSize=25"

    def test_with_sort(self) -> None:
        assert (
            list_key(PREFIX_INCIDENTS, 1, 25, "-created_at")
            == "incidents:page=1:pageSize=25:sort=-created_at"
        )

    def test_sort_changes_key(self) -> None:
        assert list_key(PREFIX_INCIDENTS, 1, 25, "created_at") != list_key(
            PREFIX_INCIDENTS, 1, 25, "-created_at"
        )


class TestVersionStamp:
    def test_epoch_microseconds(self) -> None:
        dt = datetime(1970, 1, 1, 0, 0, 1, 500, tzinfo=timezone.utc)
        assert version_stamp(dt) == "1000500"

    def test_naive_treated_as_utc(self) -> None:
        aware = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)
        assert version_stamp(aware.replace(tzinfo=None)) == version_stamp(aware)

    def test_same_instant_in_other_zone_matches(self) -> None:
        utc = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)
        plus_two = utc.astimezone(timezone(timedelta(hours=2)))
        assert version_stamp(plus_two) == version_stamp(utc)

    def test_one_microsecond_apart_differs(self) -> None:
        dt = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)
        assert version_stamp(dt) != version_stamp(dt + timedelta(microseconds=1))


class TestDetailKey:
    def test_id_only_without_version(self) -> None:
        assert detail_key(PREFIX_INCIDENT_DETAIL, "abc") == "incident_detail:id=abc"

    def test_version_in_key(self) -> None:
        dt = datetime(1970, 1, 1, 0, 0, 2, tzinfo=timezone.utc)
        assert (
            detail_key(PREFIX_INCIDENT_DETAIL, "abc", dt)
            == "incident_detail:id=abc:updatedAt=2000000"
        )

    @pytest.mark.parametrize("seconds", [1, 60, 3600])
    def test_new_version_new_key(self, seconds: int) -> None:
        dt = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)
        assert detail_key(PREFIX_INCIDENT_DETAIL, "abc", dt) != detail_key(
            PREFIX_INCIDENT_DETAIL, "abc", dt + timedelta(seconds=seconds)
        )


def test_build_key_from_mapping() -> None:
    key = build_key("incidents", {"status": "open", "pageSize": 50, "page": 1})
    assert key == "incidents:page=1:pageSize=50:status=open"
