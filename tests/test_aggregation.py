"""
Dashboard aggregation: counters, the weekly histogram and the concurrent
dashboard load.
"""

from datetime import date, datetime, timedelta, timezone
from unittest.mock import MagicMock, patch
from zoneinfo import ZoneInfo

import pytest

from brotech_admin.core.config import Config
from brotech_admin.core.errors import PermissionDenied
from brotech_admin.modules.dashboard.aggregation import (
    NOT_SET, bar_heights, chart_geometry, count_since, day_windows, get_site_timezone,
    load_dashboard, most_popular_plan_title, total_count, weekly_histogram
)

from conftest import NOW, days_ago

UTC = timezone.utc
IST = timezone(timedelta(hours=5, minutes=30))


def _records(*offsets):
    return [{"createdAt": days_ago(d)} for d in offsets]


# ---------------------------------------------------------------------------
# Counters
# ---------------------------------------------------------------------------

def test_count_since_counts_records_at_or_after_cutoff():
    records = _records(10, 3, 1, 0)
    assert count_since(records, days_ago(1)) == 2


def test_count_since_ignores_records_without_timestamp():
    records = _records(0) + [{"createdAt": None}, {}]
    assert count_since(records, days_ago(1)) == 1


def test_total_count():
    assert total_count([]) == 0
    assert total_count(_records(1, 2, 3)) == 3


def test_most_popular_plan_title_first_match_wins():
    plans = [
        {"title": "Starter", "mostPopular": False},
        {"title": "Growth", "mostPopular": True},
        {"title": "Enterprise", "mostPopular": True},
    ]
    assert most_popular_plan_title(plans) == "Growth"


def test_most_popular_plan_title_not_set():
    assert most_popular_plan_title([]) == NOT_SET
    assert most_popular_plan_title([{"title": "Starter", "mostPopular": "yes"}]) == NOT_SET


# ---------------------------------------------------------------------------
# Weekly histogram
# ---------------------------------------------------------------------------

def test_day_windows_are_contiguous_and_end_today():
    windows = day_windows(date(2024, 5, 8), UTC)

    assert len(windows) == 7
    assert [label for label, _, _ in windows] == ["Thu", "Fri", "Sat", "Sun", "Mon", "Tue", "Wed"]
    assert windows[-1][1] == datetime(2024, 5, 8, tzinfo=UTC)
    assert windows[-1][2] == datetime(2024, 5, 9, tzinfo=UTC)
    for (_, _, end), (_, start, _) in zip(windows, windows[1:]):
        assert end == start


def test_weekly_histogram_buckets_by_day():
    records = _records(10, 3, 0) + [{"createdAt": days_ago(0, hours=20)}]
    histogram = weekly_histogram(records, NOW.date(), UTC)

    assert [entry["count"] for entry in histogram] == [0, 0, 0, 1, 0, 1, 1]
    assert histogram[-1]["label"] == "Wed"


def test_weekly_histogram_always_seven_entries():
    assert len(weekly_histogram([], NOW.date(), UTC)) == 7
    records = _records(*range(20))
    histogram = weekly_histogram(records, NOW.date(), UTC)
    assert len(histogram) == 7
    assert sum(entry["count"] for entry in histogram) <= len(records)


def test_weekly_histogram_end_is_exclusive():
    midnight = datetime(2024, 5, 9, tzinfo=UTC)
    histogram = weekly_histogram([{"createdAt": midnight}], NOW.date(), UTC)
    assert sum(entry["count"] for entry in histogram) == 0


def test_weekly_histogram_uses_local_midnight():
    # 20:00 UTC on Tuesday is already Wednesday in India
    record = {"createdAt": datetime(2024, 5, 7, 20, 0, tzinfo=UTC)}
    histogram = weekly_histogram([record], date(2024, 5, 8), IST)
    assert histogram[-1] == {"label": "Wed", "count": 1}


# ---------------------------------------------------------------------------
# Chart geometry
# ---------------------------------------------------------------------------

def test_bar_heights_scale_to_busiest_day():
    histogram = [{"label": "Mon", "count": c} for c in (0, 2, 4, 1)]
    assert bar_heights(histogram, 180) == [0, 90, 180, 45]


def test_bar_heights_all_zero_without_messages():
    histogram = [{"label": "Mon", "count": 0}] * 7
    assert bar_heights(histogram, 180) == [0] * 7


def test_chart_geometry_ticks():
    histogram = [{"label": "Mon", "count": c} for c in (0, 3, 5)]
    chart = chart_geometry(histogram)
    assert chart["ticks"] == [0, 3, 5]
    assert chart["max"] == 5
    assert chart["bars"][2]["height"] == chart["height"]

    assert chart_geometry([{"label": "Mon", "count": 0}])["ticks"] == [0]


# ---------------------------------------------------------------------------
# Dashboard load
# ---------------------------------------------------------------------------

def test_load_dashboard(store, messages):
    store.pricing_plans.create({"title": "Starter", "price": "$100", "features": ["a"], "mostPopular": False})
    store.pricing_plans.create({"title": "Growth", "price": "$200", "features": ["b"], "mostPopular": True})

    data = load_dashboard(store, now=NOW, tz=UTC)

    assert data["stats"] == {
        "newMessages": 2,
        "totalMessages": 4,
        "totalPlans": 2,
        "mostPopularPlan": "Growth",
    }
    assert [entry["count"] for entry in data["chart"]] == [0, 0, 0, 1, 0, 1, 1]
    assert [m["name"] for m in data["recentMessages"]] == ["Carol", "Bob", "Jane Doe", "Acme Corp"]


def test_load_dashboard_empty_store(store):
    data = load_dashboard(store, now=NOW, tz=UTC)

    assert data["stats"]["mostPopularPlan"] == NOT_SET
    assert data["stats"]["totalMessages"] == 0
    assert len(data["chart"]) == 7
    assert data["recentMessages"] == []


def test_load_dashboard_fails_as_a_whole():
    store = MagicMock()
    store.contacts.list.return_value = []
    store.contacts.count.return_value = 0
    store.pricing_plans.list.side_effect = PermissionDenied()

    with pytest.raises(PermissionDenied):
        load_dashboard(store, now=NOW, tz=UTC)


# ---------------------------------------------------------------------------
# Server time zone fallback
# ---------------------------------------------------------------------------

def test_server_zone_fallback_follows_dst(monkeypatch):
    new_york = ZoneInfo("America/New_York")
    monkeypatch.setattr(Config, "SITE_TIMEZONE", "")
    monkeypatch.delenv("SITE_TIMEZONE", raising=False)

    with patch("brotech_admin.modules.dashboard.aggregation.tzlocal.get_localzone",
               return_value=new_york):
        tz = get_site_timezone()
    assert tz is new_york

    # 23:30 EST on Friday, before the switch to EDT on Sunday 2024-03-10
    record = {"createdAt": datetime(2024, 3, 9, 4, 30, tzinfo=UTC)}
    histogram = weekly_histogram([record], date(2024, 3, 12), tz)
    assert histogram[2] == {"label": "Fri", "count": 1}
    assert histogram[3] == {"label": "Sat", "count": 0}
