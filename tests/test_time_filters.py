"""
Tests for date_posted conversions and recency cutoffs.
"""

from datetime import datetime, timedelta, timezone

import pytest

from hirescout.core.models import DatePosted
from hirescout.utils.time_filters import (
    filter_by_date,
    get_hours_from_filter,
    get_max_age,
    get_reddit_time_filter,
    get_since_date,
    is_time_filter_enabled,
)

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    ("option", "hours", "reddit"),
    [
        (DatePosted.TODAY, 24, "day"),
        (DatePosted.WEEK, 168, "week"),
        (DatePosted.MONTH, 720, "month"),
        (DatePosted.ANY, None, "year"),
    ],
)
def test_option_mappings(option: DatePosted, hours, reddit: str) -> None:
    assert get_hours_from_filter(option) == hours
    assert get_reddit_time_filter(option) == reddit
    assert is_time_filter_enabled(option) == (hours is not None)


def test_since_date_defaults_to_a_month() -> None:
    assert get_since_date(DatePosted.ANY, NOW) == NOW - timedelta(days=30)
    assert get_since_date(DatePosted.TODAY, NOW) == NOW - timedelta(hours=24)


def test_filter_by_date_keeps_undated_items() -> None:
    items = [
        {"id": 1, "posted_at": NOW - timedelta(hours=2)},
        {"id": 2, "posted_at": NOW - timedelta(days=3)},
        {"id": 3, "posted_at": None},
        {"id": 4, "posted_at": (NOW - timedelta(hours=5)).replace(tzinfo=None)},
    ]

    kept = filter_by_date(items, get_max_age(DatePosted.TODAY), lambda item: item["posted_at"], now=NOW)

    assert [item["id"] for item in kept] == [1, 3, 4]


def test_no_max_age_keeps_everything() -> None:
    items = [{"posted_at": NOW - timedelta(days=400)}]

    assert filter_by_date(items, None, lambda item: item["posted_at"], now=NOW) == items
