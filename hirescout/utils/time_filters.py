"""
Time filter utilities for job search.
Converts the date_posted option into max ages, source-specific recency
parameters and hard cutoffs.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Iterable, List, Optional, TypeVar

from ..core.models import DatePosted

T = TypeVar("T")

# Time filter options mapping
TIME_FILTERS: Dict[DatePosted, Optional[int]] = {
    DatePosted.TODAY: 24,
    DatePosted.WEEK: 168,  # 7 days
    DatePosted.MONTH: 720,  # 30 days (24 * 30)
    DatePosted.ANY: None,
}

# Reddit's ``t`` search parameter
REDDIT_TIME_FILTERS: Dict[DatePosted, str] = {
    DatePosted.TODAY: "day",
    DatePosted.WEEK: "week",
    DatePosted.MONTH: "month",
    DatePosted.ANY: "year",
}


def get_hours_from_filter(date_posted: DatePosted) -> Optional[int]:
    """Convert a date_posted option to hours, None meaning no limit."""
    return TIME_FILTERS.get(date_posted)


def get_max_age(date_posted: DatePosted) -> Optional[timedelta]:
    hours = get_hours_from_filter(date_posted)
    return timedelta(hours=hours) if hours is not None else None


def get_since_date(date_posted: DatePosted, now: Optional[datetime] = None) -> datetime:
    """
    Earliest posting date for query operators such as ``since:``.

    Unbounded searches fall back to one month.
    """
    now = now or datetime.now(timezone.utc)
    return now - (get_max_age(date_posted) or timedelta(days=30))


def get_reddit_time_filter(date_posted: DatePosted) -> str:
    return REDDIT_TIME_FILTERS.get(date_posted, "week")


def is_time_filter_enabled(date_posted: DatePosted) -> bool:
    """Check if a time filter will actually filter results."""
    return TIME_FILTERS.get(date_posted) is not None


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def filter_by_date(
    items: Iterable[T],
    max_age: Optional[timedelta],
    get_posted_at: Callable[[T], Optional[datetime]],
    now: Optional[datetime] = None,
) -> List[T]:
    """
    Drop items posted before ``now - max_age``.

    Items without a timestamp are kept; a max_age of None keeps everything.
    """
    items = list(items)
    if max_age is None:
        return items

    cutoff = as_utc(now or datetime.now(timezone.utc)) - max_age
    kept = []
    for item in items:
        posted_at = get_posted_at(item)
        if posted_at is None or as_utc(posted_at) >= cutoff:
            kept.append(item)
    return kept
