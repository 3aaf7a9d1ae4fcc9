"""Calendar helpers normalized to UTC midnight.

Every day boundary in the service goes through these helpers so that history
grouping, "today" lookups and deadline math agree on a single convention.
"""
from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone

SECONDS_PER_DAY = 24 * 60 * 60


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime | date) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def start_of_day(value: datetime | date | None = None) -> datetime:
    """Return 00:00:00 UTC of the day containing ``value`` (defaults to now)."""
    moment = _as_utc(value if value is not None else utcnow())
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def today_utc(now: datetime | None = None) -> date:
    return start_of_day(now).date()


def days_between(start: datetime | date, end: datetime | date) -> int:
    """Whole days from ``start`` to ``end``, rounded up. Negative when ``end`` is earlier."""
    delta = _as_utc(end) - _as_utc(start)
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def days_ago(days: int, now: datetime | date | None = None) -> datetime:
    """Midnight UTC ``days`` calendar days before the day of ``now``."""
    return start_of_day(now) - timedelta(days=days)


def date_key(value: datetime | date) -> str:
    """Date-only ISO key (YYYY-MM-DD) used to group tasks by calendar day."""
    if isinstance(value, datetime):
        value = _as_utc(value).date()
    return value.isoformat()


def parse_date(raw: str) -> date:
    """Parse an ISO date or datetime string into a calendar date."""
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError as exc:
        raise ValueError(f"Invalid date: {raw}") from exc
    return _as_utc(parsed).date()
