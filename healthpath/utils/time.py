"""
Date normalization shared by every derived view.
All comparisons of birth dates, due dates and record dates go through as_date,
so the time-of-day component of an input never changes a result.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Optional

from dateutil.parser import isoparse, parse


def parse_datetime(value: Any) -> Optional[datetime]:
    """Convert a date/datetime/string to a datetime, or None if it cannot be read.

    - datetime -> returned as-is
    - date -> midnight of that day
    - ISO 8601 string (with or without time/tz) -> parsed
    - other free-form strings -> dateutil's general parser
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    s = str(value).strip()
    if not s:
        return None
    try:
        return isoparse(s)
    except (ValueError, OverflowError):
        pass
    try:
        return parse(s)
    except (ValueError, OverflowError):
        return None


def as_date(value: Any) -> Optional[date]:
    """Calendar date of value with time-of-day dropped, or None."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    dt = parse_datetime(value)
    return dt.date() if dt is not None else None


def today() -> date:
    return date.today()


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: Optional[date | datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def to_aware(dt: datetime) -> datetime:
    """
    - naive datetime -> assume UTC
    - aware datetime -> kept with its own offset
    Record timestamps are stored this way so they always compare, while
    their calendar date stays the one that was entered.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def parse_to_aware(value: Any) -> Optional[datetime]:
    dt = parse_datetime(value)
    return to_aware(dt) if dt is not None else None
