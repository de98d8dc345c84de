"""Timezone and calendar-date helpers."""

from datetime import date, datetime, timedelta
from typing import Iterator, Optional

import pytz
from dateutil import parser as date_parser

UTC = pytz.utc


def now_utc() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime) -> datetime:
    """Convert a datetime to UTC, treating naive values as UTC already."""
    if dt.tzinfo is None:
        return UTC.localize(dt)
    return dt.astimezone(UTC)


def today_in(tz_name: str) -> date:
    """Return today's calendar date in the named timezone."""
    return datetime.now(pytz.timezone(tz_name)).date()


def parse_datetime_utc(value: str, default_tz: Optional[pytz.BaseTzInfo] = None) -> datetime:
    """
    Parse a datetime string and return it in UTC.

    If no timezone is provided in the string, assumes ``default_tz`` (UTC by default).
    """
    dt = date_parser.parse(value)
    if dt.tzinfo is None:
        tz = default_tz or UTC
        dt = tz.localize(dt)
    return dt.astimezone(UTC)


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every calendar date from start to end inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def to_naive_utc(dt: datetime) -> datetime:
    """UTC wall time without tzinfo, for storage columns that drop offsets."""
    return ensure_utc(dt).replace(tzinfo=None)
