"""Date and timestamp helpers for Questboard.

Calendar days are ``YYYY-MM-DD`` strings in the Home Assistant local time
zone. Timestamps are ISO-8601 strings with millisecond precision and are only
ever compared after parsing.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta

from homeassistant.util import dt as dt_util

from .const import WEEKDAYS


def day_str(value: date | datetime) -> str:
    """Return the local calendar day of a date or datetime."""
    if isinstance(value, datetime):
        return dt_util.as_local(value).date().isoformat()
    return value.isoformat()


def parse_day(value: str) -> date:
    return date.fromisoformat(value)


def shift_day(value: str, days: int) -> str:
    return (parse_day(value) + timedelta(days=days)).isoformat()


def weekday_name(value: str) -> str:
    """Return the short weekday name ("Mon".."Sun") of a day string."""
    return WEEKDAYS[parse_day(value).weekday()]


def week_start(value: str, convention: str = "Mon") -> str:
    """Return the first day of the week containing ``value``."""
    day = parse_day(value)
    if convention == "Sun":
        shift = (day.weekday() + 1) % 7
    else:
        shift = day.weekday()
    return (day - timedelta(days=shift)).isoformat()


def month_days(value: str) -> list[str]:
    """Return every day of the calendar month containing ``value``."""
    first = parse_day(value).replace(day=1)
    days = []
    current = first
    while current.month == first.month:
        days.append(current.isoformat())
        current += timedelta(days=1)
    return days


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """Parse a stored timestamp; naive values are taken as local time."""
    if value is None or value == "":
        return None
    parsed = value if isinstance(value, datetime) else dt_util.parse_datetime(value)
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt_util.get_default_time_zone())
    return parsed


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt_util.get_default_time_zone())
    return value.isoformat(timespec="milliseconds")


def day_bounds(value: str) -> tuple[datetime, datetime]:
    """Return the first and last millisecond of a local calendar day."""
    day = parse_day(value)
    start = dt_util.start_of_local_day(day)
    end = dt_util.start_of_local_day(day + timedelta(days=1)) - timedelta(milliseconds=1)
    return start, end


def in_range(value: datetime, start: datetime, end: datetime) -> bool:
    return start <= value <= end

