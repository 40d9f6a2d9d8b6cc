from __future__ import annotations

from datetime import date, datetime, time


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def minute_of_day(value: datetime | time) -> int:
    return value.hour * 60 + value.minute


def whole_minutes_between(start: datetime, end: datetime) -> int:
    """Signed minutes from start to end, truncated toward zero."""
    return int((end - start).total_seconds() / 60)


def circular_minute_distance(a: int, b: int) -> int:
    """Distance between two minute-of-day values on a 24h clock."""
    diff = abs(a - b) % 1440
    return min(diff, 1440 - diff)
