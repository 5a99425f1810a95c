"""Date and timestamp utilities"""

from datetime import date, datetime, timedelta, timezone
from typing import Any, List, Optional


def generate_date_range(start: date, end: date) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days + 1
    return [start + timedelta(days=i) for i in range(days)]


def _truncate_to_millis(value: datetime) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a transaction timestamp to a timezone-aware datetime (ms precision).

    Accepts datetimes, dates, epoch milliseconds (number or digit string)
    and ISO-8601 strings. Naive values are taken as UTC.

    Returns None when the value cannot be parsed.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return _truncate_to_millis(value)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    if isinstance(value, (int, float)):
        try:
            return _truncate_to_millis(datetime.fromtimestamp(value / 1000, tz=timezone.utc))
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.lstrip("-").isdigit():
            return parse_timestamp(int(text))
        # fromisoformat only understands a trailing Z from 3.11 onwards
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return _truncate_to_millis(datetime.fromisoformat(text))
        except ValueError:
            return None

    return None


def day_key(value: datetime) -> str:
    """Calendar day of a timestamp as YYYY-MM-DD"""
    return value.date().isoformat()


def month_key(value: datetime) -> str:
    """Calendar month of a timestamp as YYYY-MM"""
    return f"{value.year:04d}-{value.month:02d}"
