"""
DateTime utilities for the ISO-8601 timestamps stored on lifecycle records.
"""
from datetime import datetime, timezone, timedelta
from typing import Optional


def utc_now() -> datetime:
    """
    Get the current UTC time with timezone awareness.

    Returns:
        datetime: Current UTC time with timezone info
    """
    return datetime.now(timezone.utc)


def to_iso(dt: datetime) -> str:
    """
    Format a datetime as an ISO-8601 UTC string with millisecond precision.

    Naive datetimes are assumed to be UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def iso_now() -> str:
    """Current UTC time as an ISO-8601 string."""
    return to_iso(utc_now())


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 string into an aware datetime.

    Returns:
        The parsed datetime, or None if the value is empty or unparsable
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def to_millis(value: Optional[str]) -> int:
    """
    Millisecond epoch value of an ISO-8601 timestamp.

    A missing or unparsable timestamp is 0, which sorts as the oldest possible.
    """
    dt = parse_iso(value)
    if dt is None:
        return 0
    return int(dt.timestamp() * 1000)


def now_millis() -> int:
    return int(utc_now().timestamp() * 1000)


def seconds_ago(seconds: float) -> str:
    """ISO-8601 string for a moment the given number of seconds in the past."""
    return to_iso(utc_now() - timedelta(seconds=seconds))
