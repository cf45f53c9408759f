"""Utility helpers for ett-lifecycle."""

from .datetime import iso_now, now_millis, parse_iso, seconds_ago, to_iso, to_millis, utc_now
from .error_handling import lifecycle_error_handler


def is_email_address(value) -> bool:
    """True when a stored email field holds a real address rather than a masked invitation code."""
    return bool(value) and "@" in value


__all__ = [
    "iso_now",
    "now_millis",
    "parse_iso",
    "seconds_ago",
    "to_iso",
    "to_millis",
    "utc_now",
    "lifecycle_error_handler",
    "is_email_address",
]
