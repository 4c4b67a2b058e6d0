# steamcli/utils/date_utils.py

"""Timestamp helpers for cached records.

Every timestamp steamcli stores is a timezone-aware UTC datetime and is
persisted as an ISO 8601 string. Naive values read from older cache
files are treated as UTC.

Accepted community date formats: "January 2, 2006" and "January 2"
(the current year is implied when Steam omits it).
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone


__all__ = ["utc_now", "parse_timestamp", "format_timestamp", "parse_member_since", "is_older_than"]


def utc_now() -> datetime:
    """Returns the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parses an ISO 8601 timestamp written by format_timestamp.

    Args:
        value: The stored string, or None.

    Returns:
        An aware datetime, or None when the value is empty.

    Raises:
        ValueError: If the string is not ISO 8601.
    """
    if not value:
        return None
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_timestamp(value: datetime | None) -> str | None:
    """Serializes a datetime for the cache file (None stays None)."""
    if value is None:
        return None
    return value.isoformat()


def parse_member_since(value: str | None) -> date | None:
    """Parses the community profile's "memberSince" text.

    Steam writes "January 2, 2006", or "January 2" for dates in the
    current year. Anything else yields None.
    """
    if not value or not value.strip():
        return None

    text = value.strip()
    for fmt in ("%B %d, %Y", "%B %d,%Y"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    try:
        parsed = datetime.strptime(f"{text}, {utc_now().year}", "%B %d, %Y")
        return parsed.date()
    except ValueError:
        return None


def is_older_than(updated: datetime, max_age: timedelta, now: datetime | None = None) -> bool:
    """True when more than max_age has passed since updated."""
    if now is None:
        now = utc_now()
    return now - updated > max_age
