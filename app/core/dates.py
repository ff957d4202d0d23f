"""
Date / timestamp normalisation helpers shared by schemas and services.
"""

from __future__ import annotations

from datetime import date, datetime, timezone


def ensure_utc(dt: datetime) -> datetime:
    """Normalise a potentially-naive timestamp to UTC-aware."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO-8601 timestamp; anything unparseable becomes ``None``."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return ensure_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def date_key(value: object) -> date:
    """Reduce an ISO date or date-time to its calendar date, discarding time-of-day.

    Strings are cut at the ``T`` separator rather than converted between
    timezones, so ``2025-06-10T23:30:00Z`` stays on the 10th.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        head = value.strip().split("T", 1)[0].split(" ", 1)[0]
        return date.fromisoformat(head)
    raise ValueError(f"Not a date: {value!r}")
