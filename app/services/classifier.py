"""
Daily attendance status classification.

Thresholds on hours between punch-in and punch-out:

    hours >= 8          PRESENT
    4.5 < hours < 8     HALF_DAY
    1 < hours <= 4.5    PARTIAL
    otherwise           ABSENT   (includes zero / negative spans)

A missing or unparseable punch on either side is ABSENT. Nothing here raises.
"""

from __future__ import annotations

from datetime import datetime

from app.core.dates import parse_timestamp
from app.schemas.attendance import DayStatus

FULL_DAY_HOURS = 8.0
HALF_DAY_HOURS = 4.5
MIN_PARTIAL_HOURS = 1.0


def hours_worked(punch_in: datetime | str | None, punch_out: datetime | str | None) -> float:
    """Real-valued hours between the two punches; 0.0 if either is missing."""
    start = parse_timestamp(punch_in)
    end = parse_timestamp(punch_out)
    if start is None or end is None:
        return 0.0
    return (end - start).total_seconds() / 3600


def status_for_hours(hours: float) -> DayStatus:
    if hours >= FULL_DAY_HOURS:
        return DayStatus.PRESENT
    if HALF_DAY_HOURS < hours < FULL_DAY_HOURS:
        return DayStatus.HALF_DAY
    if MIN_PARTIAL_HOURS < hours <= HALF_DAY_HOURS:
        return DayStatus.PARTIAL
    return DayStatus.ABSENT


def classify(punch_in: datetime | str | None, punch_out: datetime | str | None) -> DayStatus:
    if parse_timestamp(punch_in) is None or parse_timestamp(punch_out) is None:
        return DayStatus.ABSENT
    return status_for_hours(hours_worked(punch_in, punch_out))
