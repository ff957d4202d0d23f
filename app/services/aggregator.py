"""
Monthly attendance aggregation and payroll-day derivation.

Everything here is pure: given one employee's records for a month, the
leave usage and the holiday calendar, it produces the ``MonthlySummary``
and the per-day register rows. Nothing is cached or persisted.

Days without a punch record are absent (and loss-of-pay) only when they
are working days. A Saturday, Sunday or listed holiday with no record is
not counted against the employee; a record on such a day is classified
like any other day. A day on approved leave is neither: it is paid as
leave and shown with its leave code.
"""

from __future__ import annotations

import calendar
from collections.abc import Collection, Iterable, Mapping
from datetime import MAXYEAR, MINYEAR, date, timedelta

from app.core.exceptions import InvalidPeriod
from app.schemas.attendance import AttendanceRecord, DayCell, DayStatus, DayType
from app.schemas.leave import LEAVE_TYPES, LeaveBalanceSnapshot, LeaveRequest
from app.schemas.report import MonthlySummary
from app.services.classifier import FULL_DAY_HOURS, classify, hours_worked

WEEK_OFF_WEEKDAYS = (5, 6)  # Sat, Sun

HALF_DAY_WEIGHT = 0.5
PARTIAL_DAY_WEIGHT = 0.25


# ── Calendar helpers ────────────────────────────────────────────────
def validate_period(month: int, year: int) -> None:
    if not 1 <= month <= 12 or not MINYEAR <= year <= MAXYEAR:
        raise InvalidPeriod(month, year)


def days_in_month(month: int, year: int) -> int:
    validate_period(month, year)
    return calendar.monthrange(year, month)[1]


def month_dates(month: int, year: int) -> list[date]:
    return [date(year, month, d) for d in range(1, days_in_month(month, year) + 1)]


def is_week_off(day: date) -> bool:
    return day.weekday() in WEEK_OFF_WEEKDAYS


def count_week_off_days(month: int, year: int) -> int:
    return sum(1 for d in month_dates(month, year) if is_week_off(d))


def day_type(day: date, holiday_dates: Collection[date] = ()) -> DayType:
    if is_week_off(day):
        return DayType.WEEK_OFF
    if day in holiday_dates:
        return DayType.HOLIDAY
    return DayType.WORKING


def _records_by_date(
    employee_id: str, month: int, year: int, records: Iterable[AttendanceRecord]
) -> dict[date, AttendanceRecord]:
    """Index this employee's records for the month by date; later duplicates win."""
    by_date: dict[date, AttendanceRecord] = {}
    for rec in records:
        if rec.employee_id != employee_id:
            continue
        if rec.date.month != month or rec.date.year != year:
            continue
        by_date[rec.date] = rec
    return by_date


# ── Leave usage ─────────────────────────────────────────────────────
_COMP_OFF_ALIASES = {"compoff", "cfl", "compoffleave"}


def normalize_leave_code(leave_type: str | None) -> str | None:
    """Map an upstream leave type (``"el"``, ``"Comp Off"``, ``"CFL"`` ...) to a known code."""
    key = (leave_type or "").strip().lower().replace(" ", "")
    if key in _COMP_OFF_ALIASES:
        return "CompOff"
    return next((code for code in LEAVE_TYPES if code.lower() == key), None)


def _is_approved(req: LeaveRequest) -> bool:
    return req.status.strip().lower() == "approved"


def leave_usage_from_balance(snapshot: LeaveBalanceSnapshot | None) -> dict[str, float]:
    """``{code: used}`` for the four leave codes present in a balance snapshot."""
    if snapshot is None:
        return {}
    return {
        code: float(bal.used)
        for code, bal in snapshot.balances.items()
        if code in LEAVE_TYPES
    }


def leave_usage_from_history(
    requests: Iterable[LeaveRequest], month: int, year: int
) -> dict[str, float]:
    """Sum approved leave days whose start date falls in the given month."""
    validate_period(month, year)
    usage: dict[str, float] = {}
    for req in requests:
        code = normalize_leave_code(req.leave_type)
        if code is None or not _is_approved(req):
            continue
        if req.start_date.month != month or req.start_date.year != year:
            continue
        usage[code] = usage.get(code, 0.0) + req.number_of_days
    return usage


def leave_days_from_history(
    requests: Iterable[LeaveRequest], month: int, year: int
) -> dict[date, str]:
    """Days of the month covered by an approved leave, mapped to the leave code.

    Multi-month requests are clipped to the month; overlapping requests keep
    the later one.
    """
    dates = month_dates(month, year)
    first, last = dates[0], dates[-1]
    days: dict[date, str] = {}
    for req in requests:
        code = normalize_leave_code(req.leave_type)
        if code is None or not _is_approved(req):
            continue
        day = max(req.start_date, first)
        end = min(req.end_date, last)
        while day <= end:
            days[day] = code
            day += timedelta(days=1)
    return days


# ── Summary ─────────────────────────────────────────────────────────
def summarize(
    employee_id: str,
    month: int,
    year: int,
    records: Iterable[AttendanceRecord],
    leave_usage: Mapping[str, float] | None = None,
    holidays_in_month: int = 0,
    holiday_dates: Collection[date] = (),
    leave_dates: Mapping[date, str] | None = None,
) -> MonthlySummary:
    """Build the monthly summary for one employee.

    Records for other employees or other months are ignored. ``holiday_days``
    echoes ``holidays_in_month``; ``holiday_dates`` only decides which
    record-less days stay out of the loss-of-pay count.

    Days in ``leave_dates`` are paid through ``leave_usage`` and are never
    bucketed as present, half, partial or absent.
    """
    dates = month_dates(month, year)
    by_date = _records_by_date(employee_id, month, year, records)
    leave_dates = leave_dates or {}

    counts = {status: 0 for status in DayStatus}
    for day in dates:
        if day in leave_dates:
            continue
        rec = by_date.get(day)
        if rec is not None:
            counts[classify(rec.punch_in_time, rec.punch_out_time)] += 1
        elif day_type(day, holiday_dates) is DayType.WORKING:
            counts[DayStatus.ABSENT] += 1

    used = {
        code: float(n)
        for code, n in (leave_usage or {}).items()
        if code in LEAVE_TYPES
    }
    total_days = len(dates)
    payable = (
        counts[DayStatus.PRESENT]
        + HALF_DAY_WEIGHT * counts[DayStatus.HALF_DAY]
        + PARTIAL_DAY_WEIGHT * counts[DayStatus.PARTIAL]
        + sum(used.values())
    )

    return MonthlySummary(
        employee_id=employee_id,
        month=month,
        year=year,
        total_days_in_month=total_days,
        present_days=counts[DayStatus.PRESENT],
        half_days=counts[DayStatus.HALF_DAY],
        partial_absent_days=counts[DayStatus.PARTIAL],
        week_off_days=sum(1 for d in dates if is_week_off(d)),
        holiday_days=holidays_in_month,
        used_leave_by_type=used,
        loss_of_pay_days=counts[DayStatus.ABSENT],
        total_payable_days=payable,
        attendance_percentage=round(payable / total_days * 100, 2),
    )


# ── Day register ────────────────────────────────────────────────────
def build_day_grid(
    employee_id: str,
    month: int,
    year: int,
    records: Iterable[AttendanceRecord],
    holiday_dates: Collection[date] = (),
    leave_dates: Mapping[date, str] | None = None,
) -> list[DayCell]:
    """One ``DayCell`` per calendar day, consistent with ``summarize``.

    A leave day carries its leave code instead of a status; any punches on
    it are still shown.
    """
    by_date = _records_by_date(employee_id, month, year, records)
    leave_dates = leave_dates or {}
    cells: list[DayCell] = []
    for day in month_dates(month, year):
        kind = day_type(day, holiday_dates)
        rec = by_date.get(day)
        cell = DayCell(date=day, weekday=calendar.day_name[day.weekday()], day_type=kind)
        if rec is not None:
            hours = max(0.0, hours_worked(rec.punch_in_time, rec.punch_out_time))
            cell.punch_in_time = rec.punch_in_time
            cell.punch_out_time = rec.punch_out_time
            cell.hours_worked = round(hours, 2)
        if day in leave_dates:
            cell.leave = leave_dates[day]
        elif rec is not None:
            cell.status = classify(rec.punch_in_time, rec.punch_out_time)
            if kind is DayType.WORKING:
                cell.shortage_hours = round(max(0.0, FULL_DAY_HOURS - hours), 2)
        elif kind is DayType.WORKING:
            cell.status = DayStatus.ABSENT
            cell.shortage_hours = FULL_DAY_HOURS
        cells.append(cell)
    return cells
