"""
Monthly attendance / payroll summary endpoints and exports.

Each employee-month is fetched from the CAFM API and aggregated in Python.
The overall report filters and paginates the employee directory first, then
fans out the per-employee fetches concurrently for the visible rows only.
"""

import calendar
import logging
from collections import defaultdict
from datetime import date
from enum import Enum

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import (
    Principal,
    get_cafm_client,
    get_db,
    get_service_client,
    require_report_access,
)
from app.core.config import settings
from app.core.exceptions import UpstreamError
from app.schemas.attendance import AttendanceRecord
from app.schemas.employee import EmployeeProfile
from app.schemas.leave import LeaveBalanceSnapshot, LeaveRequest
from app.schemas.report import (
    EmployeeMonthReport,
    HealthResponse,
    Page,
    RegisterRow,
    SummaryRow,
)
from app.services.aggregator import (
    build_day_grid,
    leave_days_from_history,
    leave_usage_from_balance,
    leave_usage_from_history,
    summarize,
    validate_period,
)
from app.services.export import employee_month_pdf, summaries_to_csv, summaries_to_xlsx
from app.services.holidays import count_paid_holidays, holiday_dates_for_month
from app.services.tables import EMPLOYEE_TABLE
from app.services.upstream import CafmClient, gather_bounded

router = APIRouter(tags=["reports"])
logger = logging.getLogger(__name__)

# Exports fan out one upstream fetch per employee; keyed by client IP
limiter = Limiter(key_func=get_remote_address)


class LeaveSource(str, Enum):
    BALANCE = "balance"
    HISTORY = "history"


class ExportFormat(str, Enum):
    CSV = "csv"
    XLSX = "xlsx"


# ── Helpers ─────────────────────────────────────────────────────────
async def _records_or_empty(
    client: CafmClient, employee_id: str, month: int, year: int
) -> list[AttendanceRecord]:
    """No attendance report upstream (404) means no punches that month."""
    try:
        return await client.monthly_attendance(employee_id, month, year)
    except UpstreamError as exc:
        if exc.status_code != 404:
            raise
        logger.info("No attendance report for %s %02d/%d", employee_id, month, year)
        return []


async def _leave_history_or_empty(client: CafmClient, employee_id: str) -> list[LeaveRequest]:
    try:
        return await client.leave_history(employee_id)
    except UpstreamError as exc:
        if exc.status_code != 404:
            raise
        logger.info("No leave history for %s", employee_id)
        return []


async def _leave_for_month(
    client: CafmClient, employee_id: str, month: int, year: int, source: LeaveSource
) -> tuple[dict[str, float], dict[date, str]]:
    """Leave usage from ``source`` plus the approved leave days of the month.

    Leave days always come from the history, whatever the usage source, so a
    record-less day on approved leave is never counted as loss-of-pay.
    """
    history = await _leave_history_or_empty(client, employee_id)
    leave_dates = leave_days_from_history(history, month, year)
    if source is LeaveSource.HISTORY:
        return leave_usage_from_history(history, month, year), leave_dates
    try:
        snapshot: LeaveBalanceSnapshot = await client.leave_balance(employee_id)
    except UpstreamError as exc:
        if exc.status_code != 404:
            raise
        logger.info("No leave balance for %s", employee_id)
        return {}, leave_dates
    return leave_usage_from_balance(snapshot), leave_dates


async def _profile_or_none(client: CafmClient, employee_id: str) -> EmployeeProfile | None:
    try:
        return await client.employee(employee_id)
    except UpstreamError as exc:
        if exc.status_code != 404:
            raise
        logger.info("No KYC profile for %s", employee_id)
        return None


async def _summary_row(
    client: CafmClient,
    profile: EmployeeProfile,
    month: int,
    year: int,
    holidays: set[date],
    source: LeaveSource,
) -> SummaryRow:
    records = await _records_or_empty(client, profile.employee_id, month, year)
    usage, leave_dates = await _leave_for_month(
        client, profile.employee_id, month, year, source
    )
    summary = summarize(
        profile.employee_id,
        month,
        year,
        records,
        usage,
        holidays_in_month=count_paid_holidays(holidays),
        holiday_dates=holidays,
        leave_dates=leave_dates,
    )
    return SummaryRow(
        employee_id=profile.employee_id,
        full_name=profile.full_name,
        designation=profile.designation,
        project_name=profile.project_name,
        summary=summary,
    )


async def _summary_rows(
    client: CafmClient,
    profiles: list[EmployeeProfile],
    month: int,
    year: int,
    holidays: set[date],
    source: LeaveSource,
) -> list[SummaryRow]:
    return await gather_bounded(
        (_summary_row(client, p, month, year, holidays, source) for p in profiles),
        settings.UPSTREAM_CONCURRENCY,
    )


async def _employee_month(
    client: CafmClient,
    db: AsyncSession,
    employee_id: str,
    month: int,
    year: int,
    source: LeaveSource,
) -> EmployeeMonthReport:
    validate_period(month, year)
    holidays = await holiday_dates_for_month(db, month, year)
    records = await _records_or_empty(client, employee_id, month, year)
    usage, leave_dates = await _leave_for_month(client, employee_id, month, year, source)
    profile = await _profile_or_none(client, employee_id)

    summary = summarize(
        employee_id,
        month,
        year,
        records,
        usage,
        holidays_in_month=count_paid_holidays(holidays),
        holiday_dates=holidays,
        leave_dates=leave_dates,
    )
    days = build_day_grid(
        employee_id, month, year, records, holidays, leave_dates=leave_dates
    )
    return EmployeeMonthReport(profile=profile, summary=summary, days=days)


# ── Per-employee summary ────────────────────────────────────────────
@router.get(
    "/reports/summary/{year}/{month}/employee/{employee_id}",
    response_model=EmployeeMonthReport,
    response_model_by_alias=False,
)
async def employee_summary(
    year: int,
    month: int,
    employee_id: str,
    leave_source: LeaveSource = Query(default=LeaveSource.BALANCE),
    client: CafmClient = Depends(get_cafm_client),
    db: AsyncSession = Depends(get_db),
    _principal: Principal = Depends(require_report_access),
) -> EmployeeMonthReport:
    """Monthly summary plus the day-by-day register for one employee."""
    return await _employee_month(client, db, employee_id, month, year, leave_source)


@router.get("/reports/summary/{year}/{month}/employee/{employee_id}/pdf")
@limiter.limit(lambda: settings.EXPORT_RATE_LIMIT)
async def employee_summary_pdf(
    request: Request,
    year: int,
    month: int,
    employee_id: str,
    leave_source: LeaveSource = Query(default=LeaveSource.BALANCE),
    client: CafmClient = Depends(get_cafm_client),
    db: AsyncSession = Depends(get_db),
    _principal: Principal = Depends(require_report_access),
) -> StreamingResponse:
    """Download the employee's monthly register and summary as PDF."""
    report = await _employee_month(client, db, employee_id, month, year, leave_source)
    pdf = employee_month_pdf(report.profile, report.summary, report.days)
    filename = f"attendance_{employee_id}_{year}_{month:02d}.pdf"
    return StreamingResponse(
        pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


# ── Overall summary ─────────────────────────────────────────────────
@router.get(
    "/reports/summary/{year}/{month}",
    response_model=Page[SummaryRow],
)
async def overall_summary(
    year: int,
    month: int,
    search: str | None = Query(default=None, description="Employee ID or name"),
    project: str | None = Query(default=None),
    designation: str | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=200),
    leave_source: LeaveSource = Query(default=LeaveSource.BALANCE),
    client: CafmClient = Depends(get_cafm_client),
    db: AsyncSession = Depends(get_db),
    _principal: Principal = Depends(require_report_access),
) -> Page[SummaryRow]:
    """Monthly summary for every employee matching the filters, one page at a time."""
    validate_period(month, year)
    holidays = await holiday_dates_for_month(db, month, year)
    profiles = await client.employees()
    visible = EMPLOYEE_TABLE.apply(
        profiles,
        search=search,
        filter_values={"project": project, "designation": designation},
        page=page,
        page_size=page_size,
    )
    rows = await _summary_rows(client, visible.items, month, year, holidays, leave_source)
    logger.info(
        "Overall summary %02d/%d: %d of %d employees", month, year, len(rows), visible.total
    )
    return Page(
        items=rows,
        total=visible.total,
        page=visible.page,
        page_size=visible.page_size,
        pages=visible.pages,
    )


@router.get("/reports/summary/{year}/{month}/export")
@limiter.limit(lambda: settings.EXPORT_RATE_LIMIT)
async def export_summary(
    request: Request,
    year: int,
    month: int,
    fmt: ExportFormat = Query(default=ExportFormat.XLSX, alias="format"),
    search: str | None = Query(default=None),
    project: str | None = Query(default=None),
    designation: str | None = Query(default=None),
    leave_source: LeaveSource = Query(default=LeaveSource.BALANCE),
    client: CafmClient = Depends(get_cafm_client),
    db: AsyncSession = Depends(get_db),
    _principal: Principal = Depends(require_report_access),
) -> StreamingResponse:
    """Export the filtered monthly summary (all pages) as CSV or Excel."""
    validate_period(month, year)
    holidays = await holiday_dates_for_month(db, month, year)
    profiles = EMPLOYEE_TABLE.filter(
        await client.employees(),
        search=search,
        filter_values={"project": project, "designation": designation},
    )
    rows = await _summary_rows(client, profiles, month, year, holidays, leave_source)
    stem = f"attendance_summary_{year}_{month:02d}"

    if fmt is ExportFormat.CSV:
        return StreamingResponse(
            summaries_to_csv(rows),
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename={stem}.csv"},
        )
    title = f"{calendar.month_abbr[month]} {year}"
    return StreamingResponse(
        summaries_to_xlsx(rows, title),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={stem}.xlsx"},
    )


# ── Consolidated register ───────────────────────────────────────────
@router.get(
    "/reports/register/{year}/{month}",
    response_model=Page[RegisterRow],
)
async def month_register(
    year: int,
    month: int,
    search: str | None = Query(default=None, description="Employee ID or name"),
    project: str | None = Query(default=None),
    designation: str | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=200),
    client: CafmClient = Depends(get_cafm_client),
    db: AsyncSession = Depends(get_db),
    _principal: Principal = Depends(require_report_access),
) -> Page[RegisterRow]:
    """Employee x day code grid for the month, built from three bulk upstream reads.

    Each cell is a leave code (EL / SL / CL / CFL), a status code
    (P / HD / PA / A), ``H`` for a holiday or ``WO`` for a week-off. Leave
    usage comes from the approved leave history.
    """
    validate_period(month, year)
    holidays = await holiday_dates_for_month(db, month, year)
    visible = EMPLOYEE_TABLE.apply(
        await client.employees(),
        search=search,
        filter_values={"project": project, "designation": designation},
        page=page,
        page_size=page_size,
    )
    records_by_emp: dict[str, list[AttendanceRecord]] = defaultdict(list)
    for rec in await client.all_attendance():
        records_by_emp[rec.employee_id].append(rec)
    leaves_by_emp: dict[str, list[LeaveRequest]] = defaultdict(list)
    for req in await client.all_leaves():
        if req.employee_id:
            leaves_by_emp[req.employee_id].append(req)

    paid_holidays = count_paid_holidays(holidays)
    rows: list[RegisterRow] = []
    for profile in visible.items:
        emp_id = profile.employee_id
        records = records_by_emp.get(emp_id, [])
        requests = leaves_by_emp.get(emp_id, [])
        leave_dates = leave_days_from_history(requests, month, year)
        summary = summarize(
            emp_id,
            month,
            year,
            records,
            leave_usage_from_history(requests, month, year),
            holidays_in_month=paid_holidays,
            holiday_dates=holidays,
            leave_dates=leave_dates,
        )
        cells = build_day_grid(emp_id, month, year, records, holidays, leave_dates=leave_dates)
        rows.append(
            RegisterRow(
                employee_id=emp_id,
                full_name=profile.full_name,
                designation=profile.designation,
                project_name=profile.project_name,
                days=[cell.register_code for cell in cells],
                summary=summary,
            )
        )
    logger.info("Register %02d/%d: %d of %d employees", month, year, len(rows), visible.total)
    return Page(
        items=rows,
        total=visible.total,
        page=visible.page,
        page_size=visible.page_size,
        pages=visible.pages,
    )


# ── Health ──────────────────────────────────────────────────────────
@router.get("/health", response_model=HealthResponse)
async def health(
    db: AsyncSession = Depends(get_db),
    client: CafmClient = Depends(get_service_client),
) -> HealthResponse:
    """Public health check: database and CAFM API reachability."""
    result = HealthResponse(db=False, upstream=False)

    try:
        await db.execute(select(1))
        result.db = True
    except Exception as e:
        logger.error("Health check DB failure: %s", e)

    result.upstream = await client.ping()

    return result
