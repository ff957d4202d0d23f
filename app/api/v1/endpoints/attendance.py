"""
Attendance endpoints: single-day classification and raw monthly records.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.api.v1.deps import Principal, get_cafm_client, get_current_principal, require_report_access
from app.schemas.attendance import AttendanceRecord, ClassifyResponse
from app.services.aggregator import validate_period
from app.services.classifier import classify, hours_worked
from app.services.upstream import CafmClient

router = APIRouter(tags=["attendance"])


@router.get("/attendance/classify", response_model=ClassifyResponse)
async def classify_day(
    punch_in: str | None = Query(default=None, description="ISO-8601 punch-in"),
    punch_out: str | None = Query(default=None, description="ISO-8601 punch-out"),
    _principal: Principal = Depends(get_current_principal),
) -> ClassifyResponse:
    """Classify one punch pair. Malformed timestamps resolve to Absent."""
    status = classify(punch_in, punch_out)
    return ClassifyResponse(
        status=status,
        code=status.code,
        label=status.label,
        hours_worked=round(max(0.0, hours_worked(punch_in, punch_out)), 2),
    )


@router.get(
    "/attendance/{employee_id}/{year}/{month}",
    response_model=list[AttendanceRecord],
    response_model_by_alias=False,
)
async def monthly_records(
    employee_id: str,
    year: int,
    month: int,
    client: CafmClient = Depends(get_cafm_client),
    _principal: Principal = Depends(require_report_access),
) -> list[AttendanceRecord]:
    """The employee's decoded punch records for one month, sorted by date."""
    validate_period(month, year)
    records = await client.monthly_attendance(employee_id, month, year)
    return sorted(
        (r for r in records if r.date.month == month and r.date.year == year),
        key=lambda r: r.date,
    )
