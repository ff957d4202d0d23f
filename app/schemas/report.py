"""Pydantic schemas for monthly summaries, paginated tables and health."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from app.schemas.attendance import DayCell
from app.schemas.employee import EmployeeProfile

T = TypeVar("T")


# ── Monthly Summary ────────────────────────────────────────────────
class MonthlySummary(BaseModel):
    employee_id: str
    month: int
    year: int
    total_days_in_month: int
    present_days: int
    half_days: int
    partial_absent_days: int
    week_off_days: int
    holiday_days: int
    used_leave_by_type: dict[str, float] = Field(default_factory=dict)
    loss_of_pay_days: int
    total_payable_days: float
    attendance_percentage: float


class EmployeeMonthReport(BaseModel):
    profile: EmployeeProfile | None = None
    summary: MonthlySummary
    days: list[DayCell]


class SummaryRow(BaseModel):
    """One line of the overall (all employees) monthly summary table."""

    employee_id: str
    full_name: str
    designation: str | None = None
    project_name: str | None = None
    summary: MonthlySummary


class RegisterRow(BaseModel):
    """One employee line of the consolidated month register: a code per day."""

    employee_id: str
    full_name: str
    designation: str | None = None
    project_name: str | None = None
    days: list[str]
    summary: MonthlySummary


# ── Pagination ─────────────────────────────────────────────────────
class Page(BaseModel, Generic[T]):
    items: list[T]
    total: int
    page: int
    page_size: int
    pages: int


# ── Health ─────────────────────────────────────────────────────────
class HealthResponse(BaseModel):
    db: bool
    upstream: bool
