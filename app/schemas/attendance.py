"""Pydantic schemas for attendance records, day statuses and the day register."""

from __future__ import annotations

import datetime as dt
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.dates import date_key, parse_timestamp


# ── Enums ───────────────────────────────────────────────────────────
class DayStatus(str, Enum):
    """Attendance classification of one employee-day."""

    PRESENT = "PRESENT"
    HALF_DAY = "HALF_DAY"
    PARTIAL = "PARTIAL"
    ABSENT = "ABSENT"

    @property
    def code(self) -> str:
        return _STATUS_CODES[self]

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


_STATUS_CODES = {
    DayStatus.PRESENT: "P",
    DayStatus.HALF_DAY: "HD",
    DayStatus.PARTIAL: "PA",
    DayStatus.ABSENT: "A",
}

_STATUS_LABELS = {
    DayStatus.PRESENT: "Present",
    DayStatus.HALF_DAY: "Half Day",
    DayStatus.PARTIAL: "Partially Absent",
    DayStatus.ABSENT: "Absent",
}


class DayType(str, Enum):
    WORKING = "WORKING"
    WEEK_OFF = "WEEK_OFF"
    HOLIDAY = "HOLIDAY"


# ── Upstream record (typed decode boundary) ─────────────────────────
class AttendanceRecord(BaseModel):
    """One employee-day as reported by the CAFM attendance service.

    ``date`` is reduced to a date-only key. Punch times that are missing or
    unparseable decode to ``None`` so the classifier treats the day as absent.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    employee_id: str = Field(alias="employeeId")
    date: dt.date
    punch_in_time: dt.datetime | None = Field(default=None, alias="punchInTime")
    punch_out_time: dt.datetime | None = Field(default=None, alias="punchOutTime")
    project_name: str | None = Field(default=None, alias="projectName")
    designation: str | None = None

    @field_validator("employee_id", mode="before")
    @classmethod
    def _employee_id(cls, v: object) -> str:
        if v is None or not str(v).strip():
            raise ValueError("employeeId must not be empty")
        return str(v).strip()

    @field_validator("date", mode="before")
    @classmethod
    def _date(cls, v: object) -> dt.date:
        return date_key(v)

    @field_validator("punch_in_time", "punch_out_time", mode="before")
    @classmethod
    def _timestamp(cls, v: object) -> dt.datetime | None:
        return parse_timestamp(v)


# ── Responses ───────────────────────────────────────────────────────
class ClassifyResponse(BaseModel):
    status: DayStatus
    code: str
    label: str
    hours_worked: float


class DayCell(BaseModel):
    """One row of the monthly attendance register."""

    date: dt.date
    weekday: str
    day_type: DayType
    punch_in_time: dt.datetime | None = None
    punch_out_time: dt.datetime | None = None
    hours_worked: float = 0.0
    shortage_hours: float = 0.0
    # None for a week-off / holiday without any punch, or a leave day
    status: DayStatus | None = None
    # Approved leave code (EL / SL / CL / CompOff) covering this day
    leave: str | None = None

    @property
    def register_code(self) -> str:
        """Short code shown in register grids: leave, then status, then day type."""
        if self.leave:
            return "CFL" if self.leave == "CompOff" else self.leave
        if self.status is not None:
            return self.status.code
        if self.day_type is DayType.HOLIDAY:
            return "H"
        if self.day_type is DayType.WEEK_OFF:
            return "WO"
        return "-"
