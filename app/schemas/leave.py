"""Pydantic schemas for leave balances and leave requests."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.dates import date_key

LEAVE_TYPES = ("EL", "SL", "CL", "CompOff")


class LeaveBalance(BaseModel):
    allocated: int = Field(default=0, ge=0)
    used: int = Field(default=0, ge=0)
    remaining: int = Field(default=0, ge=0)
    pending: int = Field(default=0, ge=0)


class LeaveBalanceSnapshot(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    employee_id: str = Field(alias="employeeId")
    employee_name: str | None = Field(default=None, alias="employeeName")
    year: int | None = None
    balances: dict[str, LeaveBalance] = Field(default_factory=dict)

    @field_validator("balances", mode="before")
    @classmethod
    def _known_types(cls, v: object) -> object:
        # The API sometimes returns extra aggregate keys alongside the four codes.
        if isinstance(v, dict):
            return {k: b for k, b in v.items() if k in LEAVE_TYPES}
        return v


class LeaveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    leave_id: str | None = Field(default=None, alias="leaveId")
    employee_id: str | None = Field(default=None, alias="employeeId")
    employee_name: str | None = Field(default=None, alias="employeeName")
    leave_type: str = Field(alias="leaveType")
    start_date: dt.date = Field(alias="startDate")
    end_date: dt.date = Field(alias="endDate")
    number_of_days: float = Field(default=0, ge=0, alias="numberOfDays")
    is_half_day: bool = Field(default=False, alias="isHalfDay")
    status: str = "Pending"
    reason: str | None = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _date(cls, v: object) -> dt.date:
        return date_key(v)
