"""Pydantic schemas for employee profiles decoded from KYC forms."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.dates import date_key


class EmployeeProfile(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    employee_id: str = Field(alias="employeeId")
    full_name: str = Field(default="", alias="fullName")
    designation: str | None = None
    project_name: str | None = Field(default=None, alias="projectName")
    email: str | None = None
    phone_number: str | None = Field(default=None, alias="phoneNumber")
    date_of_joining: dt.date | None = Field(default=None, alias="dateOfJoining")

    @field_validator("employee_id", mode="before")
    @classmethod
    def _employee_id(cls, v: object) -> str:
        if v is None or not str(v).strip():
            raise ValueError("employeeId must not be empty")
        return str(v).strip()

    @field_validator("date_of_joining", mode="before")
    @classmethod
    def _doj(cls, v: object) -> dt.date | None:
        if not v:
            return None
        try:
            return date_key(v)
        except ValueError:
            return None
