"""Pydantic schemas for the holiday calendar."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, field_validator


class HolidayCreate(BaseModel):
    date: dt.date
    name: str

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be empty")
        if len(v) > 120:
            raise ValueError("Name must not exceed 120 characters")
        return v


class HolidayRead(BaseModel):
    id: int
    date: dt.date
    name: str

    model_config = {"from_attributes": True}


class DeleteResponse(BaseModel):
    success: bool
    message: str
