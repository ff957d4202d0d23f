"""
Holiday calendar endpoints.

Reads are open to any signed-in role; writes need admin or HRD.
"""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import Principal, get_current_principal, get_db, require_calendar_admin
from app.models.holiday import Holiday
from app.schemas.holiday import DeleteResponse, HolidayCreate, HolidayRead

router = APIRouter(tags=["holidays"])
logger = logging.getLogger(__name__)


@router.get("/holidays", response_model=list[HolidayRead])
async def list_holidays(
    year: int | None = Query(default=None, ge=1, le=9999),
    db: AsyncSession = Depends(get_db),
    _principal: Principal = Depends(get_current_principal),
) -> list[Holiday]:
    stmt = select(Holiday).order_by(Holiday.date)
    if year is not None:
        stmt = stmt.where(Holiday.date >= date(year, 1, 1), Holiday.date <= date(year, 12, 31))
    result = await db.execute(stmt)
    return list(result.scalars().all())


@router.post("/holidays", response_model=HolidayRead, status_code=201)
async def create_holiday(
    body: HolidayCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_calendar_admin),
) -> Holiday:
    holiday = Holiday(date=body.date, name=body.name)
    db.add(holiday)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail=f"Holiday on {body.date} already exists")
    await db.refresh(holiday)
    logger.info("Holiday %s (%s) added by %s", holiday.date, holiday.name, principal.subject)
    return holiday


@router.delete("/holidays/{holiday_id}", response_model=DeleteResponse)
async def delete_holiday(
    holiday_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_calendar_admin),
) -> DeleteResponse:
    result = await db.execute(select(Holiday).where(Holiday.id == holiday_id))
    holiday = result.scalar_one_or_none()
    if holiday is None:
        raise HTTPException(status_code=404, detail="Holiday not found")

    await db.delete(holiday)
    await db.commit()
    logger.info("Holiday %s removed by %s", holiday_id, principal.subject)
    return DeleteResponse(success=True, message=f"Holiday {holiday_id} deleted")
