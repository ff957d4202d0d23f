"""
Holiday model: admin-maintained calendar of paid holidays.

Feeds ``holiday_days`` in the monthly summary and keeps holiday dates out
of the loss-of-pay pool.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import Column, Date, DateTime, Integer, String

from app.db.base import Base


class Holiday(Base):
    __tablename__ = "holidays"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    date: date = Column(Date, unique=True, nullable=False, index=True)  # type: ignore[assignment]
    name: str = Column(String(120), nullable=False)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
