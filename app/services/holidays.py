"""
Holiday calendar queries and first-run seeding.
"""

from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.holiday import Holiday
from app.services.aggregator import days_in_month, is_week_off

logger = logging.getLogger(__name__)

# Government holidays observed across all projects.
DEFAULT_HOLIDAYS: list[tuple[str, str]] = [
    ("2024-01-26", "Republic Day"),
    ("2024-03-25", "Holi"),
    ("2024-04-09", "Ram Navami"),
    ("2024-05-01", "Labour Day"),
    ("2024-08-08", "Varamahalakshmi"),
    ("2024-08-15", "Independence Day"),
    ("2024-10-02", "Gandhi Jayanti"),
    ("2024-11-14", "Diwali"),
    ("2024-12-25", "Christmas"),
    ("2025-01-26", "Republic Day"),
    ("2025-03-14", "Holi"),
    ("2025-04-09", "Ram Navami"),
    ("2025-05-01", "Labour Day"),
    ("2025-08-08", "Varamahalakshmi"),
    ("2025-08-15", "Independence Day"),
    ("2025-10-02", "Gandhi Jayanti"),
    ("2025-11-03", "Diwali"),
    ("2025-12-25", "Christmas"),
    ("2026-01-26", "Republic Day"),
    ("2026-03-03", "Holi"),
    ("2026-03-29", "Ram Navami"),
    ("2026-05-01", "Labour Day"),
    ("2026-08-08", "Varamahalakshmi"),
    ("2026-08-15", "Independence Day"),
    ("2026-10-02", "Gandhi Jayanti"),
    ("2026-10-23", "Diwali"),
    ("2026-12-25", "Christmas"),
    ("2027-01-26", "Republic Day"),
    ("2027-03-22", "Holi"),
    ("2027-03-18", "Ram Navami"),
    ("2027-05-01", "Labour Day"),
    ("2027-08-08", "Varamahalakshmi"),
    ("2027-08-15", "Independence Day"),
    ("2027-10-02", "Gandhi Jayanti"),
    ("2027-11-12", "Diwali"),
    ("2027-12-25", "Christmas"),
    ("2028-01-26", "Republic Day"),
    ("2028-03-10", "Holi"),
    ("2028-04-06", "Ram Navami"),
    ("2028-05-01", "Labour Day"),
    ("2028-08-08", "Varamahalakshmi"),
    ("2028-08-15", "Independence Day"),
    ("2028-10-02", "Gandhi Jayanti"),
    ("2028-10-30", "Diwali"),
    ("2028-12-25", "Christmas"),
]


async def holiday_dates_for_month(db: AsyncSession, month: int, year: int) -> set[date]:
    """All calendar holidays in the month (week-off days included)."""
    start = date(year, month, 1)
    end = date(year, month, days_in_month(month, year))
    result = await db.execute(
        select(Holiday.date).where(Holiday.date >= start, Holiday.date <= end)
    )
    return set(result.scalars().all())


def count_paid_holidays(holiday_dates: set[date]) -> int:
    """Holidays that fall on working weekdays; weekend holidays are already week-offs."""
    return sum(1 for d in holiday_dates if not is_week_off(d))


async def seed_default_holidays(db: AsyncSession) -> int:
    """Insert the default calendar when the table is empty. Returns rows added."""
    existing = await db.execute(select(func.count(Holiday.id)))
    if existing.scalar():
        return 0
    for iso, name in DEFAULT_HOLIDAYS:
        db.add(Holiday(date=date.fromisoformat(iso), name=name))
    await db.commit()
    logger.info("Seeded %d default holidays", len(DEFAULT_HOLIDAYS))
    return len(DEFAULT_HOLIDAYS)
