"""
Async SQLAlchemy engine & session factory for the holiday calendar.

SQLite (aiosqlite) by default; any async URL SQLAlchemy understands works.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings

engine_args: dict = {"echo": False}

if settings.DATABASE_URL.startswith("sqlite"):
    # Sessions may hop threads under aiosqlite
    engine_args["connect_args"] = {"check_same_thread": False}
else:
    engine_args.update({"pool_pre_ping": True, "pool_recycle": 300})

engine = create_async_engine(settings.DATABASE_URL, **engine_args)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)
