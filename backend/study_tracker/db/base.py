"""
Database Engine and Sessions

One async engine per process, bound to the PostgreSQL URL from settings.
Pool sizing comes from the ``database`` section of config/default.yaml.

Usage:
    from study_tracker.db.base import async_session_maker

    # Outside a request (e.g. the nightly streak job)
    async with async_session_maker() as session:
        await StreakTrackingService(session).update_all_streaks()
"""

from collections.abc import AsyncGenerator
from typing import Any, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from study_tracker.config import settings, yaml_config


def build_engine(url: str, pool: Optional[dict[str, Any]] = None) -> AsyncEngine:
    """
    Create an async engine with pool limits.

    Args:
        url: SQLAlchemy database URL (postgresql+asyncpg://...).
        pool: ``pool_size``, ``max_overflow`` and ``pool_timeout`` overrides.
    """
    pool = pool or {}
    return create_async_engine(
        url,
        pool_size=pool.get("pool_size", 5),
        max_overflow=pool.get("max_overflow", 10),
        pool_timeout=pool.get("pool_timeout", 30),
        pool_pre_ping=True,
        echo=settings.DEBUG,
    )


engine = build_engine(settings.POSTGRES_URL, yaml_config.get("database"))

# Objects stay readable after commit; services return them to routers
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Declarative base for users, subjects and study time entries."""


# Registers the tables on Base.metadata; must come after Base
from study_tracker.db import models  # noqa: F401, E402


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session.

    Commits when the endpoint returns and rolls back if it raises.
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create missing tables on startup."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
