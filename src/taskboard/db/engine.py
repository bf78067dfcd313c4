"""Async SQLAlchemy engine and session factory.

One engine per process with connection pooling; each request gets its own
AsyncSession through the get_db dependency. SQLite URLs (tests, local
experiments) skip the pool sizing options the SQLite pool does not take.
"""

from typing import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from taskboard.config import settings


def _engine_options() -> dict:
    if settings.is_sqlite:
        return {"echo": settings.debug}
    # Connection pool: min 5, max 20 connections.
    return {"echo": settings.debug, "pool_size": 5, "max_overflow": 15, "pool_pre_ping": True}


engine = create_async_engine(settings.database_url, **_engine_options())

# Session factory — each request gets its own session.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency — yields a session per request, auto-closes."""
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
