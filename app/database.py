"""Async database engine and session management.

Uses SQLAlchemy 2.0 async with asyncpg driver.
The engine and session factory are created once in the app lifespan and
shared by every request through ``app.state``.
"""

import logging

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.config import settings

logger = logging.getLogger(__name__)


def create_engine(url: str | None = None, **kwargs) -> AsyncEngine:
    """Build the process-wide async engine."""
    url = url or settings.database_url
    if url.startswith("postgresql"):
        kwargs.setdefault("pool_size", settings.database_pool_size)
        kwargs.setdefault("max_overflow", settings.database_max_overflow)
    return create_async_engine(url, echo=False, pool_pre_ping=True, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_db(engine: AsyncEngine) -> bool:
    """Create tables if they don't exist. Returns True on success."""
    from app.models import Base  # noqa: F811

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database initialized successfully")
        return True
    except Exception as e:
        logger.warning("Database unavailable, listing requests will fail until it returns: %s", str(e)[:200])
        return False


async def ping_db(session_factory: async_sessionmaker[AsyncSession]) -> bool:
    """Run ``SELECT 1``. Used by the health endpoint."""
    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error("Database health check failed: %s", str(e)[:200])
        return False


async def close_db(engine: AsyncEngine):
    """Dispose engine connections on shutdown."""
    await engine.dispose()
    logger.info("Database connections closed")


def get_session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    """FastAPI dependency: the session factory built in the lifespan."""
    return request.app.state.session_factory
