"""
Async database engine and session factory.

Uses SQLAlchemy 2.x async engines with the aiosqlite (SQLite) or asyncpg
(PostgreSQL) driver. The engine and session factory are created once in the
application lifespan and stored on ``app.state``; request handlers receive
sessions through FastAPI dependency injection instead of module globals.

CHANGELOG:
- 2026-10-19: Move engine ownership to app.state, add create_schema()
- 2026-10-19: Initial creation
"""

import logging
from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from dayapi.db.models import Base

logger = logging.getLogger(__name__)


def create_engine(database_url: str) -> AsyncEngine:
    """Create an async SQLAlchemy engine.

    Args:
        database_url: Async SQLAlchemy URL.

    Returns:
        AsyncEngine: Configured async engine.
    """
    return create_async_engine(database_url, echo=False)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to ``engine``.

    Args:
        engine: The async engine sessions will use.

    Returns:
        async_sessionmaker: Factory for creating AsyncSession instances.
    """
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    """Create the DayData table and its indexes if they do not exist.

    ``create_all`` checks for existing objects first, so repeated calls
    are no-ops.

    Args:
        engine: The async engine to create the schema on.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Schema ensured on %s", engine.dialect.name)


async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session for FastAPI dependency injection.

    The session factory is read from ``request.app.state`` where the
    lifespan placed it. The session is closed after the request completes.

    Yields:
        AsyncSession: An async SQLAlchemy session.
    """
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        yield session
