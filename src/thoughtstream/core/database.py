"""
Database Configuration

Async SQLAlchemy 2.0 setup with session management.
Defaults to an embedded SQLite file through aiosqlite; any async
driver URL (e.g. postgresql+asyncpg) can be supplied via DATABASE_URL.
"""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from thoughtstream.core.config import settings
from thoughtstream.models.base import Base

logger = logging.getLogger(__name__)


def enable_sqlite_foreign_keys(async_engine: AsyncEngine) -> None:
    """Turn on FK enforcement (and ON DELETE CASCADE) for every SQLite connection."""

    @event.listens_for(async_engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ANN001
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_async_engine(settings.DATABASE_URL, echo=False)
if settings.is_sqlite:
    enable_sqlite_foreign_keys(engine)

# expire_on_commit=False: prevents implicit I/O after commit when accessing attributes
AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    Yields:
        AsyncSession: Scoped to the request lifecycle. Automatically closed
        after the request completes (including on exceptions).
    """
    async with AsyncSessionLocal() as session:
        yield session


async def init_db(target: AsyncEngine | None = None) -> None:
    """Create all tables that do not exist yet."""
    target = target or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ready (%s)", target.url.render_as_string(hide_password=True))


async def dispose_engine() -> None:
    """Dispose the engine at application shutdown."""
    await engine.dispose()
    logger.info("Database engine disposed")


__all__ = [
    "Base",
    "engine",
    "AsyncSessionLocal",
    "get_db",
    "init_db",
    "dispose_engine",
    "enable_sqlite_foreign_keys",
]
