"""Database engine lifecycle.

One AsyncEngine and session factory per process, created in the app
lifespan. PostgreSQL (asyncpg) is the deployment target; a SQLite URL
(aiosqlite) is accepted for local development.
"""

import logging
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.config.settings import settings
from src.database.base import Base

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _engine_options(url: str) -> dict[str, Any]:
    if make_url(url).get_backend_name() == "sqlite":
        # In-memory SQLite lives in a single connection
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {
        "pool_size": settings.postgres_pool_size,
        "max_overflow": settings.postgres_max_overflow,
        "pool_timeout": settings.postgres_pool_timeout,
        "pool_recycle": settings.postgres_pool_recycle,
        "pool_pre_ping": True,
    }


def get_engine() -> AsyncEngine:
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _session_factory


async def init_db() -> None:
    """Create the engine, verify connectivity, and optionally create tables.

    Raises:
        sqlalchemy.exc.SQLAlchemyError: If the database is unreachable

    """
    global _engine, _session_factory

    url = settings.postgres_url
    logger.info(f"Connecting to database at {url.split('@')[-1]}")

    engine = create_async_engine(url, echo=settings.postgres_echo, **_engine_options(url))
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            if settings.postgres_create_schema:
                logger.info("Creating missing tables")
                await conn.run_sync(Base.metadata.create_all)
    except Exception:
        logger.exception("Failed to initialize database")
        await engine.dispose()
        raise

    _engine = engine
    _session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    logger.info("Database connection successful")


async def close_db() -> None:
    global _engine, _session_factory

    if _engine is not None:
        logger.info("Closing database connection")
        await _engine.dispose()
        _engine = None
        _session_factory = None
