"""Database dependencies."""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from src.database.client import get_session_factory


async def get_db_session() -> AsyncGenerator[AsyncSession]:
    """Per-request session.

    Handlers commit explicitly; anything left uncommitted when the handler
    raises is rolled back.
    """
    async with get_session_factory()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
