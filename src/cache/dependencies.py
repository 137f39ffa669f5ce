"""Session store dependencies."""

from src.cache.base import SessionStore
from src.cache.client import get_store


async def get_session_store() -> SessionStore:
    """Provide the process-wide session store to route handlers."""
    return get_store()
