"""Session store lifecycle management."""

import logging

from src.config.settings import settings

from .base import SessionStore
from .memory import InMemorySessionStore
from .redis_store import RedisSessionStore

logger = logging.getLogger(__name__)

# Global session store
_store: SessionStore | None = None


def get_store() -> SessionStore:
    """Get the session store instance."""
    global _store
    if _store is None:
        raise RuntimeError("Session store not initialized. Call init_session_store() first.")
    return _store


async def init_session_store() -> None:
    """Create the configured session store and verify it is reachable."""
    global _store

    if settings.session_store_backend == "memory":
        logger.warning("Using in-process session store; sessions are not shared between workers")
        _store = InMemorySessionStore()
        return

    try:
        logger.info(f"Connecting to Redis at {settings.redis_url.split('@')[-1]}")
        store = RedisSessionStore.from_url(settings.redis_url, socket_timeout=settings.redis_socket_timeout)
        await store.ping()
        _store = store
        logger.info("Redis connection successful")
    except Exception as e:
        logger.error(f"Failed to initialize session store: {e}")
        raise


async def close_session_store() -> None:
    """Close the session store gracefully."""
    global _store

    if _store is not None:
        logger.info("Closing session store")
        await _store.close()
        _store = None
