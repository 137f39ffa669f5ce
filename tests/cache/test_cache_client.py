"""Tests for session store lifecycle."""

import pytest

from src.cache import client as cache_client
from src.cache.memory import InMemorySessionStore


async def test_memory_backend_lifecycle():
    await cache_client.init_session_store()
    try:
        assert isinstance(cache_client.get_store(), InMemorySessionStore)
    finally:
        await cache_client.close_session_store()

    with pytest.raises(RuntimeError, match="not initialized"):
        cache_client.get_store()


async def test_close_without_init_is_noop():
    await cache_client.close_session_store()
