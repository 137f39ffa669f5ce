"""In-process session store for tests and local development."""

import time
from collections.abc import Callable

from .base import SessionStore


class InMemorySessionStore(SessionStore):
    """Dict-backed store with the same TTL semantics as the Redis adapter.

    Expiry is evaluated lazily against a monotonic clock on every access,
    mirroring how an expired Redis key simply stops being visible.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: dict[str, tuple[str, float]] = {}

    def _live(self, key: str) -> str | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= self._clock():
            del self._data[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._data[key] = (value, self._clock() + ttl_seconds)

    async def get(self, key: str) -> str | None:
        return self._live(key)

    async def exists(self, key: str) -> bool:
        return self._live(key) is not None

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def renew_ttl(self, key: str, ttl_seconds: int) -> bool:
        value = self._live(key)
        if value is None:
            return False
        self._data[key] = (value, self._clock() + ttl_seconds)
        return True

    async def close(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return sum(1 for key in list(self._data) if self._live(key) is not None)
