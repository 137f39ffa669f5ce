"""Key-value session store contract."""

from abc import ABC, abstractmethod


class SessionStoreError(Exception):
    """Raised when the backing key-value store cannot complete an operation."""

    pass


class SessionStore(ABC):
    """Minimal TTL key-value contract used by the auth core.

    Every operation touches a single key and is atomic on the backend, so no
    multi-key transactions are needed. Implementations must behave
    identically; callers never check which backend they were given.
    """

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store value under key, expiring after ttl_seconds."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the live value for key, or None if absent or expired."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Return True if key holds a live value."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove key. Deleting a missing key is not an error."""

    @abstractmethod
    async def renew_ttl(self, key: str, ttl_seconds: int) -> bool:
        """Reset the expiry of a live key. Returns False if the key is gone."""

    async def close(self) -> None:
        """Release backend resources."""
        return None
