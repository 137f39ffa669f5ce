"""Redis-backed session store."""

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from .base import SessionStore, SessionStoreError


class RedisSessionStore(SessionStore):
    """Thin redis.asyncio wrapper implementing the session store contract.

    Each method maps to one Redis command (SET EX, GET, EXISTS, DEL, EXPIRE).
    Connection and command failures are raised as SessionStoreError so the
    auth layer never depends on redis exception types.
    """

    def __init__(self, client: aioredis.Redis):
        self.client = client

    @classmethod
    def from_url(cls, redis_url: str, *, socket_timeout: float = 5.0) -> "RedisSessionStore":
        client = aioredis.from_url(
            redis_url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        return cls(client)

    async def ping(self) -> None:
        """Verify connectivity before serving requests."""
        try:
            await self.client.ping()
        except RedisError as exc:
            raise SessionStoreError(f"Redis ping failed: {exc}") from exc

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        try:
            await self.client.set(key, value, ex=ttl_seconds)
        except RedisError as exc:
            raise SessionStoreError(f"Redis SET failed: {exc}") from exc

    async def get(self, key: str) -> str | None:
        try:
            return await self.client.get(key)
        except RedisError as exc:
            raise SessionStoreError(f"Redis GET failed: {exc}") from exc

    async def exists(self, key: str) -> bool:
        try:
            return bool(await self.client.exists(key))
        except RedisError as exc:
            raise SessionStoreError(f"Redis EXISTS failed: {exc}") from exc

    async def delete(self, key: str) -> None:
        try:
            await self.client.delete(key)
        except RedisError as exc:
            raise SessionStoreError(f"Redis DEL failed: {exc}") from exc

    async def renew_ttl(self, key: str, ttl_seconds: int) -> bool:
        try:
            return bool(await self.client.expire(key, ttl_seconds))
        except RedisError as exc:
            raise SessionStoreError(f"Redis EXPIRE failed: {exc}") from exc

    async def close(self) -> None:
        await self.client.aclose()
