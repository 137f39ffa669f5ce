"""Tests for the session store backends."""

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.cache.base import SessionStoreError
from src.cache.memory import InMemorySessionStore
from src.cache.redis_store import RedisSessionStore


class Clock:
    def __init__(self):
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


class RecordingRedis:
    """Minimal async stand-in for redis.asyncio.Redis that records commands."""

    def __init__(self):
        self.calls: list[tuple] = []
        self.values: dict[str, str] = {}
        self.closed = False

    async def ping(self):
        self.calls.append(("PING",))
        return True

    async def set(self, key, value, ex=None):
        self.calls.append(("SET", key, value, ex))
        self.values[key] = value
        return True

    async def get(self, key):
        self.calls.append(("GET", key))
        return self.values.get(key)

    async def exists(self, key):
        self.calls.append(("EXISTS", key))
        return int(key in self.values)

    async def delete(self, key):
        self.calls.append(("DEL", key))
        return int(self.values.pop(key, None) is not None)

    async def expire(self, key, seconds):
        self.calls.append(("EXPIRE", key, seconds))
        return key in self.values

    async def aclose(self):
        self.closed = True


class UnreachableRedis:
    """Every command fails the way redis-py does when the server is down."""

    def __getattr__(self, name):
        async def _fail(*args, **kwargs):
            raise RedisConnectionError("Error 111 connecting to localhost:6379. Connection refused.")

        return _fail


class TestInMemorySessionStore:
    @pytest.fixture
    def clock(self) -> Clock:
        return Clock()

    @pytest.fixture
    def memory_store(self, clock) -> InMemorySessionStore:
        return InMemorySessionStore(clock=clock)

    async def test_set_get(self, memory_store):
        await memory_store.set("k", "v", 10)
        assert await memory_store.get("k") == "v"
        assert await memory_store.exists("k")

    async def test_missing_key(self, memory_store):
        assert await memory_store.get("nope") is None
        assert not await memory_store.exists("nope")

    async def test_value_expires(self, memory_store, clock):
        await memory_store.set("k", "v", 10)
        clock.now += 10
        assert await memory_store.get("k") is None
        assert len(memory_store) == 0

    async def test_set_overwrites_value_and_ttl(self, memory_store, clock):
        await memory_store.set("k", "old", 5)
        await memory_store.set("k", "new", 50)
        clock.now += 20
        assert await memory_store.get("k") == "new"

    async def test_renew_ttl(self, memory_store, clock):
        await memory_store.set("k", "v", 10)
        clock.now += 9
        assert await memory_store.renew_ttl("k", 10)
        clock.now += 9
        assert await memory_store.get("k") == "v"

    async def test_renew_ttl_on_expired_key(self, memory_store, clock):
        await memory_store.set("k", "v", 10)
        clock.now += 11
        assert not await memory_store.renew_ttl("k", 10)
        assert await memory_store.get("k") is None

    async def test_delete_is_idempotent(self, memory_store):
        await memory_store.set("k", "v", 10)
        await memory_store.delete("k")
        await memory_store.delete("k")
        assert not await memory_store.exists("k")

    @pytest.mark.parametrize("ttl", [0, -1])
    async def test_rejects_non_positive_ttl(self, memory_store, ttl):
        with pytest.raises(ValueError):
            await memory_store.set("k", "v", ttl)


class TestRedisSessionStore:
    async def test_commands(self):
        client = RecordingRedis()
        store = RedisSessionStore(client)

        await store.set("sess:abc", '{"sub": "1"}', 86400)
        assert await store.get("sess:abc") == '{"sub": "1"}'
        assert await store.exists("sess:abc")
        assert await store.renew_ttl("sess:abc", 86400)
        await store.delete("sess:abc")
        assert not await store.renew_ttl("sess:abc", 86400)

        assert client.calls == [
            ("SET", "sess:abc", '{"sub": "1"}', 86400),
            ("GET", "sess:abc"),
            ("EXISTS", "sess:abc"),
            ("EXPIRE", "sess:abc", 86400),
            ("DEL", "sess:abc"),
            ("EXPIRE", "sess:abc", 86400),
        ]

    async def test_close(self):
        client = RecordingRedis()
        await RedisSessionStore(client).close()
        assert client.closed

    async def test_rejects_non_positive_ttl(self):
        client = RecordingRedis()
        with pytest.raises(ValueError):
            await RedisSessionStore(client).set("bl:j", "1", 0)
        assert client.calls == []

    @pytest.mark.parametrize(
        ("method", "args"),
        [
            ("ping", ()),
            ("set", ("k", "v", 10)),
            ("get", ("k",)),
            ("exists", ("k",)),
            ("delete", ("k",)),
            ("renew_ttl", ("k", 10)),
        ],
    )
    async def test_errors_are_wrapped(self, method, args):
        store = RedisSessionStore(UnreachableRedis())
        with pytest.raises(SessionStoreError):
            await getattr(store, method)(*args)

    def test_from_url_builds_client_without_connecting(self):
        store = RedisSessionStore.from_url("redis://localhost:6399/2", socket_timeout=1.5)
        kwargs = store.client.connection_pool.connection_kwargs
        assert kwargs["db"] == 2
        assert kwargs["socket_timeout"] == 1.5
        assert kwargs["decode_responses"] is True
