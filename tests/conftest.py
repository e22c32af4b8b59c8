"""Shared fixtures: SQLite-backed song store and an in-memory Redis double."""

import asyncio
from datetime import date

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from music_library.schemas import SongBase
from music_library.stores.postgres import create_session_factory, create_tables, drop_tables
from music_library.stores.redis import SongCache
from music_library.stores.songs import SongStore


class FakeRedis:
    """Just enough of redis.asyncio.Redis for SongCache.

    ``fail_ops`` makes the named operations raise ConnectionError,
    ``hang_ops`` makes them sleep past any sane cache budget.
    """

    def __init__(self):
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_ops: set[str] = set()
        self.hang_ops: set[str] = set()

    async def _enter(self, op: str, key: str) -> None:
        self.calls.append((op, key))
        if op in self.hang_ops:
            await asyncio.sleep(5)
        if op in self.fail_ops:
            raise RedisConnectionError(f"{op} failed")

    async def get(self, key: str) -> str | None:
        await self._enter("get", key)
        return self.data.get(key)

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        await self._enter("setex", key)
        self.data[key] = value
        self.ttls[key] = ttl
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            await self._enter("delete", key)
            if self.data.pop(key, None) is not None:
                self.ttls.pop(key, None)
                removed += 1
        return removed

    async def ping(self) -> bool:
        await self._enter("ping", "")
        return True

    async def aclose(self) -> None:
        return None


def make_song(group_name: str = "Muse", song_name: str = "Supermassive Black Hole", **overrides) -> SongBase:
    fields = {
        "group_name": group_name,
        "song_name": song_name,
        "release_date": date(2006, 7, 16),
        "text": "Ooh baby, don't you know I suffer?\nOoh baby, can you hear me moan?\n\nOoh\nYou set my soul alight",
        "link": "https://www.youtube.com/watch?v=Xsp3_a-PMTw",
    }
    fields.update(overrides)
    return SongBase(**fields)


@pytest.fixture
async def engine():
    """In-memory SQLite engine with the songs table created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_tables(engine)
    yield engine
    await drop_tables(engine)
    await engine.dispose()


@pytest.fixture
def store(engine) -> SongStore:
    return SongStore(create_session_factory(engine), timeout=5.0)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def cache(fake_redis: FakeRedis) -> SongCache:
    return SongCache(fake_redis, ttl=600, timeout=0.05)


@pytest.fixture
def song_factory():
    """Build SongBase values; keyword overrides replace defaults."""
    return make_song
