"""Redis store for the song cache.

Handles:
- Redis client lifecycle
- Cache-aside storage of serialized song snapshots with TTL

TTL policies:
- Song by ID: 10 minutes

The cache is optional. Every operation runs under a small time budget,
and a failure or timeout is reported as ``CacheStatus.UNAVAILABLE`` (reads)
or ``False`` (writes) instead of raising. Callers fall back to the database.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
import logging

import redis.asyncio as redis
from redis.exceptions import RedisError

from music_library.settings import Settings

# TTL constants (in seconds)
TTL_SONG = 600  # 10 minutes

# Key prefixes
PREFIX_SONG = "song:"

logger = logging.getLogger("uvicorn.error")

_CACHE_ERRORS = (RedisError, OSError, asyncio.TimeoutError)


async def init_redis(settings: Settings) -> redis.Redis | None:
    """Create the Redis client, or None when caching is disabled.

    Connectivity is checked once; the client is returned even if the
    check fails so the cache recovers when Redis comes back.
    """
    if not settings.redis_url:
        logger.info("Redis URL not configured, song cache disabled")
        return None

    client = redis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=settings.cache_timeout_seconds,
        socket_timeout=settings.cache_timeout_seconds,
    )
    try:
        await client.ping()
        logger.info("Redis connected")
    except _CACHE_ERRORS:
        logger.exception("Redis ping failed, song cache degraded until Redis is reachable")
    return client


async def close_redis(client: redis.Redis | None) -> None:
    """Close Redis connection."""
    if client is not None:
        await client.aclose()


async def ping_redis(client: redis.Redis | None) -> bool:
    """Check Redis connectivity without raising."""
    if client is None:
        return False
    try:
        return bool(await client.ping())
    except _CACHE_ERRORS:
        return False


# ============================================================
# Song cache
# ============================================================


class CacheStatus(str, Enum):
    HIT = "hit"
    MISS = "miss"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class CacheLookup:
    """Result of a cache read; ``payload`` is set only on HIT."""

    status: CacheStatus
    payload: str | None = None


class SongCache:
    """Serialized song snapshots keyed by song ID."""

    def __init__(
        self,
        client: redis.Redis | None,
        *,
        ttl: int = TTL_SONG,
        timeout: float | None = 0.5,
    ):
        """Initialize cache.

        Args:
            client: Redis client, or None to run without a cache.
            ttl: Entry time-to-live in seconds.
            timeout: Budget in seconds for each Redis call.
        """
        self._client = client
        self.ttl = ttl
        self._timeout = timeout

    @staticmethod
    def key(song_id: str) -> str:
        return f"{PREFIX_SONG}{song_id}"

    async def get(self, song_id: str) -> CacheLookup:
        """Get the cached snapshot for a song."""
        if self._client is None:
            return CacheLookup(CacheStatus.UNAVAILABLE)
        try:
            value = await asyncio.wait_for(self._client.get(self.key(song_id)), timeout=self._timeout)
        except _CACHE_ERRORS as e:
            logger.warning(f"Song cache get failed: id={song_id} error={type(e).__name__}: {e}")
            return CacheLookup(CacheStatus.UNAVAILABLE)

        if value is None:
            return CacheLookup(CacheStatus.MISS)
        return CacheLookup(CacheStatus.HIT, value)

    async def put(self, song_id: str, payload: str, ttl: int | None = None) -> bool:
        """Store a snapshot with TTL. Returns False if the write failed."""
        if self._client is None:
            return False
        try:
            await asyncio.wait_for(
                self._client.setex(self.key(song_id), ttl or self.ttl, payload),
                timeout=self._timeout,
            )
        except _CACHE_ERRORS as e:
            logger.warning(f"Song cache put failed: id={song_id} error={type(e).__name__}: {e}")
            return False
        return True

    async def invalidate(self, song_id: str) -> bool:
        """Remove a snapshot. Returns False if the delete failed."""
        if self._client is None:
            return False
        try:
            await asyncio.wait_for(self._client.delete(self.key(song_id)), timeout=self._timeout)
        except _CACHE_ERRORS as e:
            logger.warning(f"Song cache invalidate failed: id={song_id} error={type(e).__name__}: {e}")
            return False
        return True
