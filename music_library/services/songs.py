"""Song retrieval and mutation service.

Read path (cache-aside):
1. Check Redis for the song snapshot -> return on hit
2. On miss, unavailable cache or undecodable payload, read PostgreSQL
3. Cache the result (best effort, 10 minute TTL) and return it
4. Not-found results are never cached

Write path:
- Update: invalidate, write to PostgreSQL, then write-through the new snapshot
- Delete: invalidate, delete from PostgreSQL, invalidate again
- Add: fetch details from the enrichment API, then insert

Listing, filtering and lyrics pagination go straight to PostgreSQL.

Store and cache handles are injected; this module holds no global state,
and concurrent requests share nothing but those handles.
"""

from collections.abc import Mapping
import logging
from typing import Protocol

from pydantic import ValidationError

from music_library.schemas import SongBase, SongDetail, SongRead
from music_library.services.errors import EnrichmentUnavailableError, InvalidSongError
from music_library.stores.redis import CacheStatus, SongCache
from music_library.stores.songs import SongStore

logger = logging.getLogger("uvicorn.error")


class SongDetailSource(Protocol):
    """Anything that can enrich a (group, song) pair; see EnrichmentClient."""

    async def fetch_song_detail(self, group: str, song: str) -> SongDetail: ...


def _require_names(group_name: str, song_name: str) -> tuple[str, str]:
    group_name = (group_name or "").strip()
    song_name = (song_name or "").strip()
    if not group_name or not song_name:
        raise InvalidSongError(
            "Group name and song name cannot be empty",
            detail={"groupName": group_name, "songName": song_name},
        )
    return group_name, song_name


class SongService:
    """Coordinates the song cache and the song store."""

    def __init__(
        self,
        store: SongStore,
        cache: SongCache,
        enrichment: SongDetailSource | None = None,
    ):
        self.store = store
        self.cache = cache
        self.enrichment = enrichment

    # ----------------------------------------------------------------
    # Reads
    # ----------------------------------------------------------------

    async def get_song(self, song_id: str) -> SongRead:
        """Get a song by ID, from cache when possible.

        Raises:
            SongNotFoundError: If no song has this ID.
            StoreUnavailableError: If the cache misses and the database is down.
        """
        cached = await self.cache.get(song_id)
        if cached.status is CacheStatus.HIT:
            try:
                song = SongRead.model_validate_json(cached.payload)
            except ValidationError:
                logger.warning(f"Discarding undecodable cache entry for song {song_id}")
            else:
                logger.info(f"Cache hit for song {song_id}")
                return song
        else:
            logger.info(f"Cache {cached.status.value} for song {song_id}, reading from database")

        song = await self.store.find_by_id(song_id)
        await self.cache.put(song_id, song.model_dump_json(by_alias=True))
        return song

    async def get_all_songs(self) -> list[SongRead]:
        """Get every song in the catalog."""
        return await self.store.find_all()

    async def get_songs_paginated(
        self,
        filters: Mapping[str, str] | None,
        page: int | None,
        page_size: int | None,
    ) -> list[SongRead]:
        """Get one page of songs matching the filters (not cached)."""
        return await self.store.find_filtered(filters, page, page_size)

    async def get_lyrics_paginated(self, song_id: str, page: int | None, page_size: int | None) -> list[str]:
        """Get one page of a song's verses (not cached).

        A missing song yields an empty list rather than SongNotFoundError.
        """
        return await self.store.find_lyrics_verses(song_id, page, page_size)

    # ----------------------------------------------------------------
    # Mutations
    # ----------------------------------------------------------------

    async def add_song(self, group: str, song: str) -> SongRead:
        """Add a song, enriching it from the details API first.

        Raises:
            InvalidSongError: If group or song is empty.
            EnrichmentUnavailableError: If the details API fails (nothing is written).
            SongConflictError: If the song already exists.
        """
        group, song = _require_names(group, song)
        if self.enrichment is None:
            raise EnrichmentUnavailableError("Enrichment API is not configured")

        detail = await self.enrichment.fetch_song_detail(group, song)
        created = await self.store.insert(
            SongBase(
                group_name=group,
                song_name=song,
                release_date=detail.release_date,
                text=detail.text,
                link=detail.link,
            )
        )
        return created

    async def update_song(self, song_id: str, song: SongBase) -> SongRead:
        """Replace a song and refresh its cache entry.

        Raises:
            InvalidSongError: If group or song name is empty.
            SongNotFoundError: If no song has this ID.
            SongConflictError: If the new (group, song) pair is taken.
        """
        group_name, song_name = _require_names(song.group_name, song.song_name)
        song = song.model_copy(update={"group_name": group_name, "song_name": song_name})

        await self.cache.invalidate(song_id)
        updated = await self.store.update(song_id, song)
        await self.cache.put(song_id, updated.model_dump_json(by_alias=True))
        return updated

    async def delete_song(self, song_id: str) -> None:
        """Delete a song and drop its cache entry.

        Raises:
            SongNotFoundError: If no song has this ID.
        """
        await self.cache.invalidate(song_id)
        await self.store.delete(song_id)
        # A read racing the delete may have repopulated the entry.
        await self.cache.invalidate(song_id)
