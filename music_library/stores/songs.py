"""Song repository on top of async SQLAlchemy.

Handles:
- Single-song lookups and mutations
- Filtered, paginated catalog queries
- Verse-level pagination of one song's lyrics

Filters are a closed set of predicate builders keyed by filter name.
Each builder returns a parameterized SQLAlchemy expression, so user
values are always bound, never rendered into the SQL text. Unknown
filter keys are ignored.

Database errors are translated into the song error taxonomy:
- Uniqueness violations -> ``SongConflictError``
- Values a column rejects (too long, out of range) -> ``InvalidSongError``
- Transport failures and deadline expiry -> ``StoreUnavailableError``
"""

import asyncio
from collections.abc import Awaitable, Callable, Mapping
import logging
from typing import TypeVar

from sqlalchemy import ColumnElement, Select, delete, func, select, update
from sqlalchemy.exc import DataError, IntegrityError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from music_library.models import Song
from music_library.schemas import SongBase, SongRead
from music_library.services.errors import InvalidSongError, SongConflictError, SongNotFoundError, StoreUnavailableError
from music_library.services.lyrics import paginate_verses
from music_library.services.pagination import DEFAULT_LYRICS_PAGE_SIZE, DEFAULT_SONGS_PAGE_SIZE, Page
from music_library.stores.postgres import session_scope

logger = logging.getLogger("uvicorn.error")

T = TypeVar("T")

_UNAVAILABLE_ERRORS = (OperationalError, InterfaceError, PoolTimeoutError, OSError, asyncio.TimeoutError)


# ============================================================
# Filter predicates
# ============================================================


LIKE_ESCAPE = "/"


def contains_pattern(value: str) -> str:
    """LIKE pattern matching `value` anywhere, with wildcards in it escaped."""
    escaped = (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )
    return f"%{escaped}%"


def _group_contains(value: str) -> ColumnElement[bool]:
    return Song.group_name.ilike(contains_pattern(value), escape=LIKE_ESCAPE)


def _song_contains(value: str) -> ColumnElement[bool]:
    return Song.song_name.ilike(contains_pattern(value), escape=LIKE_ESCAPE)


def _text_matches(value: str) -> ColumnElement[bool]:
    # PostgreSQL full-text search with the database's default configuration.
    return func.to_tsvector(Song.text).bool_op("@@")(func.plainto_tsquery(value))


# Application order is fixed by this mapping, not by the caller's dict.
FILTER_PREDICATES: dict[str, Callable[[str], ColumnElement[bool]]] = {
    "group": _group_contains,
    "song": _song_contains,
    "text": _text_matches,
}


def build_filter_predicates(filters: Mapping[str, str] | None) -> list[ColumnElement[bool]]:
    """Build one predicate per active, recognized filter key."""
    if not filters:
        return []

    predicates: list[ColumnElement[bool]] = []
    for key, builder in FILTER_PREDICATES.items():
        value = (filters.get(key) or "").strip()
        if value:
            predicates.append(builder(value))
    return predicates


def build_filtered_query(
    filters: Mapping[str, str] | None,
    page: int | None,
    page_size: int | None,
) -> Select[tuple[Song]]:
    """Build the catalog query: AND of active filters, newest release first."""
    window = Page.of(page, page_size, DEFAULT_SONGS_PAGE_SIZE)
    return (
        select(Song)
        .where(*build_filter_predicates(filters))
        .order_by(Song.release_date.desc(), Song.id.asc())
        .offset(window.offset)
        .limit(window.size)
    )


def _to_song(row: Song) -> SongRead:
    return SongRead(
        id=row.id,
        group_name=row.group_name,
        song_name=row.song_name,
        release_date=row.release_date,
        text=row.text,
        link=row.link,
    )


# ============================================================
# Repository
# ============================================================


class SongStore:
    """Durable record keeper for songs."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        timeout: float | None = None,
    ):
        """Initialize store.

        Args:
            session_factory: Session factory bound to the songs database.
            timeout: Deadline in seconds for each operation (None = no deadline).
        """
        self._session_factory = session_factory
        self._timeout = timeout

    async def _run(self, operation: str, call: Callable[[], Awaitable[T]], **context: object) -> T:
        """Run ``call`` under the store deadline and translate database errors."""
        try:
            return await asyncio.wait_for(call(), timeout=self._timeout)
        except IntegrityError as e:
            group_name = str(context.get("group_name", ""))
            song_name = str(context.get("song_name", ""))
            logger.warning(f"Song {operation} rejected, duplicate: group={group_name!r} song={song_name!r}")
            raise SongConflictError(group_name, song_name) from e
        except DataError as e:
            logger.warning(f"Song {operation} rejected by the database: {e.orig}")
            raise InvalidSongError(
                f"Song {operation} rejected: value out of range for its column",
                detail={"operation": operation},
            ) from e
        except _UNAVAILABLE_ERRORS as e:
            logger.error(f"Song store unavailable during {operation}: {type(e).__name__}: {e} {context}")
            raise StoreUnavailableError(
                f"Song store unavailable during {operation}",
                detail={"operation": operation},
            ) from e

    # ----------------------------------------------------------------
    # Reads
    # ----------------------------------------------------------------

    async def find_by_id(self, song_id: str) -> SongRead:
        """Get a song by ID.

        Raises:
            SongNotFoundError: If no song has this ID.
        """

        async def call() -> SongRead:
            async with session_scope(self._session_factory) as session:
                result = await session.execute(select(Song).where(Song.id == song_id))
                row = result.scalar_one_or_none()
                if row is None:
                    logger.warning(f"No song found: id={song_id}")
                    raise SongNotFoundError(song_id)
                return _to_song(row)

        return await self._run("find_by_id", call, id=song_id)

    async def find_all(self) -> list[SongRead]:
        """Get every song, oldest insert first."""

        async def call() -> list[SongRead]:
            async with session_scope(self._session_factory) as session:
                result = await session.execute(select(Song).order_by(Song.created_at.asc(), Song.id.asc()))
                return [_to_song(row) for row in result.scalars().all()]

        songs = await self._run("find_all", call)
        logger.info(f"Retrieved all songs: count={len(songs)}")
        return songs

    async def find_filtered(
        self,
        filters: Mapping[str, str] | None,
        page: int | None,
        page_size: int | None,
    ) -> list[SongRead]:
        """Get one page of songs matching all active filters.

        Args:
            filters: Filter name -> value; recognized keys are "group",
                "song" (case-insensitive substring) and "text" (full-text).
            page: 1-based page number (defaults to 1).
            page_size: Songs per page (defaults to 10).

        Returns:
            Songs ordered by release date, newest first.
        """
        query = build_filtered_query(filters, page, page_size)

        async def call() -> list[SongRead]:
            async with session_scope(self._session_factory) as session:
                result = await session.execute(query)
                return [_to_song(row) for row in result.scalars().all()]

        return await self._run("find_filtered", call, filters=dict(filters or {}))

    async def find_lyrics_verses(self, song_id: str, page: int | None, page_size: int | None) -> list[str]:
        """Get one page of a song's verses.

        A missing song yields an empty list, same as a page past the last verse.
        """
        window = Page.of(page, page_size, DEFAULT_LYRICS_PAGE_SIZE)

        async def call() -> str | None:
            async with session_scope(self._session_factory) as session:
                result = await session.execute(select(Song.text).where(Song.id == song_id))
                return result.scalar_one_or_none()

        text = await self._run("find_lyrics_verses", call, id=song_id)
        if text is None:
            return []
        return paginate_verses(text, window)

    # ----------------------------------------------------------------
    # Mutations
    # ----------------------------------------------------------------

    async def insert(self, song: SongBase) -> SongRead:
        """Insert a new song and return it with its generated ID.

        Raises:
            SongConflictError: If the (group, song) pair already exists.
        """

        async def call() -> SongRead:
            async with session_scope(self._session_factory) as session:
                row = Song(
                    group_name=song.group_name,
                    song_name=song.song_name,
                    release_date=song.release_date,
                    text=song.text,
                    link=song.link,
                )
                session.add(row)
                await session.flush()
                return _to_song(row)

        created = await self._run("insert", call, group_name=song.group_name, song_name=song.song_name)
        logger.info(f"Song added: id={created.id} group={created.group_name!r} song={created.song_name!r}")
        return created

    async def update(self, song_id: str, song: SongBase) -> SongRead:
        """Replace all fields of an existing song.

        Raises:
            SongNotFoundError: If no song has this ID.
            SongConflictError: If the new (group, song) pair belongs to another song.
        """
        statement = (
            update(Song)
            .where(Song.id == song_id)
            .values(
                group_name=song.group_name,
                song_name=song.song_name,
                release_date=song.release_date,
                text=song.text,
                link=song.link,
            )
        )

        async def call() -> int:
            async with session_scope(self._session_factory) as session:
                result = await session.execute(statement)
                return result.rowcount

        affected = await self._run("update", call, id=song_id, group_name=song.group_name, song_name=song.song_name)
        if affected == 0:
            logger.warning(f"No rows affected by update: id={song_id}")
            raise SongNotFoundError(song_id)

        logger.info(f"Song updated: id={song_id}")
        return SongRead(id=song_id, **song.model_dump(include=set(SongBase.model_fields)))

    async def delete(self, song_id: str) -> None:
        """Delete a song.

        Raises:
            SongNotFoundError: If no song has this ID.
        """

        async def call() -> int:
            async with session_scope(self._session_factory) as session:
                result = await session.execute(delete(Song).where(Song.id == song_id))
                return result.rowcount

        affected = await self._run("delete", call, id=song_id)
        if affected == 0:
            logger.warning(f"No rows affected by delete: id={song_id}")
            raise SongNotFoundError(song_id)

        logger.info(f"Song deleted: id={song_id}")
