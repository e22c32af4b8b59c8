"""Song catalog endpoints.

GET    /v1/songs               - filtered, paginated catalog (group, song, text)
GET    /v1/songs/all           - every song
POST   /v1/songs               - add a song (details come from the enrichment API)
GET    /v1/songs/{id}          - one song (cache-aside)
PUT    /v1/songs/{id}          - replace a song
DELETE /v1/songs/{id}          - delete a song
GET    /v1/songs/{id}/lyrics   - paginated verses

Routers are thin: call services for business logic. Errors raised by the
service are rendered by the SongError handler in main.
"""

from fastapi import APIRouter, Depends, Path, Query, Response

from music_library.routes.deps import get_song_service
from music_library.schemas import LyricsResponse, SongCreate, SongListResponse, SongRead, SongUpdate
from music_library.services.pagination import DEFAULT_LYRICS_PAGE_SIZE, DEFAULT_SONGS_PAGE_SIZE, Page
from music_library.services.songs import SongService

router = APIRouter()

SONG_ID_PATH = Path(description="Song ID", min_length=1, max_length=255)


def _as_int(value: str | None) -> int | None:
    """Lenient integer query param: garbage falls back to the default."""
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None


@router.get("", response_model=SongListResponse)
async def list_songs(
    group: str | None = Query(default=None, description="Group name contains (case-insensitive)"),
    song: str | None = Query(default=None, description="Song name contains (case-insensitive)"),
    text: str | None = Query(default=None, description="Full-text match against lyrics"),
    page: str | None = Query(default=None, description="1-based page number"),
    page_size: str | None = Query(default=None, alias="pageSize", description="Songs per page"),
    service: SongService = Depends(get_song_service),
) -> SongListResponse:
    """Get one page of songs, newest release first."""
    filters = {key: value for key, value in (("group", group), ("song", song), ("text", text)) if value}
    window = Page.of(_as_int(page), _as_int(page_size), DEFAULT_SONGS_PAGE_SIZE)

    songs = await service.get_songs_paginated(filters, window.number, window.size)
    return SongListResponse(songs=songs, page=window.number, page_size=window.size)


@router.get("/all", response_model=list[SongRead])
async def list_all_songs(service: SongService = Depends(get_song_service)) -> list[SongRead]:
    """Get every song in the catalog."""
    return await service.get_all_songs()


@router.post("", response_model=SongRead, status_code=201)
async def add_song(request: SongCreate, service: SongService = Depends(get_song_service)) -> SongRead:
    """Add a song by group and name; release date, lyrics and link are fetched."""
    return await service.add_song(request.group, request.song)


@router.get("/{song_id}", response_model=SongRead)
async def get_song(
    song_id: str = SONG_ID_PATH,
    service: SongService = Depends(get_song_service),
) -> SongRead:
    """Get a song by ID."""
    return await service.get_song(song_id)


@router.put("/{song_id}", response_model=SongRead)
async def update_song(
    request: SongUpdate,
    song_id: str = SONG_ID_PATH,
    service: SongService = Depends(get_song_service),
) -> SongRead:
    """Replace every field of a song."""
    return await service.update_song(song_id, request)


@router.delete("/{song_id}", status_code=204)
async def delete_song(
    song_id: str = SONG_ID_PATH,
    service: SongService = Depends(get_song_service),
) -> Response:
    """Delete a song."""
    await service.delete_song(song_id)
    return Response(status_code=204)


@router.get("/{song_id}/lyrics", response_model=LyricsResponse)
async def get_lyrics(
    song_id: str = SONG_ID_PATH,
    page: str | None = Query(default=None, description="1-based page number"),
    page_size: str | None = Query(default=None, alias="pageSize", description="Verses per page"),
    service: SongService = Depends(get_song_service),
) -> LyricsResponse:
    """Get one page of a song's verses.

    An unknown song ID returns an empty verse list, not 404.
    """
    window = Page.of(_as_int(page), _as_int(page_size), DEFAULT_LYRICS_PAGE_SIZE)
    verses = await service.get_lyrics_paginated(song_id, window.number, window.size)
    return LyricsResponse(song_id=song_id, page=window.number, page_size=window.size, verses=verses)
