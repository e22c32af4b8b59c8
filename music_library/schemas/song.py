"""Schemas for the song endpoints (/v1/songs) and cached song snapshots."""

from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator

# Enrichment API sends "16.07.2006"; ISO dates come from our own payloads.
RELEASE_DATE_FORMATS = ("%d.%m.%Y", "%Y-%m-%d")

# group_name, song_name and link are VARCHAR(255) columns.
VARCHAR_MAX_LENGTH = 255


def parse_release_date(value: object) -> object:
    """Parse a release date string in any supported format.

    Unparseable values are returned unchanged so pydantic reports them.
    """
    if isinstance(value, str):
        raw = value.strip()
        for fmt in RELEASE_DATE_FORMATS:
            try:
                return datetime.strptime(raw, fmt).date()
            except ValueError:
                continue
    return value


class SongBase(BaseModel):
    """Writable song fields."""

    group_name: str = Field(alias="groupName", max_length=VARCHAR_MAX_LENGTH)
    song_name: str = Field(alias="songName", max_length=VARCHAR_MAX_LENGTH)
    release_date: date = Field(alias="releaseDate")
    text: str = ""
    link: str = Field(default="", max_length=VARCHAR_MAX_LENGTH)

    model_config = {"populate_by_name": True}

    @field_validator("release_date", mode="before")
    @classmethod
    def _parse_release_date(cls, v: object) -> object:
        return parse_release_date(v)


class SongUpdate(SongBase):
    """Request body for PUT /v1/songs/{id} (full replacement)."""


class SongRead(SongBase):
    """A complete song snapshot.

    Returned by the API and stored (as JSON) in the song cache.
    """

    id: str


class SongCreate(BaseModel):
    """Request body for POST /v1/songs.

    Only the identifiers are accepted; the rest comes from the enrichment API.
    """

    group: str = Field(max_length=VARCHAR_MAX_LENGTH)
    song: str = Field(max_length=VARCHAR_MAX_LENGTH)


class SongDetail(BaseModel):
    """Song details returned by the enrichment API."""

    release_date: date = Field(alias="releaseDate")
    text: str = ""
    link: str = Field(default="", max_length=VARCHAR_MAX_LENGTH)

    model_config = {"populate_by_name": True}

    @field_validator("release_date", mode="before")
    @classmethod
    def _parse_release_date(cls, v: object) -> object:
        return parse_release_date(v)


class SongListResponse(BaseModel):
    """Response payload for GET /v1/songs."""

    songs: list[SongRead]
    page: int = Field(ge=1)
    page_size: int = Field(alias="pageSize", ge=1)

    model_config = {"populate_by_name": True}


class LyricsResponse(BaseModel):
    """Response payload for GET /v1/songs/{id}/lyrics."""

    song_id: str = Field(alias="songId")
    page: int = Field(ge=1)
    page_size: int = Field(alias="pageSize", ge=1)
    verses: list[str]

    model_config = {"populate_by_name": True}
