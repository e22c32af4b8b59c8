"""Pydantic schemas for API request/response validation."""

from music_library.schemas.common import ErrorDetail, ErrorResponse
from music_library.schemas.song import (
    LyricsResponse,
    SongBase,
    SongCreate,
    SongDetail,
    SongListResponse,
    SongRead,
    SongUpdate,
)

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "LyricsResponse",
    "SongBase",
    "SongCreate",
    "SongDetail",
    "SongListResponse",
    "SongRead",
    "SongUpdate",
]
