"""Error taxonomy for the song catalog.

Every error the core surfaces to the HTTP layer derives from ``SongError``
and carries the HTTP status and machine-readable code it maps to.
Cache failures are not errors: they are reported as ``CacheStatus.UNAVAILABLE``
and degrade to a Store read.
"""

from typing import Any


class SongError(Exception):
    """Base class for song catalog errors."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, *, detail: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class SongNotFoundError(SongError):
    """No song exists for the given ID."""

    status_code = 404
    code = "SONG_NOT_FOUND"

    def __init__(self, song_id: str):
        super().__init__(f"No song found with id {song_id}", detail={"id": song_id})
        self.song_id = song_id


class SongConflictError(SongError):
    """The (group, song) pair is already taken."""

    status_code = 409
    code = "SONG_CONFLICT"

    def __init__(self, group_name: str, song_name: str):
        super().__init__(
            f"Song '{song_name}' by '{group_name}' already exists",
            detail={"groupName": group_name, "songName": song_name},
        )


class InvalidSongError(SongError):
    """A required field is empty."""

    status_code = 400
    code = "INVALID_INPUT"


class StoreUnavailableError(SongError):
    """The database could not be reached or did not answer in time."""

    status_code = 503
    code = "STORE_UNAVAILABLE"


class EnrichmentUnavailableError(SongError):
    """The enrichment API failed while adding a song."""

    status_code = 502
    code = "ENRICHMENT_UNAVAILABLE"
