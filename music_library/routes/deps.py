"""FastAPI dependencies shared by routers."""

from fastapi import HTTPException, Request

from music_library.services.songs import SongService


def get_song_service(request: Request) -> SongService:
    """Get the song service built at startup (see main.lifespan)."""
    service = getattr(request.app.state, "song_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Song service not initialized")
    return service
