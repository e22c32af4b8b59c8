"""API routes."""

from fastapi import APIRouter

from music_library.routes import songs

api_router = APIRouter()

# Song catalog
api_router.include_router(songs.router, prefix="/v1/songs", tags=["songs"])
