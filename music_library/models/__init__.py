"""SQLAlchemy ORM models.

Models represent database tables:
- songs: Song catalog (metadata + lyrics)
"""

from music_library.models.song import Song

__all__ = ["Song"]
