#!/usr/bin/env python3
"""Seed database with sample songs.

Inserts a handful of songs through SongStore so local development has
something to page through. Idempotent: songs that already exist are skipped.

Usage:
    alembic upgrade head
    python -m scripts.seed
"""

import asyncio
import os
import sys
from datetime import date

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

from music_library.schemas import SongBase
from music_library.services.errors import SongConflictError
from music_library.settings import Settings
from music_library.stores.postgres import create_engine, create_session_factory
from music_library.stores.songs import SongStore

load_dotenv()

SONGS = [
    {
        "group_name": "Muse",
        "song_name": "Supermassive Black Hole",
        "release_date": date(2006, 7, 16),
        "text": (
            "Ooh baby, don't you know I suffer?\n"
            "Ooh baby, can you hear me moan?\n"
            "You caught me under false pretenses\n"
            "How long before you let me go?\n\n"
            "Ooh\nYou set my soul alight\n"
            "Ooh\nYou set my soul alight"
        ),
        "link": "https://www.youtube.com/watch?v=Xsp3_a-PMTw",
    },
    {
        "group_name": "Muse",
        "song_name": "Uprising",
        "release_date": date(2009, 9, 7),
        "text": (
            "Paranoia is in bloom\n"
            "The PR transmissions will resume\n\n"
            "They will not force us\n"
            "They will stop degrading us\n\n"
            "We will be victorious"
        ),
        "link": "https://www.youtube.com/watch?v=w8KQmps-Sog",
    },
    {
        "group_name": "Radiohead",
        "song_name": "Karma Police",
        "release_date": date(1997, 8, 25),
        "text": (
            "Karma police, arrest this man\n"
            "He talks in maths\n\n"
            "This is what you'll get\n"
            "When you mess with us"
        ),
        "link": "https://www.youtube.com/watch?v=1uYWYWPc9HU",
    },
]


async def seed_database() -> None:
    """Insert sample songs, skipping existing ones."""
    settings = Settings()
    engine = create_engine(settings)
    store = SongStore(create_session_factory(engine), timeout=settings.store_timeout_seconds)

    try:
        for song_def in SONGS:
            label = f"{song_def['group_name']} - {song_def['song_name']}"
            try:
                created = await store.insert(SongBase(**song_def))
            except SongConflictError:
                print(f"  skip  {label} (exists)")
                continue
            print(f"  added {label} ({created.id})")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed_database())
