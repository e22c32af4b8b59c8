"""Song model.

A song record: catalog metadata plus the full lyrics text.
The (group_name, song_name) pair is unique across the catalog.
"""

from datetime import date, datetime
from uuid import uuid4

from sqlalchemy import Date, DateTime, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from music_library.stores.postgres import Base


def generate_song_id() -> str:
    """Generate unique song ID."""
    return str(uuid4())


class Song(Base):
    """Song with metadata and lyrics."""

    __tablename__ = "songs"
    __table_args__ = (UniqueConstraint("group_name", "song_name", name="unique_song"),)

    # Opaque public ID (used in URLs and cache keys)
    id: Mapped[str] = mapped_column(String(255), primary_key=True, default=generate_song_id)

    group_name: Mapped[str] = mapped_column(String(255), index=True)
    song_name: Mapped[str] = mapped_column(String(255))
    release_date: Mapped[date] = mapped_column(Date)

    # Verses separated by blank lines
    text: Mapped[str] = mapped_column(Text)
    link: Mapped[str] = mapped_column(String(255))

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Song {self.group_name} - {self.song_name}>"
