"""Lyrics segmentation.

Lyrics are stored as one text blob; a verse is a chunk separated from the
next one by a blank line. Verses are numbered from zero and paginated
like any other list.
"""

from music_library.services.pagination import Page

VERSE_SEPARATOR = "\n\n"


def split_verses(text: str) -> list[str]:
    """Split lyrics text into verses.

    Windows line endings are normalized first. Empty chunks (from
    leading/trailing separators or runs of blank lines) are dropped.
    """
    normalized = text.replace("\r\n", "\n")
    return [verse.strip("\n") for verse in normalized.split(VERSE_SEPARATOR) if verse.strip()]


def paginate_verses(text: str, page: Page) -> list[str]:
    """Return the verses in ``[page.offset, page.offset + page.size)``."""
    verses = split_verses(text)
    return verses[page.offset : page.offset + page.size]
