"""Page normalization shared by song listing and lyrics pagination."""

from dataclasses import dataclass

DEFAULT_SONGS_PAGE_SIZE = 10
DEFAULT_LYRICS_PAGE_SIZE = 2

# OFFSET and LIMIT are bound as signed 64-bit integers by PostgreSQL and SQLite.
MAX_ROW_INDEX = 2**63 - 1


@dataclass(frozen=True)
class Page:
    """A 1-based page number and a page size, both positive."""

    number: int
    size: int

    @classmethod
    def of(cls, page: int | None, page_size: int | None, default_size: int) -> "Page":
        """Build a page, replacing absent or non-positive values with defaults.

        Oversized values are clamped so the offset still fits a BIGINT;
        such a page lies past the end of any catalog and comes back empty.
        """
        size = page_size if page_size is not None and page_size > 0 else default_size
        size = min(size, MAX_ROW_INDEX)
        number = page if page is not None and page > 0 else 1
        number = min(number, MAX_ROW_INDEX // size + 1)
        return cls(number=number, size=size)

    @property
    def offset(self) -> int:
        return (self.number - 1) * self.size
