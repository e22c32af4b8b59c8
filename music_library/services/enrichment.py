"""Enrichment API client.

Given a group and a song name, the enrichment API returns the details we
store for a new song:

    GET {EXTERNAL_API_URL}?group=Muse&song=Supermassive%20Black%20Hole
    -> {"releaseDate": "16.07.2006", "text": "...", "link": "https://..."}

Any failure (not configured, transport error, timeout, non-200 status,
malformed body) is raised as ``EnrichmentUnavailableError`` so the add
operation aborts before touching the database. No retries.
"""

import logging

import httpx
from pydantic import ValidationError

from music_library.schemas import SongDetail
from music_library.services.errors import EnrichmentUnavailableError

logger = logging.getLogger("uvicorn.error")


class EnrichmentClient:
    """Client for the song details API."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize client.

        Args:
            base_url: Full URL of the details endpoint (empty = not configured).
            timeout: Request timeout in seconds.
            http_client: Optional pre-built client (tests inject a mock transport).
        """
        self.base_url = base_url
        self.timeout = timeout
        self._http_client = http_client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def fetch_song_detail(self, group: str, song: str) -> SongDetail:
        """Fetch release date, lyrics and link for a song.

        Raises:
            EnrichmentUnavailableError: On any upstream failure.
        """
        if not self.base_url:
            logger.error("EXTERNAL_API_URL is not set - cannot fetch song details")
            raise EnrichmentUnavailableError("Enrichment API is not configured")

        detail = {"group": group, "song": song}
        logger.info(f"Fetching song details: group={group!r} song={song!r}")

        client = await self._get_client()
        try:
            resp = await client.get(self.base_url, params={"group": group, "song": song})
        except httpx.HTTPError as e:
            logger.error(f"Enrichment API request failed: {type(e).__name__}: {e}")
            raise EnrichmentUnavailableError("Failed to fetch song details", detail=detail) from e

        if resp.status_code != 200:
            logger.error(f"Enrichment API error: {resp.status_code} - {resp.text[:200]}")
            raise EnrichmentUnavailableError(
                f"Enrichment API returned status {resp.status_code}",
                detail={**detail, "status": resp.status_code},
            )

        try:
            return SongDetail.model_validate_json(resp.content)
        except ValidationError as e:
            logger.error(f"Unexpected response from enrichment API: {e.error_count()} validation errors")
            raise EnrichmentUnavailableError("Malformed song details from enrichment API", detail=detail) from e
