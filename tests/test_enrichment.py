from datetime import date

import httpx
import pytest

from music_library.services.enrichment import EnrichmentClient
from music_library.services.errors import EnrichmentUnavailableError

API_URL = "http://details.test/info"


def _client(handler) -> EnrichmentClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return EnrichmentClient(API_URL, http_client=http_client)


@pytest.mark.asyncio
async def test_fetch_song_detail_ok():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "releaseDate": "16.07.2006",
                "text": "Ooh baby, don't you know I suffer?\n\nOoh\nYou set my soul alight",
                "link": "https://www.youtube.com/watch?v=Xsp3_a-PMTw",
            },
        )

    client = _client(handler)
    detail = await client.fetch_song_detail("Muse", "Supermassive Black Hole")
    await client.close()

    assert detail.release_date == date(2006, 7, 16)
    assert detail.link.endswith("Xsp3_a-PMTw")
    assert seen[0].url.params["group"] == "Muse"
    assert seen[0].url.params["song"] == "Supermassive Black Hole"


@pytest.mark.asyncio
async def test_fetch_song_detail_accepts_iso_dates():
    client = _client(lambda request: httpx.Response(200, json={"releaseDate": "2006-07-16"}))
    detail = await client.fetch_song_detail("Muse", "Supermassive Black Hole")
    assert detail.release_date == date(2006, 7, 16)
    assert detail.text == ""


@pytest.mark.asyncio
async def test_non_200_is_unavailable():
    client = _client(lambda request: httpx.Response(500, text="upstream exploded"))
    with pytest.raises(EnrichmentUnavailableError) as exc_info:
        await client.fetch_song_detail("Muse", "Uprising")
    assert exc_info.value.detail["status"] == 500
    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_transport_error_is_unavailable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(EnrichmentUnavailableError):
        await _client(handler).fetch_song_detail("Muse", "Uprising")


@pytest.mark.asyncio
async def test_malformed_body_is_unavailable():
    with pytest.raises(EnrichmentUnavailableError):
        await _client(lambda request: httpx.Response(200, json={"text": "no date"})).fetch_song_detail("Muse", "Uprising")

    with pytest.raises(EnrichmentUnavailableError):
        await _client(lambda request: httpx.Response(200, text="<html>")).fetch_song_detail("Muse", "Uprising")


@pytest.mark.asyncio
async def test_unconfigured_url_is_unavailable():
    client = EnrichmentClient("")
    with pytest.raises(EnrichmentUnavailableError):
        await client.fetch_song_detail("Muse", "Uprising")


@pytest.mark.asyncio
async def test_overlong_link_is_unavailable():
    body = {"releaseDate": "16.07.2006", "link": "https://example.com/" + "x" * 300}
    with pytest.raises(EnrichmentUnavailableError):
        await _client(lambda request: httpx.Response(200, json=body)).fetch_song_detail("Muse", "Uprising")
