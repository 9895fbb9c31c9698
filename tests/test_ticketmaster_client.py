from __future__ import annotations

import httpx
import pytest

from event_finder.errors import NotFoundError, UpstreamError, ValidationError
from event_finder.services.ticketmaster_client import ALL_SEGMENTS_ID, TicketmasterClient

API_BASE = "https://tm.example.com/discovery/v2"


class RecordingHandler:
    def __init__(self, response: httpx.Response | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self.response = response or httpx.Response(200, json={"_embedded": {}})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response


def make_client(handler, api_key: str | None = "tm-key") -> TicketmasterClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TicketmasterClient(api_key, base_url=API_BASE, http_client=http_client)


@pytest.mark.asyncio
async def test_suggest_forwards_keyword_and_api_key():
    payload = {"_embedded": {"attractions": [{"name": "Lakers"}]}}
    handler = RecordingHandler(httpx.Response(200, json=payload))
    client = make_client(handler)

    assert await client.suggest("Lakers") == payload

    request = handler.requests[0]
    assert request.url.path == "/discovery/v2/suggest"
    assert request.url.params["apikey"] == "tm-key"
    assert request.url.params["keyword"] == "Lakers"


@pytest.mark.asyncio
async def test_search_events_encodes_location_as_geohash():
    handler = RecordingHandler()
    client = make_client(handler)

    await client.search_events("music", "34.0522", "-118.2437")

    params = handler.requests[0].url.params
    assert handler.requests[0].url.path == "/discovery/v2/events.json"
    assert params["keyword"] == "music"
    assert params["geoPoint"] == "9q5ctr1"
    assert params["radius"] == "10"
    assert params["unit"] == "miles"
    assert "segmentId" not in params


@pytest.mark.asyncio
async def test_search_events_forwards_specific_segment_only():
    handler = RecordingHandler()
    client = make_client(handler)

    await client.search_events("music", 34.05, -118.24, radius=25, segment_id="KZ-music")
    await client.search_events("music", 34.05, -118.24, segment_id=ALL_SEGMENTS_ID)

    first, second = (request.url.params for request in handler.requests)
    assert first["segmentId"] == "KZ-music"
    assert first["radius"] == "25"
    assert "segmentId" not in second


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("keyword", "lat", "lng"),
    [
        ("", 34.0, -118.0),
        ("music", None, -118.0),
        ("music", 34.0, ""),
        ("music", "north", -118.0),
        ("music", 95.0, -118.0),
        ("music", 34.0, "181"),
        ("music", "nan", -118.0),
    ],
)
async def test_search_events_validates_input(keyword, lat, lng):
    handler = RecordingHandler()
    client = make_client(handler)

    with pytest.raises(ValidationError):
        await client.search_events(keyword, lat, lng)
    assert handler.requests == []


@pytest.mark.asyncio
async def test_get_event_maps_404_to_not_found():
    client = make_client(RecordingHandler(httpx.Response(404, json={})))

    with pytest.raises(NotFoundError):
        await client.get_event("evt-missing")


@pytest.mark.asyncio
async def test_get_event_returns_payload_unchanged():
    payload = {"id": "evt-1", "name": "Concert A", "dates": {"start": {}}}
    client = make_client(RecordingHandler(httpx.Response(200, json=payload)))

    assert await client.get_event("evt-1") == payload


@pytest.mark.asyncio
async def test_missing_api_key_raises_upstream_error():
    handler = RecordingHandler()
    client = make_client(handler, api_key=None)

    with pytest.raises(UpstreamError, match="not configured"):
        await client.suggest("Lakers")
    assert handler.requests == []


@pytest.mark.asyncio
async def test_invalid_json_raises_upstream_error():
    client = make_client(RecordingHandler(httpx.Response(200, content=b"<html>")))

    with pytest.raises(UpstreamError, match="invalid JSON"):
        await client.suggest("Lakers")
