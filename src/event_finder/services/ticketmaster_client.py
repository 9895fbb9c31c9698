"""Ticketmaster Discovery API pass-through for suggestions, search and details."""

from __future__ import annotations

import logging
import math
from typing import Any
from urllib.parse import quote

import httpx
import pygeohash

from event_finder.config import Settings
from event_finder.errors import UpstreamError, ValidationError
from event_finder.services.upstream import UpstreamClient

logger = logging.getLogger(__name__)

# Segment id the search form uses for "All"; Ticketmaster expects no filter instead
ALL_SEGMENTS_ID = "KZFzniwnSyZfZ7v7nE"
DEFAULT_RADIUS_MILES = 10
GEOHASH_PRECISION = 7


def _parse_coordinate(value: float | str | None, name: str, limit: float) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("Location is required")
    try:
        coordinate = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid {name}: {value!r}") from exc
    if not math.isfinite(coordinate) or not -limit <= coordinate <= limit:
        raise ValidationError(f"{name.capitalize()} out of range: {value!r}")
    return coordinate


class TicketmasterClient(UpstreamClient):
    service_name = "Ticketmaster"

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str = "https://app.ticketmaster.com/discovery/v2",
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(base_url, timeout=timeout, http_client=http_client)
        self._api_key = api_key

    @classmethod
    def from_settings(
        cls, settings: Settings, *, http_client: httpx.AsyncClient | None = None
    ) -> "TicketmasterClient":
        api_key = settings.ticketmaster_api_key
        return cls(
            api_key.get_secret_value() if api_key is not None else None,
            base_url=str(settings.ticketmaster_base_url),
            timeout=settings.upstream_timeout,
            http_client=http_client,
        )

    async def _keyed_get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        *,
        not_found: str | None = None,
    ) -> Any:
        if not self._api_key:
            raise UpstreamError("Ticketmaster API key is not configured")
        query = {"apikey": self._api_key}
        query.update(params or {})
        return await self._get_json(path, query, not_found=not_found)

    async def suggest(self, keyword: str) -> Any:
        """Autocomplete suggestions for a partial keyword."""
        if not keyword or not keyword.strip():
            raise ValidationError("Keyword is required")
        return await self._keyed_get("/suggest", {"keyword": keyword})

    async def search_events(
        self,
        keyword: str,
        lat: float | str | None,
        lng: float | str | None,
        *,
        radius: int | str | None = None,
        segment_id: str | None = None,
    ) -> Any:
        """Search events matching ``keyword`` within ``radius`` miles of a point.

        The point is sent as a 7-character geohash. Passing the "All" segment
        id, or no segment, searches every segment.
        """
        if not keyword or not keyword.strip():
            raise ValidationError("Keyword is required")

        latitude = _parse_coordinate(lat, "latitude", 90.0)
        longitude = _parse_coordinate(lng, "longitude", 180.0)
        geo_point = pygeohash.encode(latitude, longitude, precision=GEOHASH_PRECISION)

        params: dict[str, Any] = {
            "keyword": keyword,
            "geoPoint": geo_point,
            "radius": radius or DEFAULT_RADIUS_MILES,
            "unit": "miles",
        }
        if segment_id and segment_id != ALL_SEGMENTS_ID:
            params["segmentId"] = segment_id

        data = await self._keyed_get("/events.json", params)
        if isinstance(data, dict):
            events = (data.get("_embedded") or {}).get("events") or []
            logger.info("Event search for %r returned %d events", keyword, len(events))
        return data

    async def get_event(self, event_id: str) -> Any:
        if not event_id:
            raise ValidationError("Event ID is required")
        return await self._keyed_get(
            f"/events/{quote(event_id, safe='')}", not_found="Event not found"
        )


__all__ = ["ALL_SEGMENTS_ID", "TicketmasterClient"]
