"""Spotify Web API lookups for artist details shown next to events."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from event_finder.config import Settings
from event_finder.errors import NotFoundError, UpstreamError, ValidationError
from event_finder.services.spotify_auth import SpotifyTokenCache, get_token_cache
from event_finder.services.upstream import UpstreamClient

logger = logging.getLogger(__name__)

ALBUM_MARKET = "US"
ALBUM_LIMIT = 8


class SpotifyClient(UpstreamClient):
    """Artist search, details and albums, authorized with the shared app token."""

    service_name = "Spotify"

    def __init__(
        self,
        token_cache: SpotifyTokenCache,
        *,
        base_url: str = "https://api.spotify.com/v1",
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(base_url, timeout=timeout, http_client=http_client)
        self._token_cache = token_cache

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        token_cache: SpotifyTokenCache | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> "SpotifyClient":
        return cls(
            token_cache or get_token_cache(),
            base_url=str(settings.spotify_api_base_url),
            timeout=settings.upstream_timeout,
            http_client=http_client,
        )

    async def _authorized_get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        *,
        not_found: str | None = None,
    ) -> Any:
        # AuthError from the token cache propagates as the failure of this call
        token = await self._token_cache.get_token()
        return await self._get_json(
            path,
            params,
            headers={"Authorization": f"Bearer {token}"},
            not_found=not_found,
        )

    async def search_artist(self, keyword: str) -> dict[str, Any]:
        """Return the best matching artist for ``keyword``."""
        if not keyword or not keyword.strip():
            raise ValidationError("Keyword is required")

        data = await self._authorized_get(
            "/search", {"q": keyword, "type": "artist", "limit": 1}
        )
        artists = data.get("artists") if isinstance(data, dict) else None
        if not isinstance(artists, dict):
            raise UpstreamError("Spotify search response has no artists object")
        items = artists.get("items") or []
        if not isinstance(items, list):
            raise UpstreamError("Spotify search response has malformed artist items")
        if not items:
            raise NotFoundError("Artist not found")

        artist = items[0]
        if not isinstance(artist, dict):
            raise UpstreamError("Spotify search response has malformed artist items")
        logger.info("Found artist: %s", artist.get("name"))
        return artist

    async def get_artist(self, artist_id: str) -> dict[str, Any]:
        if not artist_id:
            raise ValidationError("Artist ID is required")
        return await self._authorized_get(
            f"/artists/{quote(artist_id, safe='')}", not_found="Artist not found"
        )

    async def get_artist_albums(self, artist_id: str) -> dict[str, Any]:
        """Return the artist's full-length albums (singles and compilations excluded)."""
        if not artist_id:
            raise ValidationError("Artist ID is required")

        data = await self._authorized_get(
            f"/artists/{quote(artist_id, safe='')}/albums",
            {"include_groups": "album", "market": ALBUM_MARKET, "limit": ALBUM_LIMIT},
        )
        if isinstance(data, dict):
            logger.info(
                "Found %d albums for artist %s", len(data.get("items") or []), artist_id
            )
        return data


__all__ = ["SpotifyClient"]
