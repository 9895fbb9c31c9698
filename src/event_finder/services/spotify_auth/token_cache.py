"""Spotify client-credentials token cache.

Holds one bearer token for the Spotify Web API and refreshes it shortly before
it expires. Concurrent callers that find the token missing or stale share a
single in-flight refresh, so the token endpoint sees one request no matter how
many outbound calls are waiting on it.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable

import httpx

from event_finder.config import Settings, get_settings
from event_finder.errors import AuthError

logger = logging.getLogger(__name__)

SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"
DEFAULT_REFRESH_MARGIN_SECONDS = 60.0
DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class CachedToken:
    """Access token plus its absolute expiry on the cache's clock."""

    access_token: str
    expires_at: float

    def is_fresh(self, now: float, margin: float) -> bool:
        return now < self.expires_at - margin


def _coerce_expires_in(value: Any) -> float:
    if isinstance(value, bool):
        raise AuthError("Spotify token response has an invalid expires_in")
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError as exc:
            raise AuthError(
                "Spotify token response has an invalid expires_in"
            ) from exc
    if not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
        raise AuthError("Spotify token response has an invalid expires_in")
    return float(value)


class SpotifyTokenCache:
    """Cache a Spotify app token obtained through the client-credentials flow.

    ``get_token`` returns the cached token without any network traffic while it
    is fresh. Once the token is missing or within ``refresh_margin`` seconds of
    expiry, exactly one refresh runs and every concurrent caller awaits it.
    A failed refresh raises :class:`AuthError` to all of those callers and
    leaves the previously cached state untouched; the next call tries again.
    """

    def __init__(
        self,
        client_id: str | None,
        client_secret: str | None,
        *,
        token_url: str = SPOTIFY_TOKEN_URL,
        refresh_margin: float = DEFAULT_REFRESH_MARGIN_SECONDS,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._token_url = token_url
        self._refresh_margin = refresh_margin
        self._timeout = timeout
        self._http_client = http_client
        self._clock = clock
        self._token: CachedToken | None = None
        self._refresh_task: asyncio.Task[CachedToken] | None = None

    @classmethod
    def from_settings(
        cls, settings: Settings, *, http_client: httpx.AsyncClient | None = None
    ) -> "SpotifyTokenCache":
        secret = settings.spotify_client_secret
        return cls(
            settings.spotify_client_id,
            secret.get_secret_value() if secret is not None else None,
            token_url=str(settings.spotify_token_url),
            refresh_margin=settings.spotify_token_refresh_margin,
            timeout=settings.spotify_token_timeout,
            http_client=http_client,
        )

    @property
    def token(self) -> CachedToken | None:
        """The currently cached token, fresh or not."""
        return self._token

    def is_fresh(self) -> bool:
        token = self._token
        return token is not None and token.is_fresh(self._clock(), self._refresh_margin)

    async def get_token(self) -> str:
        """Return a bearer token, refreshing it first when missing or stale.

        Raises:
            AuthError: the token endpoint could not issue a token.
        """
        token = self._token
        if token is not None and token.is_fresh(self._clock(), self._refresh_margin):
            return token.access_token

        task = self._refresh_task
        if task is None or task.done():
            task = asyncio.create_task(self._refresh())
            task.add_done_callback(self._refresh_finished)
            self._refresh_task = task

        # Shielded so a cancelled caller does not cancel the shared refresh
        token = await asyncio.shield(task)
        return token.access_token

    def _refresh_finished(self, task: asyncio.Task[CachedToken]) -> None:
        if self._refresh_task is task:
            self._refresh_task = None
        if not task.cancelled() and task.exception() is not None:
            logger.error("Spotify auth error: %s", task.exception())

    async def _refresh(self) -> CachedToken:
        if not self._client_id or not self._client_secret:
            raise AuthError("Spotify client credentials are not configured")

        try:
            response = await self._request_token()
        except httpx.HTTPError as exc:
            raise AuthError(f"Spotify token request failed: {exc}") from exc

        if not response.is_success:
            raise AuthError(f"Spotify auth error: {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise AuthError("Spotify token endpoint returned invalid JSON") from exc

        if not isinstance(payload, dict):
            raise AuthError("Spotify token response is not a JSON object")
        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token.strip():
            raise AuthError("Spotify token response is missing an access_token")
        expires_in = _coerce_expires_in(payload.get("expires_in"))

        token = CachedToken(
            access_token=access_token.strip(),
            expires_at=self._clock() + expires_in,
        )
        self._token = token
        logger.info("Spotify access token refreshed (expires in %.0fs)", expires_in)
        return token

    async def _request_token(self) -> httpx.Response:
        assert self._client_id is not None and self._client_secret is not None
        auth = httpx.BasicAuth(self._client_id, self._client_secret)
        data = {"grant_type": "client_credentials"}

        if self._http_client is not None:
            return await self._http_client.post(
                self._token_url, data=data, auth=auth, timeout=self._timeout
            )

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.post(self._token_url, data=data, auth=auth)


@lru_cache(maxsize=1)
def get_token_cache() -> SpotifyTokenCache:
    """Return the process-wide token cache, creating it on first use."""

    return SpotifyTokenCache.from_settings(get_settings())


__all__ = [
    "CachedToken",
    "DEFAULT_REFRESH_MARGIN_SECONDS",
    "SPOTIFY_TOKEN_URL",
    "SpotifyTokenCache",
    "get_token_cache",
]
