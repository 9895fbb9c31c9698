"""Shared plumbing for pass-through calls to third-party JSON APIs."""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from event_finder.errors import NotFoundError, UpstreamError

logger = logging.getLogger(__name__)


class UpstreamClient:
    """GET JSON from a partner API and hand the payload back unchanged.

    Subclasses supply ``service_name`` and build URLs, parameters and headers.
    Transport failures and non-success responses become :class:`UpstreamError`;
    a 404 becomes :class:`NotFoundError` when the caller names the missing thing.
    """

    service_name = "Upstream"

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._http_client = http_client

    def _url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    async def _get_json(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
        *,
        headers: Mapping[str, str] | None = None,
        not_found: str | None = None,
    ) -> Any:
        url = self._url(path)
        try:
            response = await self._send(url, params, headers)
        except httpx.HTTPError as exc:
            logger.error("%s request to %s failed: %s", self.service_name, path, exc)
            raise UpstreamError(f"{self.service_name} request failed: {exc}") from exc

        if response.status_code == 404 and not_found is not None:
            raise NotFoundError(not_found)
        if not response.is_success:
            logger.error(
                "%s API error for %s: %s", self.service_name, path, response.status_code
            )
            raise UpstreamError(
                f"{self.service_name} API error: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(
                f"{self.service_name} API returned invalid JSON",
                status_code=response.status_code,
            ) from exc

    async def _send(
        self,
        url: str,
        params: Mapping[str, Any] | None,
        headers: Mapping[str, str] | None,
    ) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.get(
                url, params=params, headers=headers, timeout=self._timeout
            )

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.get(url, params=params, headers=headers)


__all__ = ["UpstreamClient"]
