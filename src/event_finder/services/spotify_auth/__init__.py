"""Spotify authentication service."""

from event_finder.services.spotify_auth.token_cache import (
    CachedToken,
    SpotifyTokenCache,
    get_token_cache,
)

__all__ = [
    "CachedToken",
    "SpotifyTokenCache",
    "get_token_cache",
]
