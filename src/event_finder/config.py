"""Application configuration using environment variables."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, AnyHttpUrl, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the project root once so that `.env` is discovered regardless of CWD
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """Load configuration from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Ticketmaster Discovery API
    ticketmaster_api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("TICKETMASTER_API_KEY", "ticketmaster_api_key"),
    )
    ticketmaster_base_url: AnyHttpUrl = Field(
        default_factory=lambda: AnyHttpUrl("https://app.ticketmaster.com/discovery/v2"),
        validation_alias=AliasChoices(
            "TICKETMASTER_BASE_URL", "ticketmaster_base_url"
        ),
    )

    # Spotify Web API (client credentials flow)
    spotify_client_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("SPOTIFY_CLIENT_ID", "spotify_client_id"),
    )
    spotify_client_secret: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices(
            "SPOTIFY_CLIENT_SECRET", "spotify_client_secret"
        ),
    )
    spotify_token_url: AnyHttpUrl = Field(
        default_factory=lambda: AnyHttpUrl("https://accounts.spotify.com/api/token"),
        validation_alias=AliasChoices("SPOTIFY_TOKEN_URL", "spotify_token_url"),
    )
    spotify_api_base_url: AnyHttpUrl = Field(
        default_factory=lambda: AnyHttpUrl("https://api.spotify.com/v1"),
        validation_alias=AliasChoices(
            "SPOTIFY_API_BASE_URL", "spotify_api_base_url"
        ),
    )
    spotify_token_refresh_margin: float = Field(
        default=60.0,
        ge=10,
        le=300,
        validation_alias=AliasChoices(
            "SPOTIFY_TOKEN_REFRESH_MARGIN", "spotify_token_refresh_margin"
        ),
    )
    spotify_token_timeout: float = Field(
        default=10.0,
        gt=0,
        validation_alias=AliasChoices(
            "SPOTIFY_TOKEN_TIMEOUT", "spotify_token_timeout"
        ),
    )

    upstream_timeout: float = Field(
        default=10.0,
        gt=0,
        validation_alias=AliasChoices("UPSTREAM_TIMEOUT", "upstream_timeout"),
    )
    favorites_database_path: Path = Field(
        default_factory=lambda: Path("data/favorites.db"),
        validation_alias=AliasChoices(
            "FAVORITES_DATABASE_PATH", "favorites_database_path"
        ),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached `Settings` instance."""

    return Settings()  # pyright: ignore[reportCallIssue]


__all__ = ["PROJECT_ROOT", "Settings", "get_settings"]
