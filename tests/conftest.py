import pathlib
import sys

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch):
    """Keep cached settings and the process-wide token cache out of other tests."""
    from event_finder.config import get_settings
    from event_finder.services.spotify_auth import get_token_cache

    for name in (
        "SPOTIFY_CLIENT_ID",
        "SPOTIFY_CLIENT_SECRET",
        "TICKETMASTER_API_KEY",
        "SPOTIFY_TOKEN_REFRESH_MARGIN",
    ):
        monkeypatch.delenv(name, raising=False)

    get_settings.cache_clear()
    get_token_cache.cache_clear()
    yield
    get_settings.cache_clear()
    get_token_cache.cache_clear()
