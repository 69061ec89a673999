"""Shared fixtures: temp settings, fake collaborators, JWT helper."""

from __future__ import annotations

import base64
import json
import time
from unittest.mock import AsyncMock, MagicMock

import pytest

from autobrowse.artwork import normalize_artwork_url
from autobrowse.catalog import Catalog
from autobrowse.config import Settings, get_settings
from autobrowse.session import EXTRA_IS_LOGGED_IN, InMemoryPlaybackHost, LibrarySession
from autobrowse.worker import SerialWorker
from browse_core.models import AuthConfig

BASE_URL = "https://x.test"


def make_jwt(exp: float | None) -> str:
    """Unsigned JWT carrying *exp* (omitted when None)."""

    def seg(obj: dict) -> str:
        return base64.urlsafe_b64encode(json.dumps(obj).encode()).rstrip(b"=").decode()

    claims = {"sub": "user-1"}
    if exp is not None:
        claims["exp"] = int(exp)
    return f"{seg({'alg': 'HS256', 'typ': 'JWT'})}.{seg(claims)}.signature"


class FakeStore:
    """In-memory stand-in for ``CredentialStore``."""

    def __init__(self, config: AuthConfig | None = None):
        self.config = config
        self.loads = 0

    async def load(self) -> AuthConfig | None:
        self.loads += 1
        return self.config


@pytest.fixture(autouse=True)
def _use_tmp_db(monkeypatch, tmp_path):
    """Use a temp database and fresh settings for every test."""
    monkeypatch.setenv("DB_PATH", str(tmp_path / "test.db"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return get_settings()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore(
        AuthConfig(
            base_url=BASE_URL,
            api_key="anon-key",
            access_token=make_jwt(time.time() + 3600),
        )
    )


@pytest.fixture
def api() -> MagicMock:
    """Content API double; every fetch returns an empty result by default."""
    api = MagicMock()
    api.fetch_series = AsyncMock(return_value=[])
    api.fetch_public_playlists = AsyncMock(return_value=[])
    api.fetch_latest_episodes = AsyncMock(return_value=[])
    api.fetch_series_episodes = AsyncMock(return_value=[])
    api.fetch_playlist_cover = AsyncMock(return_value=None)
    api.fetch_continue_listening = AsyncMock(return_value=[])
    return api


@pytest.fixture
def resolver() -> MagicMock:
    """Resolver double: real URL normalization, never any bytes."""

    async def artwork_for(raw_ref, base_url):
        return normalize_artwork_url(raw_ref, base_url), None

    resolver = MagicMock()
    resolver.artwork_for = AsyncMock(side_effect=artwork_for)
    return resolver


@pytest.fixture
def catalog(api, resolver, store, settings) -> Catalog:
    return Catalog(api, resolver, store, settings)


@pytest.fixture
async def worker():
    w = SerialWorker()
    w.start()
    yield w
    await w.stop()


@pytest.fixture
def host() -> InMemoryPlaybackHost:
    return InMemoryPlaybackHost()


@pytest.fixture
def session(host) -> LibrarySession:
    """Logged in through the fast path."""
    return LibrarySession(host=host, extras={EXTRA_IS_LOGGED_IN: True})


@pytest.fixture
def logged_out(host) -> LibrarySession:
    return LibrarySession(host=host, extras={EXTRA_IS_LOGGED_IN: False})
