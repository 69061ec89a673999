"""Content API client: PostgREST queries against the podcast backend.

Features:
  - Credentials read from the credential store on every call
  - Explicit connect/read timeouts
  - No retries: non-2xx responses raise ``ContentAPIError``
  - Missing credentials → empty results (logged), no request sent
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from autobrowse.auth import CredentialStore
from autobrowse.config import Settings, get_settings
from browse_core.models import AuthConfig, ContinueItem, Episode, Playlist

logger = logging.getLogger(__name__)

_PLAYLIST_FIELDS = "id,title,description,image_url"
_EPISODE_FIELDS = "id,title,summary,image_url,audio_url,podcasts(title,image_url)"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ContentAPIError(Exception):
    """Raised when the backend answers with a non-success status."""

    def __init__(self, status_code: int, detail: str):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Content API error {status_code}: {detail}")


# ---------------------------------------------------------------------------
# Row parsing
# ---------------------------------------------------------------------------

def _text(row: dict, key: str) -> str:
    value = row.get(key)
    return "" if value is None else str(value)


def _optional(row: dict | None, key: str) -> str | None:
    if not row:
        return None
    value = row.get(key)
    return str(value) if value else None


def _parse_playlist(row: dict) -> Playlist:
    return Playlist(
        id=_text(row, "id"),
        title=_text(row, "title"),
        description=_text(row, "description"),
        cover_image_path=_optional(row, "image_url"),
    )


def _parse_episode(row: dict) -> Episode:
    podcast = row.get("podcasts") or None
    return Episode(
        id=_text(row, "id"),
        title=_text(row, "title"),
        summary=_text(row, "summary"),
        image_url=_optional(row, "image_url"),
        audio_url=_optional(row, "audio_url"),
        podcast_title=_optional(podcast, "title"),
        podcast_image_url=_optional(podcast, "image_url"),
    )


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class ContentAPI:
    """Thin async wrapper over the backend's REST tables."""

    def __init__(
        self,
        store: CredentialStore,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.store = store
        self.settings = settings or get_settings()
        self._transport = transport

    async def _config(self, label: str) -> AuthConfig | None:
        config = await self.store.load()
        if config is None or not config.is_valid:
            logger.warning("%s: missing auth config", label)
            return None
        return config

    async def _get_rows(self, config: AuthConfig, table: str, params: dict[str, Any]) -> list[dict]:
        """GET ``/rest/v1/{table}`` and return the JSON array of rows."""
        url = f"{config.base_url.rstrip('/')}/rest/v1/{table}"
        headers = {
            "Accept": "application/json",
            "apikey": config.api_key,
            "Authorization": f"Bearer {config.access_token}",
        }
        timeout = httpx.Timeout(
            self.settings.content_api_read_timeout,
            connect=self.settings.content_api_connect_timeout,
        )
        async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
            resp = await client.get(url, params=params, headers=headers)

        if resp.status_code < 200 or resp.status_code >= 300:
            logger.error("Content API error %d for %s: %s", resp.status_code, table, resp.text)
            raise ContentAPIError(resp.status_code, resp.text)

        rows = resp.json()
        if not isinstance(rows, list):
            raise ValueError(f"Expected a JSON array from {table}")
        return rows

    # -- Playlists -------------------------------------------------------

    async def fetch_series(self, limit: int) -> list[Playlist]:
        config = await self._config("fetch_series")
        if config is None:
            return []
        rows = await self._get_rows(
            config,
            "playlists",
            {
                "select": _PLAYLIST_FIELDS,
                "category": "eq.series",
                "is_published": "eq.true",
                "visibility": "eq.public",
                "order": "updated_at.desc",
                "limit": str(limit),
            },
        )
        return [_parse_playlist(row) for row in rows]

    async def fetch_public_playlists(self, limit: int) -> list[Playlist]:
        config = await self._config("fetch_public_playlists")
        if config is None:
            return []
        rows = await self._get_rows(
            config,
            "playlists",
            {
                "select": _PLAYLIST_FIELDS,
                "is_published": "eq.true",
                "visibility": "eq.public",
                "order": "updated_at.desc",
                "limit": str(limit),
            },
        )
        return [_parse_playlist(row) for row in rows]

    async def fetch_playlist_cover(self, series_id: str) -> str | None:
        config = await self._config("fetch_playlist_cover")
        if config is None:
            return None
        rows = await self._get_rows(
            config,
            "playlists",
            {"select": "image_url", "id": f"eq.{series_id}", "limit": "1"},
        )
        return _optional(rows[0], "image_url") if rows else None

    # -- Episodes --------------------------------------------------------

    async def fetch_latest_episodes(self, limit: int) -> list[Episode]:
        config = await self._config("fetch_latest_episodes")
        if config is None:
            return []
        rows = await self._get_rows(
            config,
            "episodes",
            {
                "select": _EPISODE_FIELDS,
                "order": "published_at.desc",
                "limit": str(limit),
            },
        )
        return [_parse_episode(row) for row in rows]

    async def fetch_series_episodes(self, series_id: str, limit: int) -> list[Episode]:
        config = await self._config("fetch_series_episodes")
        if config is None:
            return []
        rows = await self._get_rows(
            config,
            "playlist_items",
            {
                "select": f"id,sort_order,episodes({_EPISODE_FIELDS})",
                "playlist_id": f"eq.{series_id}",
                "order": "sort_order.asc",
                "limit": str(limit),
            },
        )
        return [_parse_episode(row["episodes"]) for row in rows if row.get("episodes")]

    async def fetch_continue_listening(self, limit: int) -> list[ContinueItem]:
        config = await self._config("fetch_continue_listening")
        if config is None:
            return []
        rows = await self._get_rows(
            config,
            "playback_progress",
            {
                "select": f"episode_id,progress_ms,updated_at,episodes({_EPISODE_FIELDS})",
                "completed": "eq.false",
                "order": "updated_at.desc",
                "limit": str(limit),
            },
        )
        items: list[ContinueItem] = []
        for row in rows:
            episode = row.get("episodes")
            items.append(
                ContinueItem(
                    episode=_parse_episode(episode) if episode else None,
                    progress_ms=int(row.get("progress_ms") or 0),
                )
            )
        return items
