"""Backing-list fetches turned into content nodes.

Shared by the navigator (children / item lookups) and the queue builder
(re-fetch on selection).  Nothing here swallows errors: content API and
network failures propagate to the caller, which decides the fallback.
"""

from __future__ import annotations

import logging

from autobrowse.artwork import ArtworkResolver
from autobrowse.auth import CredentialStore
from autobrowse.config import Settings, get_settings
from autobrowse.content_client import ContentAPI
from browse_core.media_ids import (
    NODE_CONTINUE,
    NODE_EPISODES,
    NODE_LOGIN,
    NODE_SERIES,
    NOW_PLAYING_ID,
    ROOT_ID,
    EpisodeContinue,
    EpisodeLatest,
    EpisodeSeries,
    SeriesChildren,
)
from browse_core.models import ContentNode, Episode, Playlist

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Static nodes
# ---------------------------------------------------------------------------

def browsable_node(node_id: str, title: str, subtitle: str | None = None) -> ContentNode:
    return ContentNode(id=node_id, title=title, subtitle=subtitle, browsable=True, playable=False)


def root_node(settings: Settings) -> ContentNode:
    return browsable_node(ROOT_ID, settings.library_title)


def login_node() -> ContentNode:
    return browsable_node(NODE_LOGIN, "Sign in on your phone", "Open GH Player on your phone to continue")


CATEGORY_NODES: dict[str, ContentNode] = {
    NODE_SERIES: browsable_node(NODE_SERIES, "Series", "Browse series"),
    NODE_CONTINUE: browsable_node(NODE_CONTINUE, "Continue Listening", "Pick up where you left off"),
    NODE_EPISODES: browsable_node(NODE_EPISODES, "Episodes", "Latest episodes"),
}


def now_playing_node(current: ContentNode | None) -> ContentNode | None:
    """Re-wrap the host's current item under the reserved now-playing id."""
    if current is None:
        return None
    return current.model_copy(
        update={
            "id": NOW_PLAYING_ID,
            "title": current.title or "Now Playing",
            "subtitle": "Now Playing" if current.title else "Open current playback",
            "browsable": False,
            "playable": True,
        }
    )


# ---------------------------------------------------------------------------
# Fetch + build
# ---------------------------------------------------------------------------

class Catalog:
    """Turns content API rows into ``ContentNode`` lists."""

    def __init__(
        self,
        api: ContentAPI,
        resolver: ArtworkResolver,
        store: CredentialStore,
        settings: Settings | None = None,
    ):
        self.api = api
        self.resolver = resolver
        self.store = store
        self.settings = settings or get_settings()

    async def _base_url(self) -> str | None:
        config = await self.store.load()
        return config.base_url if config else None

    async def _decorate(self, node: ContentNode, raw_artwork: str | None, base_url: str | None) -> ContentNode:
        url, data = await self.resolver.artwork_for(raw_artwork, base_url)
        node.artwork_ref = url
        node.artwork_data = data
        return node

    async def series_node(self, playlist: Playlist, base_url: str | None) -> ContentNode:
        node = ContentNode(
            id=str(SeriesChildren(playlist.id)),
            title=playlist.title,
            subtitle=playlist.description or None,
            browsable=True,
            playable=False,
        )
        return await self._decorate(node, playlist.cover_image_path, base_url)

    async def episode_node(
        self,
        episode: Episode,
        media_id: str,
        fallback_artwork: str | None,
        base_url: str | None,
    ) -> ContentNode:
        node = ContentNode(
            id=media_id,
            title=episode.title,
            subtitle=episode.podcast_title or self.settings.default_publisher,
            browsable=False,
            playable=True,
            artist=episode.podcast_title,
            audio_uri=episode.audio_url or None,
        )
        artwork = episode.image_url or fallback_artwork or episode.podcast_image_url
        return await self._decorate(node, artwork, base_url)

    # -- Lists -------------------------------------------------------------

    async def fetch_playlists(self) -> list[Playlist]:
        """Series rows, falling back to all public playlists when empty."""
        limit = self.settings.page_size
        playlists = await self.api.fetch_series(limit)
        logger.info("Series query returned %d rows", len(playlists))
        if not playlists:
            playlists = await self.api.fetch_public_playlists(limit)
            logger.info("Public playlist fallback returned %d rows", len(playlists))
        return playlists

    async def series_nodes(self) -> list[ContentNode]:
        base_url = await self._base_url()
        return [await self.series_node(p, base_url) for p in await self.fetch_playlists()]

    async def series_episode_nodes(self, series_id: str) -> list[ContentNode]:
        base_url = await self._base_url()
        cover = await self.api.fetch_playlist_cover(series_id)
        episodes = await self.api.fetch_series_episodes(series_id, self.settings.page_size)
        logger.info("Series %s has %d episodes", series_id, len(episodes))
        return [
            await self.episode_node(e, str(EpisodeSeries(series_id, e.id)), cover, base_url)
            for e in episodes
        ]

    async def latest_episode_nodes(self) -> list[ContentNode]:
        base_url = await self._base_url()
        episodes = await self.api.fetch_latest_episodes(self.settings.page_size)
        logger.info("Latest episodes: %d", len(episodes))
        return [await self.episode_node(e, str(EpisodeLatest(e.id)), None, base_url) for e in episodes]

    async def continue_entries(self) -> list[tuple[ContentNode, int]]:
        """(node, progress_ms) pairs in API order; orphaned progress rows are skipped."""
        base_url = await self._base_url()
        items = await self.api.fetch_continue_listening(self.settings.page_size)
        logger.info("Continue listening: %d rows", len(items))
        entries: list[tuple[ContentNode, int]] = []
        for item in items:
            if item.episode is None:
                continue
            node = await self.episode_node(
                item.episode, str(EpisodeContinue(item.episode.id)), None, base_url
            )
            entries.append((node, item.progress_ms))
        return entries
