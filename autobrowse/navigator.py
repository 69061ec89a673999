"""Content tree navigator: root, children and item lookups.

Every entry point runs the auth gate first; logged-out callers only ever
see the sign-in node.  Network-bound lookups are submitted to the shared
``SerialWorker`` and fetch failures degrade to empty results.
"""

from __future__ import annotations

import logging

from autobrowse.auth import CredentialStore, is_logged_in
from autobrowse.catalog import CATEGORY_NODES, Catalog, login_node, now_playing_node, root_node
from autobrowse.config import Settings, get_settings
from autobrowse.errors import NotFoundError, NotSupportedError, recover
from autobrowse.session import LibrarySession
from autobrowse.worker import SerialWorker
from browse_core.media_ids import (
    NODE_CONTINUE,
    NODE_EPISODES,
    NODE_SERIES,
    ContinueList,
    EpisodeContinue,
    EpisodeLatest,
    EpisodeSeries,
    EpisodesList,
    Login,
    NowPlaying,
    Root,
    SeriesChildren,
    SeriesList,
    parse_media_id,
)
from browse_core.models import ContentNode

logger = logging.getLogger(__name__)


def _find(nodes: list[ContentNode], media_id: str) -> ContentNode | None:
    return next((n for n in nodes if n.id == media_id), None)


class Navigator:
    """Answers the browsing client's root / children / item requests."""

    def __init__(
        self,
        catalog: Catalog,
        store: CredentialStore,
        worker: SerialWorker,
        settings: Settings | None = None,
    ):
        self.catalog = catalog
        self.store = store
        self.worker = worker
        self.settings = settings or get_settings()

    # -- Root --------------------------------------------------------------

    async def get_root(self, session: LibrarySession) -> ContentNode:
        if not await is_logged_in(session, self.store):
            logger.info("get_root: not logged in, showing sign-in node")
            return login_node()
        return root_node(self.settings)

    # -- Children ----------------------------------------------------------

    async def get_children(
        self,
        session: LibrarySession,
        parent_id: str,
        page: int = 0,
        page_size: int | None = None,
    ) -> list[ContentNode]:
        """Children of *parent_id*; one fixed page, later pages are empty.

        *page_size* is accepted for client compatibility; the page is always
        ``Settings.page_size`` items at most.
        """
        if not await is_logged_in(session, self.store):
            logger.info("get_children(%s): not logged in, showing sign-in node", parent_id)
            return [login_node()]

        target = parse_media_id(parent_id)
        if target is None:
            raise NotSupportedError(parent_id)
        if page > 0:
            return []

        match target:
            case Root():
                return self._root_children(session)
            case SeriesList():
                return await self._submit(f"children {parent_id}", self.catalog.series_nodes, [])
            case SeriesChildren(series_id=series_id):
                return await self._submit(
                    f"children {parent_id}", self.catalog.series_episode_nodes, [], series_id
                )
            case EpisodesList():
                return await self._submit(f"children {parent_id}", self.catalog.latest_episode_nodes, [])
            case ContinueList():
                entries = await self._submit(f"children {parent_id}", self.catalog.continue_entries, [])
                return [node for node, _ in entries]
            case Login() | NowPlaying() | EpisodeLatest() | EpisodeSeries() | EpisodeContinue():
                return []

    def _root_children(self, session: LibrarySession) -> list[ContentNode]:
        items: list[ContentNode] = []
        now_playing = now_playing_node(session.host.current_item())
        if now_playing is not None:
            items.append(now_playing)
        for node_id in (NODE_SERIES, NODE_CONTINUE, NODE_EPISODES):
            items.append(CATEGORY_NODES[node_id].model_copy())
        return items

    # -- Item --------------------------------------------------------------

    async def get_item(self, session: LibrarySession, media_id: str) -> ContentNode:
        """Resolve a single node, raising ``NotFoundError`` / ``NotSupportedError``."""
        target = parse_media_id(media_id)

        if not await is_logged_in(session, self.store):
            if isinstance(target, Login):
                return login_node()
            if target is None:
                raise NotSupportedError(media_id)
            raise NotFoundError(media_id)

        match target:
            case None:
                raise NotSupportedError(media_id)
            case Login():
                raise NotSupportedError(media_id)
            case Root():
                return root_node(self.settings)
            case SeriesList() | ContinueList() | EpisodesList():
                return CATEGORY_NODES[media_id].model_copy()
            case NowPlaying():
                node = now_playing_node(session.host.current_item())
            case SeriesChildren():
                node = _find(await self._submit(f"item {media_id}", self.catalog.series_nodes, []), media_id)
            case EpisodeLatest():
                node = _find(
                    await self._submit(f"item {media_id}", self.catalog.latest_episode_nodes, []), media_id
                )
            case EpisodeSeries(series_id=series_id):
                nodes = await self._submit(
                    f"item {media_id}", self.catalog.series_episode_nodes, [], series_id
                )
                node = _find(nodes, media_id)
            case EpisodeContinue():
                entries = await self._submit(f"item {media_id}", self.catalog.continue_entries, [])
                node = _find([n for n, _ in entries], media_id)

        if node is None:
            raise NotFoundError(media_id)
        return node

    # -- Search ------------------------------------------------------------

    async def search(self, session: LibrarySession, query: str) -> list[ContentNode]:
        raise NotSupportedError(f"search:{query}")

    # -- Helpers -----------------------------------------------------------

    async def _submit(self, label, fn, fallback, *args):
        """Run ``fn(*args)`` on the worker, degrading failures to *fallback*."""
        return await self.worker.submit(lambda: recover(label, fn(*args), fallback))
