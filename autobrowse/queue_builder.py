"""Queue construction for a selected media id.

The selected id decides the strategy:

  now_playing              → the host's current item at its current position
  episode/latest/{id}      → all latest episodes, start at {id}
  episode/series/{s}/{id}  → all episodes of series {s}, start at {id}
  episode/continue/{id}    → the continue-listening list, start at {id},
                             position = server-recorded progress
  anything else            → the caller's fallback queue, untouched

Fetched queues are built on the shared ``SerialWorker``.  If a fetch fails
the fallback queue is returned at index 0 with an unset position; a
partially built queue is never returned.
"""

from __future__ import annotations

import logging

from autobrowse.catalog import Catalog
from autobrowse.errors import recover
from autobrowse.session import LibrarySession
from autobrowse.worker import SerialWorker
from browse_core.media_ids import (
    EpisodeContinue,
    EpisodeLatest,
    EpisodeSeries,
    NowPlaying,
    parse_media_id,
)
from browse_core.models import ContentNode, Queue

logger = logging.getLogger(__name__)


def _index_of(nodes: list[ContentNode], media_id: str) -> int:
    for i, node in enumerate(nodes):
        if node.id == media_id:
            return i
    return 0


class QueueBuilder:
    """Builds the playback queue handed to the playback engine."""

    def __init__(self, catalog: Catalog, worker: SerialWorker):
        self.catalog = catalog
        self.worker = worker

    async def build_queue(
        self,
        session: LibrarySession,
        selected_id: str,
        fallback: list[ContentNode],
        start_position_ms: int | None = None,
        start_index: int = 0,
    ) -> Queue:
        target = parse_media_id(selected_id)

        if isinstance(target, NowPlaying):
            current = session.host.current_item()
            if current is not None:
                return Queue(
                    items=[current],
                    start_index=0,
                    start_position_ms=session.host.current_position_ms(),
                )

        match target:
            case EpisodeLatest():
                build = self._from_latest
            case EpisodeSeries():
                build = self._from_series
            case EpisodeContinue():
                build = self._from_continue
            case _:
                return Queue(items=fallback, start_index=start_index, start_position_ms=start_position_ms)

        queue = await self.worker.submit(
            lambda: recover(f"build_queue {selected_id}", build(target, start_position_ms), None)
        )
        if queue is None:
            return Queue(items=fallback, start_index=0, start_position_ms=None)

        session.host.update_playlist_state(len(queue.items) > 1)
        logger.info(
            "Queue for %s: %d items, start %d @ %s",
            selected_id,
            len(queue.items),
            queue.start_index,
            queue.start_position_ms,
        )
        return queue

    async def _from_latest(self, target: EpisodeLatest, start_position_ms: int | None) -> Queue:
        nodes = await self.catalog.latest_episode_nodes()
        return Queue(
            items=nodes,
            start_index=_index_of(nodes, str(target)),
            start_position_ms=start_position_ms,
        )

    async def _from_series(self, target: EpisodeSeries, start_position_ms: int | None) -> Queue:
        nodes = await self.catalog.series_episode_nodes(target.series_id)
        return Queue(
            items=nodes,
            start_index=_index_of(nodes, str(target)),
            start_position_ms=start_position_ms,
        )

    async def _from_continue(self, target: EpisodeContinue, start_position_ms: int | None) -> Queue:
        # The caller's position is ignored: server-recorded progress wins.
        entries = await self.catalog.continue_entries()
        nodes = [node for node, _ in entries]
        start_index, resume_ms = 0, 0
        for i, (node, progress_ms) in enumerate(entries):
            if node.id == str(target):
                start_index, resume_ms = i, max(0, progress_ms)
                break
        return Queue(items=nodes, start_index=start_index, start_position_ms=resume_ms)
