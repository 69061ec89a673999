"""Tests for queue construction (autobrowse/queue_builder.py)."""

from __future__ import annotations

from unittest.mock import MagicMock

import httpx
import pytest

from autobrowse.catalog import Catalog
from autobrowse.content_client import ContentAPI, ContentAPIError
from autobrowse.queue_builder import QueueBuilder
from browse_core.models import AuthConfig, ContentNode, ContinueItem, Episode
from conftest import FakeStore


@pytest.fixture
def builder(catalog, worker) -> QueueBuilder:
    return QueueBuilder(catalog, worker)


def _episodes(*ids: str) -> list[Episode]:
    return [Episode(id=i, title=i.upper(), audio_url=f"https://cdn.test/{i}.mp3") for i in ids]


FALLBACK = [
    ContentNode(id="local/a", title="A", playable=True),
    ContentNode(id="local/b", title="B", playable=True),
]


# ---------------------------------------------------------------------------
# Pass-through
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
@pytest.mark.parametrize("selected", ["local/b", "series/s1", "root", ""])
async def test_unrecognized_selection_returns_fallback_verbatim(builder, session, host, api, selected):
    queue = await builder.build_queue(session, selected, FALLBACK, start_position_ms=777, start_index=1)

    assert [n.id for n in queue.items] == ["local/a", "local/b"]
    assert queue.start_index == 1
    assert queue.start_position_ms == 777
    api.fetch_latest_episodes.assert_not_called()
    assert host.playlist_active is False


# ---------------------------------------------------------------------------
# Latest / series
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_latest_starts_at_selection(builder, session, host, api):
    api.fetch_latest_episodes.return_value = _episodes("e1", "e2", "e3")

    queue = await builder.build_queue(session, "episode/latest/e3", FALLBACK, start_position_ms=1234)

    assert [n.id for n in queue.items] == ["episode/latest/e1", "episode/latest/e2", "episode/latest/e3"]
    assert queue.start_index == 2
    assert queue.start_position_ms == 1234
    assert host.playlist_active is True


@pytest.mark.asyncio
async def test_latest_without_match_starts_at_zero(builder, session, api):
    api.fetch_latest_episodes.return_value = _episodes("e1", "e2")

    queue = await builder.build_queue(session, "episode/latest/zzz", FALLBACK)

    assert len(queue.items) == 2
    assert queue.start_index == 0
    assert queue.start_position_ms is None


@pytest.mark.asyncio
async def test_series_starts_at_selection(builder, session, host, api):
    api.fetch_series_episodes.return_value = _episodes("e1", "e2", "e3")

    queue = await builder.build_queue(session, "episode/series/s1/e2", FALLBACK)

    assert [n.id for n in queue.items] == [
        "episode/series/s1/e1",
        "episode/series/s1/e2",
        "episode/series/s1/e3",
    ]
    assert queue.start_index == 1
    assert queue.items[1].audio_uri == "https://cdn.test/e2.mp3"
    api.fetch_series_episodes.assert_awaited_once_with("s1", 50)
    assert host.playlist_active is True


@pytest.mark.asyncio
async def test_single_item_queue_reports_no_playlist(builder, session, host, api):
    host.playlist_active = True
    api.fetch_latest_episodes.return_value = _episodes("e1")

    queue = await builder.build_queue(session, "episode/latest/e1", FALLBACK)

    assert len(queue.items) == 1
    assert host.playlist_active is False


# ---------------------------------------------------------------------------
# Continue listening
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_continue_uses_recorded_progress(builder, session, api):
    e1, e2 = _episodes("e1", "e2")
    api.fetch_continue_listening.return_value = [
        ContinueItem(episode=e1, progress_ms=100),
        ContinueItem(episode=e2, progress_ms=4200),
    ]

    queue = await builder.build_queue(session, "episode/continue/e2", FALLBACK, start_position_ms=99)

    assert queue.start_index == 1
    assert queue.start_position_ms == 4200


@pytest.mark.asyncio
async def test_continue_index_skips_orphaned_rows(builder, session, api):
    e1, e3 = _episodes("e1", "e3")
    api.fetch_continue_listening.return_value = [
        ContinueItem(episode=None, progress_ms=50),
        ContinueItem(episode=e1, progress_ms=100),
        ContinueItem(episode=e3, progress_ms=300),
    ]

    queue = await builder.build_queue(session, "episode/continue/e3", FALLBACK)

    assert [n.id for n in queue.items] == ["episode/continue/e1", "episode/continue/e3"]
    assert queue.start_index == 1
    assert queue.items[queue.start_index].id == "episode/continue/e3"
    assert queue.start_position_ms == 300


@pytest.mark.asyncio
async def test_continue_negative_progress_clamps_to_zero(builder, session, api):
    (e1,) = _episodes("e1")
    api.fetch_continue_listening.return_value = [ContinueItem(episode=e1, progress_ms=-20)]

    queue = await builder.build_queue(session, "episode/continue/e1", FALLBACK)
    assert queue.start_position_ms == 0


@pytest.mark.asyncio
async def test_continue_without_match_starts_at_zero(builder, session, api):
    (e1,) = _episodes("e1")
    api.fetch_continue_listening.return_value = [ContinueItem(episode=e1, progress_ms=800)]

    queue = await builder.build_queue(session, "episode/continue/gone", FALLBACK, start_position_ms=55)

    assert queue.start_index == 0
    assert queue.start_position_ms == 0


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [ContentAPIError(500, "boom"), httpx.ConnectError("offline"), ValueError("bad payload")],
)
async def test_fetch_failure_returns_fallback_at_start(builder, session, api, error):
    host = MagicMock()
    session.host = host
    api.fetch_latest_episodes.side_effect = error

    queue = await builder.build_queue(session, "episode/latest/e1", FALLBACK, start_position_ms=500, start_index=1)

    assert [n.id for n in queue.items] == ["local/a", "local/b"]
    assert queue.start_index == 0
    assert queue.start_position_ms is None
    host.update_playlist_state.assert_not_called()


# ---------------------------------------------------------------------------
# Now playing
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_now_playing_queues_current_item(builder, session, host, api):
    current = ContentNode(id="episode/latest/e9", title="E9", playable=True, audio_uri="https://cdn.test/e9.mp3")
    host.set_now_playing(current, position_ms=61_000)

    queue = await builder.build_queue(session, "now_playing", FALLBACK, start_position_ms=5)

    assert queue.items == [current]
    assert queue.start_index == 0
    assert queue.start_position_ms == 61_000
    api.fetch_latest_episodes.assert_not_called()


@pytest.mark.asyncio
async def test_now_playing_without_current_item_returns_fallback(builder, session):
    queue = await builder.build_queue(session, "now_playing", FALLBACK, start_position_ms=5, start_index=1)

    assert queue.items == FALLBACK
    assert queue.start_index == 1
    assert queue.start_position_ms == 5


@pytest.mark.asyncio
async def test_malformed_base_url_returns_fallback(resolver, worker, settings, session, host):
    store = FakeStore(AuthConfig(base_url="https://[::1", api_key="anon", access_token="tok"))
    builder = QueueBuilder(Catalog(ContentAPI(store, settings), resolver, store, settings), worker)

    queue = await builder.build_queue(session, "episode/latest/e1", FALLBACK, start_position_ms=10)

    assert queue.items == FALLBACK
    assert queue.start_index == 0
    assert queue.start_position_ms is None
    assert host.playlist_active is False
