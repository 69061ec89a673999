"""Playback-host context passed into every library call.

The host (media session / playback engine) owns transport state.  The
library only reads the current item and position from it, and reports
back whether a multi-item queue is loaded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from browse_core.media_ids import ROOT_ID
from browse_core.models import ContentNode

logger = logging.getLogger(__name__)

EXTRA_IS_LOGGED_IN = "isLoggedIn"


class PlaybackHost(Protocol):
    def current_item(self) -> ContentNode | None: ...

    def current_position_ms(self) -> int | None: ...

    def update_playlist_state(self, has_playlist: bool) -> None: ...

    def notify_children_changed(self, parent_id: str) -> None: ...


@dataclass
class LibrarySession:
    """Snapshot of host-owned session metadata plus a handle on the host."""

    host: PlaybackHost
    extras: dict[str, Any] = field(default_factory=dict)


class InMemoryPlaybackHost:
    """In-process host used by the HTTP surface and tests."""

    def __init__(self) -> None:
        self.extras: dict[str, Any] = {}
        self.playlist_active = False
        self._current: ContentNode | None = None
        self._position_ms: int | None = None

    # -- PlaybackHost ------------------------------------------------------

    def current_item(self) -> ContentNode | None:
        return self._current

    def current_position_ms(self) -> int | None:
        return self._position_ms if self._current is not None else None

    def update_playlist_state(self, has_playlist: bool) -> None:
        self.playlist_active = has_playlist
        logger.debug("Playlist state: %s", has_playlist)

    def notify_children_changed(self, parent_id: str) -> None:
        logger.info("Children changed: %s", parent_id)

    # -- Session commands ------------------------------------------------

    def set_login_state(self, logged_in: bool) -> None:
        """Merge the login flag into the extras and refresh the root."""
        self.extras = {**self.extras, EXTRA_IS_LOGGED_IN: logged_in}
        self.notify_children_changed(ROOT_ID)

    def set_now_playing(self, item: ContentNode, position_ms: int = 0) -> None:
        self._current = item
        self._position_ms = position_ms

    def clear_now_playing(self) -> None:
        self._current = None
        self._position_ms = None

    def session(self) -> LibrarySession:
        """Snapshot the current extras into a fresh context object."""
        return LibrarySession(host=self, extras=dict(self.extras))
