"""Byte-budgeted LRU store for compressed artwork: pure logic, no I/O.

Keys are normalized artwork URLs, values are image bytes.  The sum of all
value sizes never exceeds ``max_bytes``; inserting evicts the least
recently *accessed* entries first (recency only, not frequency).

Safe for concurrent use: one lock guards every read and write so the
library worker and outside readers (e.g. an HTTP handler) can share it.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Optional

logger = logging.getLogger(__name__)


class ArtworkCache:
    """Thread-safe LRU map of URL → bytes bounded by total size."""

    def __init__(self, max_bytes: int):
        if max_bytes <= 0:
            raise ValueError("max_bytes must be positive")
        self.max_bytes = max_bytes
        self._entries: OrderedDict[str, bytes] = OrderedDict()
        self._size = 0
        self._lock = threading.Lock()

    # -- reads ------------------------------------------------------------

    def get(self, key: str) -> Optional[bytes]:
        """Return cached bytes and mark *key* as most recently used."""
        with self._lock:
            value = self._entries.get(key)
            if value is not None:
                self._entries.move_to_end(key)
            return value

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def size_bytes(self) -> int:
        with self._lock:
            return self._size

    # -- writes -----------------------------------------------------------

    def put(self, key: str, value: bytes) -> bool:
        """Insert or replace *key*, evicting LRU entries to stay in budget.

        Returns False (and stores nothing) when *value* alone exceeds the
        budget.
        """
        size = len(value)
        if size > self.max_bytes:
            logger.debug("Artwork for %s (%d bytes) exceeds cache budget", key, size)
            return False

        with self._lock:
            old = self._entries.pop(key, None)
            if old is not None:
                self._size -= len(old)

            while self._entries and self._size + size > self.max_bytes:
                evicted_key, evicted = self._entries.popitem(last=False)
                self._size -= len(evicted)
                logger.debug("Evicted artwork %s (%d bytes)", evicted_key, len(evicted))

            self._entries[key] = value
            self._size += size
        return True

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._size = 0
