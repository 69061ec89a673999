"""Library error kinds and the single swallow-and-fall-back policy."""

from __future__ import annotations

import logging
from typing import Awaitable, TypeVar

import httpx
from pydantic import ValidationError

from autobrowse.content_client import ContentAPIError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LibraryError(Exception):
    """Base for errors that reach browsing clients."""


class NotSupportedError(LibraryError):
    """The media id is not part of the id grammar (or not allowed here)."""

    def __init__(self, media_id: str):
        self.media_id = media_id
        super().__init__(f"Not supported: {media_id!r}")


class NotFoundError(LibraryError):
    """The media id is valid but nothing backs it right now."""

    def __init__(self, media_id: str):
        self.media_id = media_id
        super().__init__(f"Media item not found: {media_id!r}")


# Backend, network and payload failures; everything else propagates.
RECOVERABLE = (
    ContentAPIError,
    httpx.HTTPError,
    httpx.InvalidURL,
    ValidationError,
    ValueError,
    KeyError,
)


async def recover(label: str, awaitable: Awaitable[T], fallback: T) -> T:
    """Await *awaitable*; on a recoverable failure log it and return *fallback*."""
    try:
        return await awaitable
    except RECOVERABLE as exc:
        logger.warning("%s failed, using fallback: %r", label, exc)
        return fallback
