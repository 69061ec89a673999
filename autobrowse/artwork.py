"""Artwork resolution: URL normalization, bounded download, recompression.

Only used to decorate content nodes.  Failures never propagate past this
module: every error is logged and turned into ``None``.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from autobrowse.config import Settings, get_settings
from browse_core.artwork_cache import ArtworkCache
from browse_core.artwork_codec import recompress

logger = logging.getLogger(__name__)

_PASSTHROUGH_SCHEMES = (
    "http://",
    "https://",
    "content://",
    "file://",
    "android.resource://",
)
_STORAGE_PREFIX = "storage/v1/"
_PUBLIC_PREFIX = "public/"
_PUBLIC_OBJECT_PATH = "storage/v1/object/public/"


def normalize_artwork_url(raw_ref: str | None, base_url: str | None) -> str | None:
    """Turn a raw artwork reference into a fetchable URL.

    Absolute references pass through.  Anything else is a storage path and
    is rebuilt under ``{base_url}/storage/v1/object/public/``; without a
    base URL the trimmed input is returned as-is.
    """
    if raw_ref is None:
        return None
    trimmed = raw_ref.strip()
    if not trimmed:
        return None
    if trimmed.startswith(_PASSTHROUGH_SCHEMES):
        return trimmed
    if not base_url:
        return trimmed

    base = base_url.rstrip("/")
    path = trimmed[1:] if trimmed.startswith("/") else trimmed
    if path.startswith(_STORAGE_PREFIX):
        return f"{base}/{path}"
    if path.startswith(_PUBLIC_PREFIX):
        path = path[len(_PUBLIC_PREFIX):]
    return f"{base}/{_PUBLIC_OBJECT_PATH}{path}"


class ArtworkResolver:
    """Cache-through artwork fetcher shared by navigator and queue builder."""

    def __init__(
        self,
        cache: ArtworkCache,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.cache = cache
        self.settings = settings or get_settings()
        self._transport = transport

    def resolve(self, raw_ref: str | None, base_url: str | None = None) -> str | None:
        return normalize_artwork_url(raw_ref, base_url)

    async def fetch_bytes(self, url: str | None) -> bytes | None:
        """Return artwork bytes for a normalized URL, downloading on a miss."""
        if not url:
            return None
        cached = self.cache.get(url)
        if cached is not None:
            logger.debug("Artwork cache hit: %s", url)
            return cached
        if not url.startswith(("http://", "https://")):
            return None

        raw = await self._download(url)
        if raw is None:
            return None

        s = self.settings
        compressed = await asyncio.to_thread(
            recompress,
            raw,
            max_dim=s.artwork_max_dim_px,
            quality=s.artwork_jpeg_quality,
            max_bytes=s.artwork_max_bytes,
        )
        data = compressed if compressed is not None else raw
        self.cache.put(url, data)
        return data

    async def artwork_for(
        self, raw_ref: str | None, base_url: str | None
    ) -> tuple[str | None, bytes | None]:
        """Resolve *raw_ref* and fetch its bytes: ``(url, data)``."""
        url = self.resolve(raw_ref, base_url)
        if not url:
            return None, None
        return url, await self.fetch_bytes(url)

    async def _download(self, url: str) -> bytes | None:
        """GET *url* following redirects, capped at ``artwork_max_bytes``."""
        s = self.settings
        limit = s.artwork_max_bytes
        timeout = httpx.Timeout(s.artwork_read_timeout, connect=s.artwork_connect_timeout)
        try:
            async with httpx.AsyncClient(
                timeout=timeout, follow_redirects=True, transport=self._transport
            ) as client:
                async with client.stream("GET", url, headers={"Accept": "image/*"}) as resp:
                    if resp.status_code < 200 or resp.status_code >= 300:
                        logger.warning("Artwork http %d for %s", resp.status_code, url)
                        return None

                    declared = resp.headers.get("Content-Length")
                    if declared and declared.isdigit() and int(declared) > limit:
                        logger.warning("Artwork too large (%s bytes) for %s", declared, url)
                        return None

                    chunks: list[bytes] = []
                    total = 0
                    async for chunk in resp.aiter_bytes():
                        total += len(chunk)
                        if total > limit:
                            logger.warning("Artwork exceeded %d bytes while reading %s", limit, url)
                            return None
                        chunks.append(chunk)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Artwork download failed for %s: %r", url, exc)
            return None
        return b"".join(chunks)
