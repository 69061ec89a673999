"""Process-wide library services, created once during app startup."""

from __future__ import annotations

from dataclasses import dataclass

from autobrowse.artwork import ArtworkResolver
from autobrowse.auth import CredentialStore
from autobrowse.catalog import Catalog
from autobrowse.config import get_settings
from autobrowse.content_client import ContentAPI
from autobrowse.navigator import Navigator
from autobrowse.queue_builder import QueueBuilder
from autobrowse.session import InMemoryPlaybackHost
from autobrowse.worker import SerialWorker
from browse_core.artwork_cache import ArtworkCache


@dataclass
class Library:
    store: CredentialStore
    cache: ArtworkCache
    resolver: ArtworkResolver
    worker: SerialWorker
    navigator: Navigator
    queue_builder: QueueBuilder
    host: InMemoryPlaybackHost


# Module-level services (set during lifespan startup).
_library: Library | None = None


def build_library() -> Library:
    """Wire the services together from the current settings."""
    settings = get_settings()
    store = CredentialStore()
    cache = ArtworkCache(settings.artwork_cache_max_bytes)
    resolver = ArtworkResolver(cache, settings)
    api = ContentAPI(store, settings)
    catalog = Catalog(api, resolver, store, settings)
    worker = SerialWorker()
    return Library(
        store=store,
        cache=cache,
        resolver=resolver,
        worker=worker,
        navigator=Navigator(catalog, store, worker, settings),
        queue_builder=QueueBuilder(catalog, worker),
        host=InMemoryPlaybackHost(),
    )


async def init_library() -> Library:
    global _library  # noqa: PLW0603
    _library = build_library()
    _library.worker.start()
    return _library


async def close_library() -> None:
    global _library  # noqa: PLW0603
    if _library is not None:
        await _library.worker.stop()
        _library = None


def get_library() -> Library:
    """Return the running library services (call after init)."""
    if _library is None:
        raise RuntimeError("Library not initialised; call init_library() first.")
    return _library
