"""Library routes: browse tree, queue resolution, session commands, artwork."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel, Field

from autobrowse.errors import NotFoundError, NotSupportedError
from autobrowse.library import get_library
from browse_core.models import ContentNode, Queue

router = APIRouter(tags=["library"])


def _library_error(exc: Exception) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


# ---------------------------------------------------------------------------
# Browse
# ---------------------------------------------------------------------------

@router.get("/library/root", response_model=ContentNode)
async def library_root():
    lib = get_library()
    return await lib.navigator.get_root(lib.host.session())


@router.get("/library/children/{parent_id:path}", response_model=List[ContentNode])
async def library_children(parent_id: str, page: int = 0, page_size: int = 50):
    lib = get_library()
    try:
        return await lib.navigator.get_children(lib.host.session(), parent_id, page, page_size)
    except NotSupportedError as exc:
        raise _library_error(exc) from exc


@router.get("/library/items/{media_id:path}", response_model=ContentNode)
async def library_item(media_id: str):
    lib = get_library()
    try:
        return await lib.navigator.get_item(lib.host.session(), media_id)
    except (NotFoundError, NotSupportedError) as exc:
        raise _library_error(exc) from exc


# ---------------------------------------------------------------------------
# Queue
# ---------------------------------------------------------------------------

class QueueRequest(BaseModel):
    selected_id: str
    fallback: List[ContentNode] = Field(default_factory=list)
    start_index: int = 0
    start_position_ms: Optional[int] = None


@router.post("/library/queue", response_model=Queue)
async def library_queue(body: QueueRequest):
    """Resolve a selection into the queue the playback engine should load."""
    lib = get_library()
    return await lib.queue_builder.build_queue(
        lib.host.session(),
        body.selected_id,
        body.fallback,
        body.start_position_ms,
        body.start_index,
    )


# ---------------------------------------------------------------------------
# Session commands
# ---------------------------------------------------------------------------

class LoginState(BaseModel):
    is_logged_in: bool


class PlaylistState(BaseModel):
    has_playlist: bool


class NowPlayingIn(BaseModel):
    item: ContentNode
    position_ms: int = 0


@router.post("/session/login-state", status_code=204)
async def set_login_state(body: LoginState) -> None:
    get_library().host.set_login_state(body.is_logged_in)


@router.post("/session/playlist-state", status_code=204)
async def set_playlist_state(body: PlaylistState) -> None:
    get_library().host.update_playlist_state(body.has_playlist)


@router.put("/session/now-playing", status_code=204)
async def put_now_playing(body: NowPlayingIn) -> None:
    get_library().host.set_now_playing(body.item, body.position_ms)


@router.delete("/session/now-playing", status_code=204)
async def delete_now_playing() -> None:
    get_library().host.clear_now_playing()


# ---------------------------------------------------------------------------
# Artwork
# ---------------------------------------------------------------------------

@router.get("/artwork")
async def artwork(url: str):
    """Serve cached artwork bytes for a normalized URL; never downloads."""
    data = get_library().cache.get(url)
    if data is None:
        raise HTTPException(status_code=404, detail="Artwork unavailable")
    return Response(content=data, media_type=_sniff_media_type(data))


def _sniff_media_type(data: bytes) -> str:
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data.startswith(b"GIF8"):
        return "image/gif"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
