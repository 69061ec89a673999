"""Pydantic models shared across the application."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class Episode(BaseModel):
    """Episode row as returned by the content API."""

    id: str
    title: str = ""
    summary: str = ""
    image_url: Optional[str] = None
    audio_url: Optional[str] = None
    podcast_title: Optional[str] = None
    podcast_image_url: Optional[str] = None


class Playlist(BaseModel):
    """Series / playlist row."""

    id: str
    title: str = ""
    description: str = ""
    cover_image_path: Optional[str] = None


class ContinueItem(BaseModel):
    """An episode paired with the listener's last position in it."""

    episode: Optional[Episode] = None  # None when the backing episode is gone
    progress_ms: int = 0


class ContentNode(BaseModel):
    """A node of the browsing tree: browsable folder or playable leaf."""

    id: str
    title: str = ""
    subtitle: Optional[str] = None
    browsable: bool = False
    playable: bool = False
    artist: Optional[str] = None
    album: Optional[str] = None
    artwork_ref: Optional[str] = None
    audio_uri: Optional[str] = None
    # Compressed cover bytes; never part of the JSON payload.
    artwork_data: Optional[bytes] = Field(default=None, exclude=True, repr=False)


class Queue(BaseModel):
    """Playback queue handed to the playback engine for one selection."""

    items: List[ContentNode] = Field(default_factory=list)
    start_index: int = 0
    start_position_ms: Optional[int] = None  # None = unset, engine decides


class AuthConfig(BaseModel):
    """Persisted backend credentials; never logged."""

    base_url: Optional[str] = None
    api_key: Optional[str] = None
    access_token: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        """True if every field needed to call the backend is present."""
        return bool(self.base_url and self.api_key and self.access_token)
