"""Media-id grammar: pure parsing, no I/O.

The id strings are the wire contract with browsing clients and must stay
stable across restarts:

    root                               Root
    root/series                        SeriesList
    root/continue                      ContinueList
    root/episodes                      EpisodesList
    root/login                         Login
    now_playing                        NowPlaying
    series/{playlistId}                SeriesChildren
    episode/latest/{episodeId}         EpisodeLatest
    episode/series/{seriesId}/{epId}   EpisodeSeries
    episode/continue/{episodeId}       EpisodeContinue

Strings are parsed once at the boundary with ``parse_media_id`` and then
matched on the resulting variant classes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

ROOT_ID = "root"
NODE_SERIES = "root/series"
NODE_CONTINUE = "root/continue"
NODE_EPISODES = "root/episodes"
NODE_LOGIN = "root/login"
NOW_PLAYING_ID = "now_playing"

SERIES_PREFIX = "series/"
EPISODE_LATEST_PREFIX = "episode/latest/"
EPISODE_SERIES_PREFIX = "episode/series/"
EPISODE_CONTINUE_PREFIX = "episode/continue/"


# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Root:
    def __str__(self) -> str:
        return ROOT_ID


@dataclass(frozen=True)
class SeriesList:
    def __str__(self) -> str:
        return NODE_SERIES


@dataclass(frozen=True)
class ContinueList:
    def __str__(self) -> str:
        return NODE_CONTINUE


@dataclass(frozen=True)
class EpisodesList:
    def __str__(self) -> str:
        return NODE_EPISODES


@dataclass(frozen=True)
class Login:
    def __str__(self) -> str:
        return NODE_LOGIN


@dataclass(frozen=True)
class NowPlaying:
    def __str__(self) -> str:
        return NOW_PLAYING_ID


@dataclass(frozen=True)
class SeriesChildren:
    series_id: str

    def __str__(self) -> str:
        return f"{SERIES_PREFIX}{self.series_id}"


@dataclass(frozen=True)
class EpisodeLatest:
    episode_id: str

    def __str__(self) -> str:
        return f"{EPISODE_LATEST_PREFIX}{self.episode_id}"


@dataclass(frozen=True)
class EpisodeSeries:
    series_id: str
    episode_id: str

    def __str__(self) -> str:
        return f"{EPISODE_SERIES_PREFIX}{self.series_id}/{self.episode_id}"


@dataclass(frozen=True)
class EpisodeContinue:
    episode_id: str

    def __str__(self) -> str:
        return f"{EPISODE_CONTINUE_PREFIX}{self.episode_id}"


MediaId = Union[
    Root,
    SeriesList,
    ContinueList,
    EpisodesList,
    Login,
    NowPlaying,
    SeriesChildren,
    EpisodeLatest,
    EpisodeSeries,
    EpisodeContinue,
]

_FIXED = {
    ROOT_ID: Root(),
    NODE_SERIES: SeriesList(),
    NODE_CONTINUE: ContinueList(),
    NODE_EPISODES: EpisodesList(),
    NODE_LOGIN: Login(),
    NOW_PLAYING_ID: NowPlaying(),
}


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_media_id(raw: Optional[str]) -> Optional[MediaId]:
    """Return the variant for *raw*, or ``None`` if the id is not recognized.

    Prefixed ids need a non-empty remainder; ``episode/series/`` needs both
    a series id and an episode id (split on the first ``/``).
    """
    if not raw:
        return None
    fixed = _FIXED.get(raw)
    if fixed is not None:
        return fixed

    if raw.startswith(EPISODE_LATEST_PREFIX):
        episode_id = raw[len(EPISODE_LATEST_PREFIX):]
        return EpisodeLatest(episode_id) if episode_id else None

    if raw.startswith(EPISODE_CONTINUE_PREFIX):
        episode_id = raw[len(EPISODE_CONTINUE_PREFIX):]
        return EpisodeContinue(episode_id) if episode_id else None

    if raw.startswith(EPISODE_SERIES_PREFIX):
        series_id, sep, episode_id = raw[len(EPISODE_SERIES_PREFIX):].partition("/")
        if sep and series_id and episode_id:
            return EpisodeSeries(series_id, episode_id)
        return None

    if raw.startswith(SERIES_PREFIX):
        series_id = raw[len(SERIES_PREFIX):]
        return SeriesChildren(series_id) if series_id else None

    return None
