"""
Public API for the feed player core.
"""
from __future__ import annotations

from feedplayer.adapters import build_registry, normalize_response, with_media
from feedplayer.errors import FeedPlayerError, FeedSpecError, FetchError, MediaPlaybackError, UnknownFeedError
from feedplayer.feed_spec import detect_source_kind, normalize_spreadsheet_url, parse_feed_spec
from feedplayer.loader import FeedLoader
from feedplayer.media import HeadlessVideo, MediaElement
from feedplayer.models import Cursor, FeedSpec, LoadStatus, MediaKind, NormalizedItem, SourceKind
from feedplayer.playback import PlaybackMachine, PlaybackState
from feedplayer.player import FeedPlayer
from feedplayer.router import HashRouter, Location
from feedplayer.status import build_status

__version__ = "1.0.0"

__all__ = [
    "Cursor",
    "FeedLoader",
    "FeedPlayer",
    "FeedPlayerError",
    "FeedSpec",
    "FeedSpecError",
    "FetchError",
    "HashRouter",
    "HeadlessVideo",
    "LoadStatus",
    "Location",
    "MediaElement",
    "MediaKind",
    "MediaPlaybackError",
    "NormalizedItem",
    "PlaybackMachine",
    "PlaybackState",
    "SourceKind",
    "UnknownFeedError",
    "build_registry",
    "build_status",
    "detect_source_kind",
    "normalize_response",
    "normalize_spreadsheet_url",
    "parse_feed_spec",
    "with_media",
]
