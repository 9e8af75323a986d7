"""
Exception types raised across the feed player.
"""
from __future__ import annotations

from typing import Optional


class FeedPlayerError(Exception):
    """Base class for feed player failures."""


class FeedSpecError(FeedPlayerError, ValueError):
    """The specification string is empty or holds no usable segment."""


class UnknownFeedError(FeedPlayerError, KeyError):
    def __init__(self, feed_key: str) -> None:
        super().__init__(feed_key)
        self.feed_key = feed_key

    def __str__(self) -> str:
        return f"Unknown feed '{self.feed_key}'"


class FetchError(FeedPlayerError):
    """
    A source URL could not be fetched. ``status_code`` is None for network
    failures that never produced a response.
    """

    def __init__(self, message: str, *, url: str = "", status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class MediaPlaybackError(FeedPlayerError):
    """The media element refused to start playback."""
