"""
Core data structures shared by the feed player.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, Mapping, NamedTuple, Optional, Tuple
from urllib.parse import urlsplit

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp")
VIDEO_EXTENSIONS = (".mp4", ".webm", ".ogg")


class SourceKind(str, Enum):
    IMAGE_OF_DAY = "nasa"
    CIVIC_ISSUE = "seeclickfix"
    SOCIAL_POST = "bsky"
    SPREADSHEET_CSV = "googlesheet"
    GENERIC = "default"


class MediaKind(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    TEXT = "text"
    UNKNOWN = "unknown"


class LoadStatus(str, Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


def sniff_media_kind(media_url: Optional[str]) -> MediaKind:
    if not media_url:
        return MediaKind.TEXT
    path = urlsplit(media_url.strip()).path.lower()
    if path.endswith(IMAGE_EXTENSIONS):
        return MediaKind.IMAGE
    if path.endswith(VIDEO_EXTENSIONS):
        return MediaKind.VIDEO
    return MediaKind.UNKNOWN


@dataclass
class NormalizedItem:
    """
    Common record every adapter produces, whatever the upstream shape.

    ``media_kind`` is always derived from ``media_url``; a value passed in is
    overwritten so the list never disagrees with the extension sets.
    """

    title: str = ""
    description: str = ""
    media_url: Optional[str] = None
    date: str = ""
    source: str = ""
    is_error: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)
    media_kind: MediaKind = MediaKind.TEXT

    def __post_init__(self) -> None:
        self.media_url = self.media_url or None
        self.media_kind = sniff_media_kind(self.media_url)

    @property
    def is_playable(self) -> bool:
        return self.media_kind in (MediaKind.IMAGE, MediaKind.VIDEO)

    def get(self, key: str, default: Any = None) -> Any:
        if key in _KNOWN_FIELDS:
            return getattr(self, key)
        return self.extra.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = dict(self.extra)
        payload.update(
            {
                "title": self.title,
                "description": self.description,
                "media_url": self.media_url,
                "date": self.date,
                "media_kind": self.media_kind.value,
                "source": self.source,
                "is_error": self.is_error,
            }
        )
        return payload


_KNOWN_FIELDS = frozenset({"title", "description", "media_url", "date", "media_kind", "source", "is_error"})


class FeedSpec(Mapping[str, Tuple[str, ...]]):
    """
    Ordered, read-only mapping of feed-key to its source URLs.
    """

    def __init__(self, entries: Optional[Mapping[str, Tuple[str, ...]]] = None) -> None:
        self._entries: Dict[str, Tuple[str, ...]] = {key: tuple(urls) for key, urls in (entries or {}).items()}

    def __getitem__(self, key: str) -> Tuple[str, ...]:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"FeedSpec({self._entries!r})"

    @property
    def default_key(self) -> Optional[str]:
        return next(iter(self._entries), None)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "FeedSpec":
        """Build a spec from config data: values are a URL string (pipe-separated) or a list of URLs."""
        entries: Dict[str, Tuple[str, ...]] = {}
        for key, value in mapping.items():
            if isinstance(value, str):
                urls = [part.strip() for part in value.split("|")]
            elif isinstance(value, (list, tuple)):
                urls = [str(part).strip() for part in value]
            else:
                continue
            urls = [url for url in urls if url]
            if urls:
                entries[str(key).strip()] = tuple(urls)
        return cls(entries)


class Cursor(NamedTuple):
    feed_key: str
    index: int
