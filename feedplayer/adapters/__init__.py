"""
Per-kind normalizers that turn upstream responses into NormalizedItem lists.
"""
from __future__ import annotations

from typing import Any, List, Optional, Sequence

from feedplayer.adapters.base import AdapterRegistry, SourceAdapter
from feedplayer.adapters.civic_issue import CivicIssueAdapter, with_media
from feedplayer.adapters.generic import GenericAdapter
from feedplayer.adapters.image_of_day import ImageOfDayAdapter
from feedplayer.adapters.social_post import SocialPostAdapter
from feedplayer.adapters.spreadsheet import SpreadsheetAdapter
from feedplayer.models import NormalizedItem, SourceKind


def build_registry(
    fields: Optional[Sequence[str]] = None,
    require_media: bool = False,
    civic_limit: Optional[int] = None,
) -> AdapterRegistry:
    registry = AdapterRegistry()
    registry.register(ImageOfDayAdapter())
    registry.register(CivicIssueAdapter(require_media=require_media, limit=civic_limit))
    registry.register(SocialPostAdapter())
    registry.register(SpreadsheetAdapter())
    registry.register(GenericAdapter(fields=fields))
    return registry


def normalize_response(
    body: Any,
    kind: SourceKind,
    source_url: str,
    fields: Optional[Sequence[str]] = None,
) -> List[NormalizedItem]:
    return build_registry(fields=fields).normalize(body, kind, source_url)


__all__ = [
    "AdapterRegistry",
    "SourceAdapter",
    "build_registry",
    "normalize_response",
    "with_media",
]
