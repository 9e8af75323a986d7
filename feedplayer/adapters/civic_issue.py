"""
Adapter for SeeClickFix issue listings.
"""
from __future__ import annotations

import logging
from typing import Any, List, Optional

from feedplayer.adapters.base import extract_records, extras_of, parse_records
from feedplayer.models import NormalizedItem, SourceKind
from feedplayer.schemas import CivicIssue

logger = logging.getLogger(__name__)

LATITUDE_TOKEN = "{latitude}"
LONGITUDE_TOKEN = "{longitude}"


def substitute_coordinates(url: str, latitude: str, longitude: str) -> str:
    return url.replace(LATITUDE_TOKEN, latitude).replace(LONGITUDE_TOKEN, longitude)


class CivicIssueAdapter:
    """
    Maps issues to items. With ``require_media`` only issues carrying an image
    are kept; ``limit`` caps the items taken from one URL.
    """

    kind = SourceKind.CIVIC_ISSUE
    label = "SeeClickFix"

    def __init__(self, require_media: bool = False, limit: Optional[int] = None) -> None:
        self.require_media = require_media
        self.limit = limit

    def normalize(self, body: Any, source_url: str) -> List[NormalizedItem]:
        issues = parse_records(CivicIssue, extract_records(body, "issues"), self.label)
        if self.require_media:
            issues = [issue for issue in issues if issue.image_url]
        if self.limit is not None:
            issues = issues[: self.limit]
        return [self._to_item(issue) for issue in issues]

    def _to_item(self, issue: CivicIssue) -> NormalizedItem:
        return NormalizedItem(
            title=issue.summary or issue.title or "",
            description=issue.description or "",
            media_url=issue.image_url,
            date=issue.created_at or "",
            source=self.label,
            extra=extras_of(issue, "status", "address", "html_url", "lat", "lng"),
        )


def with_media(items: List[NormalizedItem]) -> List[NormalizedItem]:
    """Filtered view for layouts that must show an image."""
    return [item for item in items if item.media_url]
