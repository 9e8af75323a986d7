"""
Fallback adapter for any other JSON endpoint.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from feedplayer.adapters.base import extract_records
from feedplayer.models import NormalizedItem, SourceKind


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class GenericAdapter:
    """
    Passes records through, or projects only ``fields`` when an allowlist is
    given. The item's source label is the URL it came from.
    """

    kind = SourceKind.GENERIC
    label = "Feed"

    def __init__(self, fields: Optional[Sequence[str]] = None) -> None:
        self.fields = [field for field in (fields or []) if field]

    def normalize(self, body: Any, source_url: str) -> List[NormalizedItem]:
        return [self._to_item(record, source_url) for record in extract_records(body, wrap_single=True)]

    def _to_item(self, record: Dict[str, Any], source_url: str) -> NormalizedItem:
        if self.fields:
            record = {field: record.get(field) for field in self.fields}
        else:
            record = dict(record)
        media_url = record.get("url") or record.get("hdurl") or record.get("image_url")
        return NormalizedItem(
            title=_text(record.get("title") or record.get("summary") or record.get("name")),
            description=_text(record.get("description") or record.get("explanation") or record.get("content")),
            media_url=media_url if isinstance(media_url, str) else None,
            date=_text(record.get("date") or record.get("created_at")),
            source=source_url,
            extra=record,
        )
