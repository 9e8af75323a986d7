"""
Adapter for the NASA Astronomy Picture of the Day API.
"""
from __future__ import annotations

from typing import Any, List

from feedplayer.adapters.base import extract_records, extras_of, parse_records
from feedplayer.models import NormalizedItem, SourceKind
from feedplayer.schemas import ApodEntry


class ImageOfDayAdapter:
    kind = SourceKind.IMAGE_OF_DAY
    label = "NASA APOD"

    def normalize(self, body: Any, source_url: str) -> List[NormalizedItem]:
        # A single-date request returns one object, a date range returns a list.
        entries = parse_records(ApodEntry, extract_records(body, wrap_single=True), self.label)
        return [
            NormalizedItem(
                title=entry.title or "",
                description=entry.explanation or "",
                media_url=entry.url or entry.hdurl,
                date=entry.date or "",
                source=self.label,
                extra=extras_of(entry, "hdurl", "media_type", "copyright"),
            )
            for entry in entries
        ]
