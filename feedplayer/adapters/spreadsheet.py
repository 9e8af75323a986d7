"""
Adapter for spreadsheets published as CSV.

The split is deliberately naive: commas inside quoted cells are not supported.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from feedplayer.models import NormalizedItem, SourceKind

TITLE_COLUMNS = ("title", "name")
DESCRIPTION_COLUMNS = ("description", "text", "explanation")
MEDIA_COLUMNS = ("url", "image", "image_url", "media", "media_url", "video")
DATE_COLUMNS = ("date", "created_at")


def _cell(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        value = value[1:-1].strip()
    return value


def parse_csv_rows(body: str) -> List[Dict[str, str]]:
    lines = [line.rstrip("\r") for line in body.split("\n")]
    lines = [line for line in lines if line.strip()]
    if not lines:
        return []
    headers = [_cell(header) for header in lines[0].split(",")]
    rows: List[Dict[str, str]] = []
    for line in lines[1:]:
        cells = line.split(",")
        rows.append({header: _cell(cells[index]) if index < len(cells) else "" for index, header in enumerate(headers)})
    return rows


def _pick(row: Dict[str, str], columns) -> Optional[str]:
    lowered = {key.lower(): value for key, value in row.items()}
    for column in columns:
        if lowered.get(column):
            return lowered[column]
    return None


class SpreadsheetAdapter:
    kind = SourceKind.SPREADSHEET_CSV
    label = "Google Sheet"

    def normalize(self, body: Any, source_url: str) -> List[NormalizedItem]:
        if isinstance(body, bytes):
            body = body.decode("utf-8", errors="replace")
        if not isinstance(body, str):
            return []
        return [
            NormalizedItem(
                title=_pick(row, TITLE_COLUMNS) or "",
                description=_pick(row, DESCRIPTION_COLUMNS) or "",
                media_url=_pick(row, MEDIA_COLUMNS),
                date=_pick(row, DATE_COLUMNS) or "",
                source=self.label,
                extra=row,
            )
            for row in parse_csv_rows(body)
        ]
