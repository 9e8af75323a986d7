"""
Shared helpers for RSS bodies.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

import feedparser


def looks_like_xml(body: Any) -> bool:
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    return isinstance(body, str) and body.lstrip().startswith("<")


def parse_feed_entries(feed_content: Any) -> List[Dict[str, Any]]:
    """Flatten RSS/Atom entries into plain dicts shaped like the JSON social feed."""
    feed = feedparser.parse(feed_content)
    records: List[Dict[str, Any]] = []
    for entry in getattr(feed, "entries", []):
        records.append(
            {
                "title": entry.get("title"),
                "content": _first_content(entry),
                "description": entry.get("description"),
                "summary": entry.get("summary"),
                "link": entry.get("link"),
                "pubDate": entry.get("published"),
                "media_url": _first_media(entry),
                "id": entry.get("id"),
            }
        )
    return records


def _first_content(entry) -> Optional[str]:
    for block in entry.get("content") or []:
        value = block.get("value")
        if value:
            return value
    return None


def _first_media(entry) -> Optional[str]:
    for enclosure in entry.get("enclosures") or []:
        href = enclosure.get("href") or enclosure.get("url")
        if href:
            return href
    for media in entry.get("media_content") or []:
        if media.get("url"):
            return media["url"]
    return None
