"""
Adapter for Bluesky profile feeds, served either as JSON or as RSS.
"""
from __future__ import annotations

from typing import Any, List

from feedplayer.adapters.base import extract_records, extras_of, parse_records
from feedplayer.adapters.rss_base import looks_like_xml, parse_feed_entries
from feedplayer.models import NormalizedItem, SourceKind
from feedplayer.schemas import SocialPost


class SocialPostAdapter:
    kind = SourceKind.SOCIAL_POST
    label = "BlueSky"

    def normalize(self, body: Any, source_url: str) -> List[NormalizedItem]:
        if looks_like_xml(body):
            records = parse_feed_entries(body)
        else:
            records = extract_records(body, "items")
        posts = parse_records(SocialPost, records, self.label)
        return [
            NormalizedItem(
                title=post.title or "",
                description=post.content or post.description or post.summary or "",
                media_url=post.media_url or post.link or post.url,
                date=post.pubDate or post.published or post.date or "",
                source=self.label,
                extra=extras_of(post, "link"),
            )
            for post in posts
        ]
