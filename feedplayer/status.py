"""
Status helpers for the feed player.

The payload is a read-only view for the host page or a debug endpoint;
source URLs are redacted.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict

from feedplayer.player import FeedPlayer


def build_status(player: FeedPlayer) -> Dict[str, Any]:
    feeds = player.loader.snapshot() if player.loader else {}
    return {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "error": player.error,
        "fragment": player.location.hash,
        "feeds": feeds,
        "playback": player.machine.snapshot() if player.machine else None,
        "config": {
            "image_duration": player.settings.image_duration,
            "progress_cap": player.settings.progress_cap,
            "autoplay": player.autoplay,
            "feed_type": player.feed_type,
            "fields": player.fields,
        },
    }
