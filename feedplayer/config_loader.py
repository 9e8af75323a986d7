"""
Load named player presets from a YAML file with ``${ENV}`` expansion, so API
keys can stay in the environment:

    players:
      demo:
        spec: "nasa=https://api.nasa.gov/planetary/apod?api_key=${NASA_API_KEY}|bsky=..."
        feed_type: mixed
        fields: [title, date, explanation, url]
"""
from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from feedplayer.models import FeedSpec

logger = logging.getLogger(__name__)

_ENV_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


def load_presets(path: Path) -> Dict[str, Dict[str, Any]]:
    if not path.exists():
        logger.warning("Preset file not found at %s", path)
        return {}
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    players = data.get("players") if isinstance(data, dict) else None
    if not isinstance(players, dict):
        logger.warning("Preset file %s has no 'players' mapping", path)
        return {}
    return {str(name): _normalize_preset(_expand_env(cfg)) for name, cfg in players.items() if isinstance(cfg, dict)}


def _normalize_preset(cfg: Dict[str, Any]) -> Dict[str, Any]:
    spec: Union[str, FeedSpec] = cfg.get("spec") or ""
    feeds = cfg.get("feeds")
    if not spec and isinstance(feeds, dict):
        # Mapping form: one entry per feed-key, a list gives several URLs.
        spec = FeedSpec.from_mapping(feeds)
    fields = cfg.get("fields") or []
    if isinstance(fields, str):
        fields = [fields]
    return {
        "spec": spec,
        "feed_type": cfg.get("feed_type"),
        "fields": [field for field in fields if isinstance(field, str)],
        "require_media": bool(cfg.get("require_media", False)),
        "civic_limit": _optional_int(cfg.get("civic_limit")),
    }


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-integer civic_limit %r", value)
        return None


def _expand_env(data: Any) -> Any:
    if isinstance(data, str):
        return _ENV_RE.sub(lambda match: os.getenv(match.group(1), ""), data)
    if isinstance(data, dict):
        return {key: _expand_env(value) for key, value in data.items()}
    if isinstance(data, list):
        return [_expand_env(item) for item in data]
    return data
