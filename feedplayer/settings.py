"""
Centralised settings for the feed player (env-first, code-light).
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_LATITUDE = "41.307"
DEFAULT_LONGITUDE = "-72.925"


@dataclass
class PlayerSettings:
    image_duration: float
    progress_cap: int
    autoplay: bool
    default_latitude: str
    default_longitude: str
    store_path: Path
    http_timeout: int
    http_retries: int
    user_agent: str
    log_level: str


def _int_from_env(key: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(key)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        value = int(raw)
        return value if value >= minimum else default
    except ValueError:
        logger.warning("Invalid int value for %s=%s; using default %s", key, raw, default)
        return default


def _float_from_env(key: str, default: float) -> float:
    raw = os.getenv(key)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        value = float(raw)
        return value if value > 0 else default
    except ValueError:
        logger.warning("Invalid float value for %s=%s; using default %s", key, raw, default)
        return default


def _bool_from_env(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if raw is None or str(raw).strip() == "":
        return default
    return str(raw).strip().lower() in {"1", "true", "yes", "on"}


def load_settings() -> PlayerSettings:
    store_env = os.getenv("FEEDPLAYER_STORE_PATH")
    store_path = Path(store_env) if store_env else Path.home() / ".feedplayer" / "local_store.json"
    return PlayerSettings(
        image_duration=_float_from_env("FEEDPLAYER_IMAGE_DURATION", 4.0),
        progress_cap=_int_from_env("FEEDPLAYER_PROGRESS_CAP", 7),
        autoplay=_bool_from_env("FEEDPLAYER_AUTOPLAY", False),
        default_latitude=os.getenv("FEEDPLAYER_DEFAULT_LATITUDE") or DEFAULT_LATITUDE,
        default_longitude=os.getenv("FEEDPLAYER_DEFAULT_LONGITUDE") or DEFAULT_LONGITUDE,
        store_path=store_path,
        http_timeout=_int_from_env("FEEDPLAYER_HTTP_TIMEOUT", 15),
        http_retries=_int_from_env("FEEDPLAYER_HTTP_RETRIES", 2, minimum=0),
        user_agent=os.getenv("FEEDPLAYER_USER_AGENT") or "feedplayer/1.0",
        log_level=(os.getenv("FEEDPLAYER_LOG_LEVEL") or "INFO").upper(),
    )
