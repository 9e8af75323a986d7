"""
HTTP helper with retries + polite headers used by the feed loader.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Optional

import requests
from urllib3.util.retry import Retry

from feedplayer.errors import FetchError
from feedplayer.security import redact_secrets

logger = logging.getLogger(__name__)


class HttpClient:
    """
    Blocking GET client. 429 and 400 are never retried so the loader can tell
    the user why a feed failed; 5xx responses are retried with backoff.
    """

    def __init__(self, timeout: int = 15, max_retries: int = 2, user_agent: str | None = None):
        self.timeout = timeout
        self.session = requests.Session()
        retry = Retry(
            total=max_retries,
            backoff_factor=0.6,
            status_forcelist=[500, 502, 503, 504],
            allowed_methods=["HEAD", "GET", "OPTIONS"],
            raise_on_status=False,
        )
        adapter = requests.adapters.HTTPAdapter(max_retries=retry)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)
        self.session.headers.update(
            {
                "User-Agent": user_agent or "feedplayer/1.0",
                "Accept": "application/json, text/csv, application/rss+xml, */*;q=0.8",
            }
        )

    def get(self, url: str) -> Any:
        """Return the decoded JSON body, or the text body for CSV/RSS responses."""
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise FetchError(redact_secrets(str(exc)), url=url) from exc
        if resp.status_code >= 400:
            logger.warning("HTTP GET failed %s %s", resp.status_code, redact_secrets(url))
            raise FetchError(f"HTTP {resp.status_code}", url=url, status_code=resp.status_code)
        return decode_body(resp.text, resp.headers.get("Content-Type"))

    def close(self) -> None:
        self.session.close()


def decode_body(text: str, content_type: Optional[str] = None) -> Any:
    stripped = text.lstrip()
    wants_json = bool(content_type and "json" in content_type.lower())
    if wants_json or stripped.startswith(("{", "[")):
        try:
            return json.loads(text)
        except ValueError:
            if wants_json:
                logger.debug("Response declared JSON but did not parse; keeping text")
    return text
