"""
Fetch, normalize and merge the sources behind each feed-key.
"""
from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Executor
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import Dict, List, Optional, Sequence

from feedplayer.adapters import build_registry
from feedplayer.adapters.base import AdapterRegistry
from feedplayer.adapters.civic_issue import substitute_coordinates
from feedplayer.errors import FetchError, UnknownFeedError
from feedplayer.feed_spec import normalize_spreadsheet_url, resolve_kind
from feedplayer.http_client import HttpClient
from feedplayer.models import FeedSpec, LoadStatus, NormalizedItem, SourceKind
from feedplayer.security import redact_secrets
from feedplayer.settings import DEFAULT_LATITUDE, DEFAULT_LONGITUDE
from feedplayer.storage import LocalStore

logger = logging.getLogger(__name__)


class FailureKind(str, Enum):
    RATE_LIMITED = "rate-limited"
    BAD_REQUEST = "bad-request"
    OTHER = "other"
    EMPTY = "empty"


FAILURE_MESSAGES = {
    FailureKind.RATE_LIMITED: "The feed provider is rate limiting requests (HTTP 429). Please wait a moment and try again.",
    FailureKind.BAD_REQUEST: "The feed request was rejected as malformed (HTTP 400). Please check the feed URL.",
    FailureKind.OTHER: "The feed could not be loaded because of a network or server error.",
    FailureKind.EMPTY: "The feed returned no items.",
}

# Most actionable cause first.
_FAILURE_PRIORITY = (FailureKind.RATE_LIMITED, FailureKind.BAD_REQUEST, FailureKind.OTHER)


def classify_failure(exc: BaseException) -> FailureKind:
    status = getattr(exc, "status_code", None)
    if status == 429:
        return FailureKind.RATE_LIMITED
    if status == 400:
        return FailureKind.BAD_REQUEST
    return FailureKind.OTHER


def build_error_item(feed_key: str, kind: FailureKind, source: str = "") -> NormalizedItem:
    return NormalizedItem(
        title="Failed to load feed",
        description=FAILURE_MESSAGES[kind],
        media_url=None,
        source=source or feed_key,
        is_error=True,
        extra={"feed": feed_key, "error_kind": kind.value},
    )


@dataclass
class SourceResult:
    url: str
    items: List[NormalizedItem] = field(default_factory=list)
    failure: Optional[FailureKind] = None


class FeedLoader:
    """
    Loads feeds lazily and caches each feed's item list by key.

    Fetches for one feed run concurrently in ``executor`` (the loop's default
    thread pool when None); every result is applied back on the event loop.
    """

    def __init__(
        self,
        feed_spec: FeedSpec,
        client: Optional[HttpClient] = None,
        registry: Optional[AdapterRegistry] = None,
        store: Optional[LocalStore] = None,
        feed_type: Optional[str] = None,
        fields: Optional[Sequence[str]] = None,
        default_latitude: str = DEFAULT_LATITUDE,
        default_longitude: str = DEFAULT_LONGITUDE,
        executor: Optional[Executor] = None,
    ) -> None:
        self.feed_spec = feed_spec
        self.client = client or HttpClient()
        self.registry = registry or build_registry(fields=fields)
        self.store = store or LocalStore()
        self.feed_type = feed_type
        self.default_latitude = default_latitude
        self.default_longitude = default_longitude
        self.executor = executor
        self._status: Dict[str, LoadStatus] = {}
        self._items: Dict[str, List[NormalizedItem]] = {}
        self._inflight: Dict[str, asyncio.Task] = {}
        self._closed = False

    def status(self, feed_key: str) -> LoadStatus:
        return self._status.setdefault(feed_key, LoadStatus.UNLOADED)

    def items(self, feed_key: str) -> Optional[List[NormalizedItem]]:
        return self._items.get(feed_key)

    def is_loaded(self, feed_key: str) -> bool:
        return self.status(feed_key) is LoadStatus.LOADED

    async def load_feed(self, feed_key: str) -> List[NormalizedItem]:
        if feed_key not in self.feed_spec:
            raise UnknownFeedError(feed_key)
        if self.is_loaded(feed_key):
            return self._items[feed_key]
        task = self._inflight.get(feed_key)
        if task is None:
            self._status[feed_key] = LoadStatus.LOADING
            task = asyncio.ensure_future(self._load(feed_key))
            self._inflight[feed_key] = task
            task.add_done_callback(partial(self._forget_task, feed_key))
        return await asyncio.shield(task)

    async def reload(self, feed_key: str) -> List[NormalizedItem]:
        if feed_key not in self.feed_spec:
            raise UnknownFeedError(feed_key)
        if feed_key not in self._inflight:
            self._items.pop(feed_key, None)
            self._status[feed_key] = LoadStatus.UNLOADED
        return await self.load_feed(feed_key)

    def close(self) -> None:
        """In-flight fetches are left to finish; their results are discarded."""
        self._closed = True

    def snapshot(self) -> Dict[str, Dict[str, object]]:
        return {
            key: {
                "status": self.status(key).value,
                "items": len(self._items.get(key) or []),
                "urls": [redact_secrets(url) for url in self.resolve_urls(key)],
            }
            for key in self.feed_spec
        }

    def resolve_urls(self, feed_key: str) -> List[str]:
        urls: List[str] = []
        for entry in self.feed_spec[feed_key]:
            urls.extend(part.strip() for part in entry.split("|") if part.strip())
        return urls

    def _forget_task(self, feed_key: str, task: asyncio.Task) -> None:
        if self._inflight.get(feed_key) is task:
            del self._inflight[feed_key]

    async def _load(self, feed_key: str) -> List[NormalizedItem]:
        try:
            urls = self.resolve_urls(feed_key)
            results = await asyncio.gather(*(self._fetch_source(url) for url in urls))
            items: List[NormalizedItem] = []
            for result in results:
                items.extend(result.items)
            if not items:
                items = [self._total_failure_item(feed_key, results)]
        except Exception:
            logger.exception("Loading feed '%s' failed unexpectedly", feed_key)
            if not self._closed:
                self._status[feed_key] = LoadStatus.ERROR
            return [build_error_item(feed_key, FailureKind.OTHER)]

        if self._closed:
            logger.debug("Dropping late result for feed '%s' after close", feed_key)
            return items
        self._items[feed_key] = items
        self._status[feed_key] = LoadStatus.LOADED
        logger.info("Loaded feed '%s' with %d items from %d sources", feed_key, len(items), len(results))
        return items

    def _total_failure_item(self, feed_key: str, results: Sequence[SourceResult]) -> NormalizedItem:
        failures = {result.failure for result in results if result.failure}
        kind = next((candidate for candidate in _FAILURE_PRIORITY if candidate in failures), FailureKind.EMPTY)
        logger.warning("Feed '%s' produced no items (%s)", feed_key, kind.value)
        return build_error_item(feed_key, kind, source=self._label_for(results))

    def _label_for(self, results: Sequence[SourceResult]) -> str:
        if not results:
            return ""
        kind = resolve_kind(results[0].url, self.feed_type)
        return self.registry.label_for(kind, redact_secrets(results[0].url))

    def _prepare_url(self, url: str, kind: SourceKind) -> str:
        if kind is SourceKind.CIVIC_ISSUE:
            latitude = self.store.get_item("latitude") or self.default_latitude
            longitude = self.store.get_item("longitude") or self.default_longitude
            return substitute_coordinates(url, latitude, longitude)
        if kind is SourceKind.SPREADSHEET_CSV:
            return normalize_spreadsheet_url(url)
        return url

    async def _fetch_source(self, url: str) -> SourceResult:
        kind = resolve_kind(url, self.feed_type)
        request_url = self._prepare_url(url, kind)
        loop = asyncio.get_running_loop()
        try:
            body = await loop.run_in_executor(self.executor, self.client.get, request_url)
        except FetchError as exc:
            logger.warning("Fetch failed for %s: %s", redact_secrets(request_url), exc)
            return SourceResult(url=url, failure=classify_failure(exc))
        except Exception as exc:
            logger.warning("Fetch failed for %s: %s", redact_secrets(request_url), redact_secrets(str(exc)))
            return SourceResult(url=url, failure=FailureKind.OTHER)

        try:
            items = self.registry.normalize(body, kind, request_url)
        except Exception as exc:
            logger.warning("Could not normalize %s response from %s: %s", kind.value, redact_secrets(request_url), exc)
            return SourceResult(url=url, failure=FailureKind.OTHER)
        logger.debug("Normalized %d items from %s", len(items), redact_secrets(request_url))
        return SourceResult(url=url, items=items)
