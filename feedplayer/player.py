"""
Player session: mounts the parser, loader, playback machine and hash router
the way the host widget does, and tears them down on unmount.
"""
from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Executor
from typing import Callable, List, Optional, Sequence, Set, Union

from feedplayer.adapters import build_registry
from feedplayer.errors import FeedSpecError, UnknownFeedError
from feedplayer.feed_spec import parse_feed_spec
from feedplayer.http_client import HttpClient
from feedplayer.loader import FeedLoader
from feedplayer.media import MediaElement
from feedplayer.models import Cursor, FeedSpec, LoadStatus, NormalizedItem
from feedplayer.playback import PlaybackMachine
from feedplayer.router import HashRouter, HashTarget, Location
from feedplayer.settings import PlayerSettings, load_settings
from feedplayer.storage import LocalStore

logger = logging.getLogger(__name__)


class FeedPlayer:
    """
    One mounted player.

    Hash-change listeners schedule work on the running event loop, so
    navigation through ``location`` must happen while that loop runs.
    """

    def __init__(
        self,
        spec: Union[str, FeedSpec],
        *,
        feed_type: Optional[str] = None,
        fields: Optional[Sequence[str]] = None,
        location: Optional[Location] = None,
        settings: Optional[PlayerSettings] = None,
        client: Optional[HttpClient] = None,
        store: Optional[LocalStore] = None,
        media: Optional[MediaElement] = None,
        autoplay: Optional[bool] = None,
        require_media: bool = False,
        civic_limit: Optional[int] = None,
        executor: Optional[Executor] = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.spec = spec
        self.feed_type = feed_type
        self.fields = list(fields or [])
        self.location = location or Location()
        self.client = client
        self.store = store
        self.media = media
        self.autoplay = self.settings.autoplay if autoplay is None else autoplay
        self.require_media = require_media
        self.civic_limit = civic_limit
        self.executor = executor
        self.error: Optional[str] = None
        self.feed_spec: Optional[FeedSpec] = None
        self.loader: Optional[FeedLoader] = None
        self.machine: Optional[PlaybackMachine] = None
        self.router: Optional[HashRouter] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._tasks: Set[asyncio.Task] = set()
        self._owns_client = False
        self._closed = False

    @property
    def feed_keys(self) -> List[str]:
        return list(self.feed_spec or [])

    @property
    def cursor(self) -> Optional[Cursor]:
        return self.machine.cursor if self.machine else None

    @property
    def current_item(self) -> Optional[NormalizedItem]:
        return self.machine.current_item if self.machine else None

    def load_status(self, feed_key: str) -> LoadStatus:
        if self.loader is None:
            return LoadStatus.UNLOADED
        return self.loader.status(feed_key)

    async def mount(self) -> bool:
        try:
            if isinstance(self.spec, FeedSpec):
                if not self.spec:
                    raise FeedSpecError("The feed specification does not contain any feed URL.")
                self.feed_spec = self.spec
            else:
                self.feed_spec = parse_feed_spec(self.spec, self.feed_type)
        except FeedSpecError as exc:
            self.error = str(exc)
            logger.error("Cannot mount feed player: %s", exc)
            return False

        settings = self.settings
        if self.client is None:
            self.client = HttpClient(
                timeout=settings.http_timeout, max_retries=settings.http_retries, user_agent=settings.user_agent
            )
            self._owns_client = True
        self.loader = FeedLoader(
            self.feed_spec,
            client=self.client,
            registry=build_registry(fields=self.fields, require_media=self.require_media, civic_limit=self.civic_limit),
            store=self.store or LocalStore(settings.store_path),
            feed_type=self.feed_type,
            default_latitude=settings.default_latitude,
            default_longitude=settings.default_longitude,
            executor=self.executor,
        )
        self.machine = PlaybackMachine(
            self.loader,
            media=self.media,
            image_duration=settings.image_duration,
            progress_cap=settings.progress_cap,
            autoplay=self.autoplay,
        )
        self.router = HashRouter(self.location, self.feed_spec)
        self._unsubscribe = self.machine.subscribe(self._on_cursor_change)
        self.router.listen(self._on_hash_change)

        target = self.router.read()
        if target.feed_key is None:
            if target.requested_feed:
                logger.warning("Feed '%s' from URL hash not found; using default", target.requested_feed)
            target = HashTarget(self.feed_spec.default_key, 0, None)
        await self._adopt(target)
        return True

    async def select_feed(self, feed_key: str) -> bool:
        """Dropdown selection: always starts at the first item."""
        if self.router is None or self.machine is None:
            return False
        key = self.router.match_feed(feed_key)
        if key is None:
            raise UnknownFeedError(feed_key)
        return await self.machine.select_feed(key, 0)

    async def settle(self) -> None:
        """Wait for scheduled hash-change work to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self) -> None:
        self._closed = True
        if self.router is not None:
            self.router.close()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self.machine is not None:
            self.machine.close()
        if self.loader is not None:
            self.loader.close()
        if self._owns_client and self.client is not None:
            self.client.close()
            self._owns_client = False
        for task in list(self._tasks):
            task.cancel()

    async def _adopt(self, target: HashTarget) -> None:
        if self.machine is None or target.feed_key is None:
            return
        index = target.ref if target.ref is not None else 0
        try:
            await self.machine.select_feed(target.feed_key, index)
        except Exception:
            logger.exception("Could not adopt feed '%s' from URL hash", target.feed_key)

    def _on_hash_change(self, target: HashTarget) -> None:
        if self._closed or self.machine is None:
            return
        if target.feed_key is None:
            if target.requested_feed:
                logger.warning("Feed '%s' from URL hash not found", target.requested_feed)
            return
        if self.machine.cursor == Cursor(target.feed_key, target.ref if target.ref is not None else 0):
            return
        task = asyncio.get_running_loop().create_task(self._adopt(target))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _on_cursor_change(self, cursor: Cursor, items: List[NormalizedItem]) -> None:
        if self.router is None or not items:
            return
        self.router.write(cursor.feed_key, cursor.index)
