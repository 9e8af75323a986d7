"""
Playback state machine: owns the cursor and drives automatic advancement.

Images advance on a countdown, videos on the media element's end signal;
both feed the same automatic ``advance-next`` transition. Every cursor move
cancels the outstanding countdown first, so at most one timer is ever live.
"""
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from feedplayer.errors import MediaPlaybackError
from feedplayer.loader import FeedLoader
from feedplayer.media import HeadlessVideo, MediaElement
from feedplayer.models import Cursor, MediaKind, NormalizedItem

logger = logging.getLogger(__name__)

CursorListener = Callable[[Cursor, List[NormalizedItem]], None]


class PlaybackState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SHOWING = "showing"
    PLAYING = "playing"
    PAUSED = "paused"


class PlaybackMachine:
    def __init__(
        self,
        loader: FeedLoader,
        media: Optional[MediaElement] = None,
        image_duration: float = 4.0,
        progress_cap: int = 7,
        autoplay: bool = False,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        self.loader = loader
        if media is None:
            media = HeadlessVideo(on_ended=self.on_media_ended)
        self.media = media
        self.image_duration = image_duration
        self.progress_cap = max(1, progress_cap)
        self.autoplay = autoplay
        self.state = PlaybackState.IDLE
        self.cursor: Optional[Cursor] = None
        self.items: List[NormalizedItem] = []
        self._loop = loop
        self._listeners: List[CursorListener] = []
        # Latest select_feed request wins, even for the same feed-key.
        self._selection = 0
        self._timer: Optional[asyncio.TimerHandle] = None
        self._timer_started_at: Optional[float] = None
        self._image_elapsed = 0.0
        self._failed_streak = 0
        self._closed = False

    @property
    def current_item(self) -> Optional[NormalizedItem]:
        if self.cursor is None or self.cursor.index >= len(self.items):
            return None
        return self.items[self.cursor.index]

    @property
    def effective_count(self) -> int:
        return min(len(self.items), self.progress_cap)

    @property
    def has_live_timer(self) -> bool:
        return self._timer is not None

    def subscribe(self, listener: CursorListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def select_feed(self, feed_key: str, index: int = 0, *, autoplay: Optional[bool] = None) -> bool:
        """
        Load ``feed_key`` if needed and move the cursor to ``index`` in it.

        Returns False when the result went stale: a later selection (of any
        feed, this one included) was made while it loaded, or the machine was
        closed.
        """
        if self._closed:
            return False
        self._selection += 1
        selection = self._selection
        if not self.loader.is_loaded(feed_key):
            self._halt()
            self.state = PlaybackState.LOADING
        items = await self.loader.load_feed(feed_key)
        if self._closed or selection != self._selection:
            logger.debug("Dropping stale selection of feed '%s'", feed_key)
            return False
        if not items:
            self.items = []
            self.cursor = None
            self.state = PlaybackState.IDLE
            return False
        if not self._valid_index(index, len(items)):
            logger.warning("Index %r is out of range for feed '%s' (%d items); using 0", index, feed_key, len(items))
            index = 0
        self._move_to(Cursor(feed_key, index), automatic=False, autoplay=autoplay, items=items)
        return True

    def play(self) -> bool:
        if self._closed or self.state not in (PlaybackState.SHOWING, PlaybackState.PAUSED):
            return False
        item = self.current_item
        if item is None:
            return False
        if item.media_kind is MediaKind.IMAGE:
            self._start_timer()
            self._failed_streak = 0
            self.state = PlaybackState.PLAYING
            return True
        if item.media_kind is MediaKind.VIDEO:
            try:
                self.media.play()
            except MediaPlaybackError as exc:
                logger.warning("Can't play video %s: %s", item.media_url, exc)
                self._skip_unplayable()
                return False
            self._failed_streak = 0
            self.state = PlaybackState.PLAYING
            return True
        logger.debug("Play ignored for %s item", item.media_kind.value)
        return False

    def pause(self) -> bool:
        if self.state is not PlaybackState.PLAYING:
            return False
        item = self.current_item
        if item is not None and item.media_kind is MediaKind.IMAGE:
            self._image_elapsed = self.image_elapsed
            self._cancel_timer()
        elif item is not None and item.media_kind is MediaKind.VIDEO:
            self.media.pause()
        self.state = PlaybackState.PAUSED
        return True

    def stop(self) -> None:
        self._cancel_timer()
        self._image_elapsed = 0.0
        item = self.current_item
        if item is not None and item.media_kind is MediaKind.VIDEO:
            self.media.pause()
            self.media.seek(0)
        if self.cursor is not None:
            self.state = PlaybackState.PAUSED

    def toggle(self) -> bool:
        if self.state is PlaybackState.PLAYING:
            return self.pause()
        return self.play()

    def advance_next(self) -> bool:
        return self._advance(1, automatic=False)

    def advance_prev(self) -> bool:
        return self._advance(-1, automatic=False)

    def seek_to_index(self, index: int) -> bool:
        if self.cursor is None or not self._valid_index(index, len(self.items)):
            logger.warning("Rejected seek to index %r (%d items)", index, len(self.items))
            return False
        self._move_to(Cursor(self.cursor.feed_key, index), automatic=False)
        return True

    def seek_to_ratio(self, ratio: float) -> bool:
        """Progress-bar click: ``ratio`` is the click offset over the bar width."""
        effective = self.effective_count
        if effective == 0:
            return False
        ratio = min(max(ratio, 0.0), 1.0)
        return self.seek_to_index(min(int(ratio * effective), effective - 1))

    def progress_fraction(self) -> float:
        effective = self.effective_count
        if self.cursor is None or effective == 0:
            return 0.0
        return min(1.0, (self.cursor.index + 1) / effective)

    def progress_markers(self) -> List[float]:
        effective = self.effective_count
        return [(index + 1) / effective for index in range(effective)]

    @property
    def image_elapsed(self) -> float:
        if self._timer is None or self._timer_started_at is None:
            return self._image_elapsed
        return self._image_elapsed + (self._event_loop().time() - self._timer_started_at)

    def on_media_ended(self, url: Optional[str] = None) -> None:
        item = self.current_item
        if self.state is not PlaybackState.PLAYING or item is None or item.media_kind is not MediaKind.VIDEO:
            return
        if url is not None and url != item.media_url:
            logger.debug("Ignoring end signal for stale media %s", url)
            return
        self._advance(1, automatic=True)

    def close(self) -> None:
        self._closed = True
        self._cancel_timer()
        self.media.pause()
        self._listeners.clear()
        self.state = PlaybackState.IDLE

    def snapshot(self) -> Dict[str, Any]:
        item = self.current_item
        return {
            "state": self.state.value,
            "feed": self.cursor.feed_key if self.cursor else None,
            "index": self.cursor.index if self.cursor else None,
            "items": len(self.items),
            "progress": round(self.progress_fraction(), 4),
            "current": item.to_dict() if item else None,
        }

    @staticmethod
    def _valid_index(index: Any, count: int) -> bool:
        return isinstance(index, int) and not isinstance(index, bool) and 0 <= index < count

    def _event_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def _advance(self, step: int, *, automatic: bool) -> bool:
        if self.cursor is None or not self.items:
            return False
        count = len(self.items)
        index = (self.cursor.index + step) % count
        if automatic:
            # Unplayable items stay listed but are never autoplayed.
            for _ in range(count):
                if self.items[index].is_playable:
                    break
                index = (index + step) % count
        self._move_to(Cursor(self.cursor.feed_key, index), automatic=automatic)
        return True

    def _move_to(
        self,
        cursor: Cursor,
        *,
        automatic: bool,
        autoplay: Optional[bool] = None,
        items: Optional[List[NormalizedItem]] = None,
    ) -> None:
        was_playing = self.state is PlaybackState.PLAYING
        self._halt()
        if items is not None:
            self.items = items
        self.cursor = cursor
        self._image_elapsed = 0.0
        item = self.items[cursor.index]
        if item.media_kind is MediaKind.VIDEO and item.media_url:
            self.media.load(item.media_url)
        self.state = PlaybackState.SHOWING
        logger.debug("Cursor moved to %s/%d (%s)", cursor.feed_key, cursor.index, item.media_kind.value)
        self._notify()
        keep_playing = automatic and was_playing
        if keep_playing or (self.autoplay if autoplay is None else autoplay):
            self.play()

    def _skip_unplayable(self) -> None:
        self._failed_streak += 1
        if self._failed_streak >= len(self.items):
            logger.warning("No playable media left in feed; stopping")
            self._failed_streak = 0
            self.state = PlaybackState.PAUSED
            return
        self.state = PlaybackState.PLAYING
        self._advance(1, automatic=True)

    def _halt(self) -> None:
        self._cancel_timer()
        item = self.current_item
        if item is not None and item.media_kind is MediaKind.VIDEO:
            self.media.pause()

    def _start_timer(self) -> None:
        self._cancel_timer()
        loop = self._event_loop()
        remaining = max(0.0, self.image_duration - self._image_elapsed)
        self._timer_started_at = loop.time()
        self._timer = loop.call_later(remaining, self._on_image_timer)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None
        self._timer_started_at = None

    def _on_image_timer(self) -> None:
        self._timer = None
        self._timer_started_at = None
        item = self.current_item
        if self.state is PlaybackState.PLAYING and item is not None and item.media_kind is MediaKind.IMAGE:
            self._advance(1, automatic=True)

    def _notify(self) -> None:
        if self.cursor is None:
            return
        for listener in list(self._listeners):
            try:
                listener(self.cursor, self.items)
            except Exception:
                logger.exception("Cursor listener failed")
