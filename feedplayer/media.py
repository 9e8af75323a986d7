"""
Video element abstraction driven by the playback machine.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

from feedplayer.errors import MediaPlaybackError

logger = logging.getLogger(__name__)


class MediaElement(Protocol):
    def load(self, url: str) -> None:
        ...

    def play(self) -> None:
        ...

    def pause(self) -> None:
        ...

    def seek(self, seconds: float) -> None:
        ...

    @property
    def position(self) -> float:
        ...


class HeadlessVideo:
    """
    In-memory stand-in for a host video element.

    The host (or a test) calls ``finish()`` to report end of media, which
    invokes ``on_ended`` with the URL that finished.
    """

    def __init__(self, on_ended: Optional[Callable[[str], None]] = None) -> None:
        self.on_ended = on_ended
        self.src: Optional[str] = None
        self.playing = False
        self._position = 0.0
        self.blocked = False

    @property
    def position(self) -> float:
        return self._position

    def load(self, url: str) -> None:
        self.src = url
        self.playing = False
        self._position = 0.0

    def play(self) -> None:
        if self.src is None or self.blocked:
            raise MediaPlaybackError(f"Cannot play {self.src!r}")
        self.playing = True

    def pause(self) -> None:
        self.playing = False

    def seek(self, seconds: float) -> None:
        self._position = max(0.0, seconds)

    def finish(self) -> None:
        if self.src is None:
            return
        self.playing = False
        if self.on_ended is not None:
            self.on_ended(self.src)
