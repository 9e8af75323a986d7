"""
Address-bar fragment handling for deep links and back/forward navigation.

The fragment has the form ``feed=<key>&ref=<index>``; any other parameters a
host page keeps there are carried through every rewrite byte for byte.
"""
from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, NamedTuple, Optional
from urllib.parse import parse_qsl, quote, unquote

logger = logging.getLogger(__name__)

FEED_PARAM = "feed"
REF_PARAM = "ref"

FragmentListener = Callable[[str], None]


def parse_fragment(fragment: str) -> Dict[str, str]:
    params: Dict[str, str] = {}
    for name, value in parse_qsl(fragment.lstrip("#"), keep_blank_values=True):
        params.setdefault(name, value)
    return params


def update_fragment(fragment: str, updates: Dict[str, str]) -> str:
    """Rewrite only the named parameters; other segments keep their raw text and order."""
    raw = fragment.lstrip("#")
    segments = [segment for segment in raw.split("&") if segment]
    result: List[str] = []
    written = set()
    for segment in segments:
        name = unquote(segment.split("=", 1)[0])
        if name not in updates:
            result.append(segment)
        elif name not in written:
            result.append(f"{quote(name, safe='')}={quote(updates[name], safe='')}")
            written.add(name)
    for name, value in updates.items():
        if name not in written:
            result.append(f"{quote(name, safe='')}={quote(value, safe='')}")
    return "&".join(result)


def _parse_ref(raw: Optional[str]) -> Optional[int]:
    # ASCII digits only; int() rejects some characters isdigit() accepts.
    if raw is None:
        return None
    raw = raw.strip()
    if not (raw.isascii() and raw.isdigit()):
        return None
    try:
        return int(raw)
    except ValueError:
        return None


class Location:
    """
    In-memory address bar with a history stack.

    ``assign`` behaves like setting ``location.hash``: it pushes an entry and
    fires listeners. Pass ``silent=True`` for writes that mirror state the
    caller already holds.
    """

    def __init__(self, fragment: str = "") -> None:
        self._history: List[str] = [fragment.lstrip("#")]
        self._position = 0
        self._listeners: List[FragmentListener] = []

    @property
    def hash(self) -> str:
        return self._history[self._position]

    @property
    def history(self) -> List[str]:
        return list(self._history[: self._position + 1])

    def assign(self, fragment: str, *, silent: bool = False) -> None:
        fragment = fragment.lstrip("#")
        if fragment == self.hash:
            return
        del self._history[self._position + 1 :]
        self._history.append(fragment)
        self._position += 1
        if not silent:
            self._notify()

    def back(self) -> bool:
        if self._position == 0:
            return False
        self._position -= 1
        self._notify()
        return True

    def forward(self) -> bool:
        if self._position >= len(self._history) - 1:
            return False
        self._position += 1
        self._notify()
        return True

    def add_listener(self, listener: FragmentListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: FragmentListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        fragment = self.hash
        for listener in list(self._listeners):
            listener(fragment)


class HashTarget(NamedTuple):
    feed_key: Optional[str]
    ref: Optional[int]
    requested_feed: Optional[str]


class HashRouter:
    """
    Single owner of every fragment read and write.

    Feed names in the fragment match known feed-keys case-insensitively.
    """

    def __init__(self, location: Location, feed_keys: Iterable[str]) -> None:
        self.location = location
        self.feed_keys = list(feed_keys)
        self._listener: Optional[FragmentListener] = None

    def match_feed(self, name: Optional[str]) -> Optional[str]:
        if not name:
            return None
        wanted = name.strip().lower()
        for key in self.feed_keys:
            if key.lower() == wanted:
                return key
        return None

    def read(self, fragment: Optional[str] = None) -> HashTarget:
        params = parse_fragment(self.location.hash if fragment is None else fragment)
        requested = params.get(FEED_PARAM) or None
        raw_ref = params.get(REF_PARAM)
        ref = _parse_ref(raw_ref)
        if raw_ref is not None and ref is None:
            logger.warning("Ignoring invalid ref '%s' in URL hash", raw_ref)
        return HashTarget(self.match_feed(requested), ref, requested)

    def write(self, feed_key: str, index: int) -> bool:
        fragment = update_fragment(self.location.hash, {FEED_PARAM: feed_key, REF_PARAM: str(index)})
        if fragment == self.location.hash:
            return False
        self.location.assign(fragment, silent=True)
        return True

    def listen(self, callback: Callable[[HashTarget], None]) -> None:
        self.close()

        def on_fragment(fragment: str) -> None:
            callback(self.read(fragment))

        self._listener = on_fragment
        self.location.add_listener(on_fragment)

    def close(self) -> None:
        if self._listener is not None:
            self.location.remove_listener(self._listener)
            self._listener = None
