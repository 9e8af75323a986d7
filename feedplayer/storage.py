"""
File-backed key/value store standing in for browser local storage.

Only string values are kept, mirroring the browser API. A missing or corrupt
file reads as empty.
"""
from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class LocalStore:
    def __init__(self, storage_path: Optional[Path] = None) -> None:
        self.storage_path = storage_path
        self._lock = threading.Lock()
        self._memory: Dict[str, str] = self._load()

    def get_item(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with self._lock:
            return self._memory.get(key, default)

    def set_item(self, key: str, value: object) -> None:
        with self._lock:
            self._memory[key] = str(value)
            self._persist()

    def remove_item(self, key: str) -> None:
        with self._lock:
            if self._memory.pop(key, None) is not None:
                self._persist()

    def snapshot(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._memory)

    def _load(self) -> Dict[str, str]:
        if self.storage_path is None or not self.storage_path.exists():
            return {}
        try:
            blob = json.loads(self.storage_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable local store %s: %s", self.storage_path, exc)
            return {}
        if not isinstance(blob, dict):
            return {}
        return {str(key): str(value) for key, value in blob.items() if value is not None}

    def _persist(self) -> None:
        if self.storage_path is None:
            return
        try:
            self.storage_path.parent.mkdir(parents=True, exist_ok=True)
            self.storage_path.write_text(json.dumps(self._memory, indent=2), encoding="utf-8")
        except OSError as exc:
            logger.warning("Persisting local store failed: %s", exc)
