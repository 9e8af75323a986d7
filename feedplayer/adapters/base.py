"""
Adapter protocol + registry for the per-kind response normalizers.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol, Type, TypeVar

from pydantic import BaseModel, ValidationError

from feedplayer.models import NormalizedItem, SourceKind

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class SourceAdapter(Protocol):
    kind: SourceKind
    label: str

    def normalize(self, body: Any, source_url: str) -> List[NormalizedItem]:
        ...


def extract_records(body: Any, wrapper_key: Optional[str] = None, *, wrap_single: bool = False) -> List[Dict[str, Any]]:
    """
    Pull the list of upstream records out of a decoded body.

    ``wrapper_key`` unwraps ``{"issues": [...]}``-style envelopes. Anything that
    is not a list after unwrapping counts as zero records, unless
    ``wrap_single`` allows a lone object.
    """
    if wrapper_key and isinstance(body, dict) and wrapper_key in body:
        body = body[wrapper_key]
    if isinstance(body, dict) and wrap_single:
        body = [body]
    if not isinstance(body, list):
        return []
    return [record for record in body if isinstance(record, dict)]


def parse_records(model: Type[ModelT], records: Iterable[Dict[str, Any]], label: str) -> List[ModelT]:
    parsed: List[ModelT] = []
    for record in records:
        try:
            parsed.append(model.model_validate(record))
        except ValidationError as exc:
            logger.debug("Skipping malformed %s record: %s", label, exc.errors()[:1])
    return parsed


def extras_of(model: BaseModel, *names: str) -> Dict[str, Any]:
    values = {name: getattr(model, name, None) for name in names}
    return {name: value for name, value in values.items() if value is not None}


class AdapterRegistry:
    """
    Maps each source kind to the adapter that normalizes it.
    """

    def __init__(self) -> None:
        self._adapters: Dict[SourceKind, SourceAdapter] = {}

    def register(self, adapter: SourceAdapter) -> None:
        if adapter.kind in self._adapters:
            raise ValueError(f"Adapter for '{adapter.kind.value}' already registered")
        self._adapters[adapter.kind] = adapter

    def get(self, kind: SourceKind) -> SourceAdapter:
        return self._adapters.get(kind) or self._adapters[SourceKind.GENERIC]

    def label_for(self, kind: SourceKind, source_url: str) -> str:
        if kind is SourceKind.GENERIC:
            return source_url
        return self.get(kind).label

    def normalize(self, body: Any, kind: SourceKind, source_url: str) -> List[NormalizedItem]:
        return self.get(kind).normalize(body, source_url)

    def kinds(self) -> Iterable[SourceKind]:
        return self._adapters.keys()
