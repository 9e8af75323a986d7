"""
Pydantic views over upstream payloads.
Every field is optional and unknown keys are kept, so a sparse record parses
instead of raising.
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ApodEntry(_Lenient):
    title: Optional[str] = None
    explanation: Optional[str] = None
    url: Optional[str] = None
    hdurl: Optional[str] = None
    date: Optional[str] = None
    media_type: Optional[str] = None
    copyright: Optional[str] = None


class IssueMedia(_Lenient):
    image_full: Optional[str] = None
    representative_image_url: Optional[str] = None


class CivicIssue(_Lenient):
    summary: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[str] = None
    html_url: Optional[str] = None
    lat: Optional[str] = None
    lng: Optional[str] = None
    media: Optional[IssueMedia] = None

    @property
    def image_url(self) -> Optional[str]:
        if self.media is None:
            return None
        return self.media.image_full or self.media.representative_image_url


class SocialPost(_Lenient):
    title: Optional[str] = None
    content: Optional[str] = None
    description: Optional[str] = None
    summary: Optional[str] = None
    link: Optional[str] = None
    url: Optional[str] = None
    pubDate: Optional[str] = None
    published: Optional[str] = None
    date: Optional[str] = None
    media_url: Optional[str] = None
