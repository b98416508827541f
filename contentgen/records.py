from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .content import serialize_front_matter
from .errors import ContentError

# Keys that only exist while a document moves from draft to published.
PUBLISH_ONLY_KEYS = ("name", "slug")


def coerce_datetime(value: object, source: Optional[Path] = None) -> dt.datetime:
    # aware datetimes are moved to UTC
    if isinstance(value, dt.datetime):
        if value.tzinfo is not None:
            value = value.astimezone(dt.timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, dt.date):
        return dt.datetime.combine(value, dt.time())
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return coerce_datetime(dt.datetime.fromisoformat(text), source)
        except ValueError:
            pass
    raise ContentError(source or "<record>", f"invalid date: {value!r}")


def date_key(value: object) -> dt.datetime:
    try:
        return coerce_datetime(value)
    except ContentError:
        return dt.datetime.min


def scrub(metadata: dict) -> dict:
    return {key: value for key, value in metadata.items() if key not in PUBLISH_ONLY_KEYS}


@dataclass(frozen=True)
class DraftRecord:
    name: str
    metadata: dict
    body: str


@dataclass(frozen=True)
class PublishedRecord:
    name: str
    date: dt.datetime
    url: str
    metadata: dict = field(default_factory=dict)
    body: str = ""

    @property
    def title(self) -> str:
        return str(self.metadata.get("title", ""))

    def text(self) -> str:
        return serialize_front_matter(scrub(self.metadata), self.body)


@dataclass(frozen=True)
class BuiltRecord:
    metadata: dict
    content: str

    @classmethod
    def from_front_matter(cls, metadata: dict, content: str) -> "BuiltRecord":
        return cls(metadata=scrub(metadata), content=content)

    def to_dict(self) -> dict:
        data = dict(self.metadata)
        data["content"] = self.content
        return data
