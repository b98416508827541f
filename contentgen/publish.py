from __future__ import annotations

import datetime as dt
from pathlib import Path, PurePosixPath
from typing import Optional

from .content import extract_title, slugify
from .records import DraftRecord, PublishedRecord, coerce_datetime, scrub
from .utils import date_prefix, month_string


def resolve_url(metadata: dict, date: dt.datetime) -> str:
    url = metadata.get("url")
    if url:
        url = str(url)
        if url.startswith("/"):
            url = url[1:]
        return url
    slug = slugify(str(metadata.get("slug") or metadata.get("title") or ""))
    return f"{date.year}/{month_string(date)}/{slug}"


def resolve_publish(
    draft: DraftRecord, now: Optional[dt.datetime] = None, source: Optional[Path] = None
) -> PublishedRecord:
    meta = dict(draft.metadata)
    if not meta.get("date"):
        meta["date"] = (now or dt.datetime.now()).replace(microsecond=0)
    date = coerce_datetime(meta["date"], source)

    if not meta.get("title"):
        meta["title"] = extract_title(draft.body) or draft.name

    url = resolve_url(meta, date)
    meta = scrub(meta)
    meta["url"] = url
    return PublishedRecord(name=draft.name, date=date, url=url, metadata=meta, body=draft.body)


def publish_filename(record: PublishedRecord) -> str:
    prefix = date_prefix(record.date)
    if record.name.startswith(prefix):
        return record.name
    return f"{prefix}-{record.name}"


def publish_destination(record: PublishedRecord, publish_dir: Path) -> Path:
    url_dir = PurePosixPath(record.url).parent
    return Path(publish_dir).joinpath(*url_dir.parts, f"{publish_filename(record)}.md")
