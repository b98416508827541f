from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Sequence

from . import log
from .cache import dump_record, read_record
from .errors import ConfigError, ContentError
from .records import date_key
from .render import write_text
from .tasks import TaskTracker, walk_tree
from .utils import parse_list

RECENT_LIMIT = 5
OVERVIEW_LIMIT = 100
SUMMARY_LENGTH = 1000
SUMMARY_MARKER_RE = re.compile(r"<!--summary-(start|end)-->")
# len("<!--summary-start-->")
SUMMARY_MARKER_SKIP = 20
FENCE = "```"


@dataclass(frozen=True)
class IndexDescriptor:
    name: str
    data: Any


Indexer = Callable[[list], IndexDescriptor]


def without_content(record: dict) -> dict:
    return {key: value for key, value in record.items() if key != "content"}


def record_order(record: dict) -> tuple:
    # url breaks ties between records that share a date
    return date_key(record.get("date")), str(record.get("url", ""))


def newest_first(records: Iterable[dict]) -> list[dict]:
    ordered = sorted(records, key=record_order)
    ordered.reverse()
    return ordered


def recent_of(records: Iterable[dict], limit: int = RECENT_LIMIT) -> list[dict]:
    ordered = sorted(records, key=record_order)
    latest = ordered[-limit:] if limit > 0 else []
    latest.reverse()
    return latest


def all_indexer(records: list) -> IndexDescriptor:
    log.info("all..")
    return IndexDescriptor("all", newest_first(without_content(item) for item in records))


def recent_indexer(records: list) -> IndexDescriptor:
    log.info("recent..")
    return IndexDescriptor("recent", recent_of(without_content(item) for item in records))


def featured_indexer(records: list) -> IndexDescriptor:
    log.info("featured..")
    featured = (without_content(item) for item in records if item.get("featured"))
    return IndexDescriptor("featured", recent_of(featured))


def archives_indexer(records: list) -> IndexDescriptor:
    log.info("archives..")
    groups: dict[int, list[dict]] = {}
    for item in newest_first(without_content(item) for item in records):
        groups.setdefault(date_key(item.get("date")).year, []).append(item)
    data = [[str(year), groups[year]] for year in sorted(groups, reverse=True)]
    return IndexDescriptor("archives", data)


def tags_of(record: dict) -> list:
    tags = record.get("tags")
    if isinstance(tags, str):
        return parse_list(tags)
    if isinstance(tags, (list, tuple)):
        return [tag for tag in tags if isinstance(tag, (str, int, float))]
    return []


def tag_list_indexer(records: list) -> IndexDescriptor:
    log.info("taglist..")
    tags: list = []
    seen = set()
    for item in records:
        for tag in tags_of(item):
            if tag in seen:
                continue
            seen.add(tag)
            tags.append(tag)
    return IndexDescriptor("tagList", tags)


def strip_unbalanced(content: str, pattern: str = FENCE) -> str:
    """Cut ``content`` back until every ``pattern`` marker is closed."""
    open_count = content.count(pattern) % 2
    while open_count > 0:
        content = content[: content.rfind(pattern)]
        open_count -= 1
    return content


def summarize(content: str) -> str:
    start = 0
    end = SUMMARY_LENGTH
    for match in SUMMARY_MARKER_RE.finditer(content):
        if match.group(1) == "end":
            end = match.start()
            break
        start = match.start() + SUMMARY_MARKER_SKIP
    summary = strip_unbalanced(content[start:end])
    return summary.rstrip() + " ..."


def overview_shown(record: dict) -> bool:
    return record.get("overview") is not False and record.get("overviewShown") is not False


def overview_indexer(records: list) -> IndexDescriptor:
    log.info("overview..")
    data = []
    for item in newest_first(item for item in records if overview_shown(item))[:OVERVIEW_LIMIT]:
        content = item.get("content") or ""
        if len(content) > SUMMARY_LENGTH:
            item = dict(item, content=summarize(content))
        data.append(item)
    return IndexDescriptor("overview", data)


INDEXERS: dict[str, Indexer] = {
    "all": all_indexer,
    "recent": recent_indexer,
    "featured": featured_indexer,
    "archives": archives_indexer,
    "overview": overview_indexer,
    "tagList": tag_list_indexer,
}
DEFAULT_INDEXERS = tuple(INDEXERS)


def get_indexers(names: Sequence[str]) -> list[Indexer]:
    unknown = [name for name in names if name not in INDEXERS]
    if unknown:
        raise ConfigError(f"Unknown indexers: {', '.join(unknown)}")
    return [INDEXERS[name] for name in names]


def is_within(path: Path, parent: Path) -> bool:
    try:
        path.resolve().relative_to(parent.resolve())
    except ValueError:
        return False
    return True


async def load_records(content_dir: Path, indexes_dir: Path) -> list[dict]:
    records: list[dict] = []

    async def collect(path: Path) -> None:
        try:
            data = await read_record(path)
        except (OSError, ValueError) as exc:
            raise ContentError(path, str(exc)) from exc
        if not isinstance(data, dict):
            raise ContentError(path, "content record must be a JSON object")
        records.append(data)

    def on_file(entry: Path, tracker: TaskTracker) -> None:
        if entry.suffix.lower() != ".json" or is_within(entry, indexes_dir):
            return
        if entry.is_file():
            tracker.add(collect(entry))

    await walk_tree(content_dir, on_file, on_error=lambda exc: log.error(str(exc)))
    return records


def run_indexers(records: list, indexers: Sequence[Indexer]) -> list[IndexDescriptor]:
    descriptors = []
    for indexer in indexers:
        try:
            descriptors.append(indexer(records))
        except (KeyError, TypeError, ValueError) as exc:
            log.error(f"{getattr(indexer, '__name__', indexer)} => {exc}")
    return descriptors


async def write_index(indexes_dir: Path, descriptor: IndexDescriptor) -> Optional[Path]:
    path = indexes_dir / f"{descriptor.name}.json"
    try:
        await asyncio.to_thread(write_text, path, dump_record(descriptor.data))
    except (OSError, TypeError, ValueError) as exc:
        log.error(f"{descriptor.name} => {exc}")
        return None
    return path


async def write_indexes(indexes_dir: Path, descriptors: Sequence[IndexDescriptor]) -> list[Path]:
    written = await asyncio.gather(*(write_index(indexes_dir, item) for item in descriptors))
    return [path for path in written if path is not None]
