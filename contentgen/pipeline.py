from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Awaitable, Callable, Iterable, Optional

import yaml

from . import log
from .cache import dump_record, should_build
from .config import PipelineConfig
from .content import parse_front_matter
from .errors import ContentError, SourceNotFoundError
from .indexers import get_indexers, is_within, load_records, run_indexers, write_indexes
from .publish import publish_destination, resolve_publish
from .records import BuiltRecord, DraftRecord
from .render import Renderer, write_text
from .tasks import TaskTracker, walk_tree

SOURCE_SUFFIX = ".md"
RECORD_SUFFIX = ".json"

FileOperation = Callable[[Path], Awaitable[Optional[Path]]]


@dataclass
class StageResult:
    processed: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    failures: list[BaseException] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass
class RunResult:
    published: StageResult
    built: StageResult
    indexes: list[Path]


def record_path(content_dir: Path, url: str) -> Path:
    return Path(content_dir).joinpath(*PurePosixPath(f"{url.lstrip('/')}{RECORD_SUFFIX}").parts)


def locate(name: str, base_dir: Path) -> Optional[Path]:
    for candidate in (Path.cwd() / name, Path(base_dir) / name):
        if candidate.is_file():
            return candidate
    return None


class Pipeline:
    def __init__(self, config: PipelineConfig, renderer: Optional[Renderer] = None):
        self.config = config
        self.renderer = renderer or Renderer(
            extensions=config.markdown_extensions,
            minify=config.minify,
            minify_options=config.minify_options,
        )

    def _verbose(self, message: str, style: Optional[str] = None) -> None:
        if self.config.verbose:
            log.info(message, style=style)

    @staticmethod
    def _report(exc: BaseException) -> None:
        log.error(str(exc))

    async def _read(self, path: Path) -> str:
        if not await asyncio.to_thread(path.exists):
            raise SourceNotFoundError(path)
        self._verbose(f"processing {path.name}..")
        return await asyncio.to_thread(path.read_text, encoding="utf-8")

    async def _write(self, path: Path, dest: Path, data: str) -> None:
        try:
            await asyncio.to_thread(write_text, dest, data)
        except OSError as exc:
            raise ContentError(path, f"write failed: {exc}") from exc
        log.info(f"{path.name} => {dest}")

    async def _guarded(self, path: Path, operation: FileOperation) -> Optional[Path]:
        try:
            return await operation(path)
        except (ContentError, SourceNotFoundError):
            raise
        except (OSError, TypeError, ValueError, yaml.YAMLError) as exc:
            raise ContentError(path, str(exc)) from exc

    async def _track(self, path: Path, operation: FileOperation, result: StageResult) -> None:
        outcome = await self._guarded(path, operation)
        if outcome is None:
            result.skipped.append(path)
        else:
            result.processed.append(outcome)

    async def _process_tree(
        self, root: Path, operation: FileOperation, exclude: Optional[Path] = None
    ) -> StageResult:
        result = StageResult()

        def on_file(entry: Path, tracker: TaskTracker) -> None:
            if entry.suffix.lower() != SOURCE_SUFFIX or not entry.is_file():
                return
            if exclude is not None and is_within(entry, exclude):
                return
            tracker.add(self._track(entry, operation, result))

        tracker = await walk_tree(root, on_file, on_error=self._report)
        result.failures.extend(tracker.errors)
        return result

    async def _process_paths(self, paths: Iterable[Path], operation: FileOperation) -> StageResult:
        result = StageResult()
        tracker = TaskTracker(1, on_error=self._report)
        for path in paths:
            tracker.add(self._track(path, operation, result))
        tracker.remove_ref()
        await tracker.wait()
        result.failures.extend(tracker.errors)
        return result

    async def _process_named(
        self, names: Iterable[str], base_dir: Path, operation: FileOperation
    ) -> StageResult:
        found = []
        missing = []
        for name in names:
            path = locate(name, base_dir)
            if path is None:
                log.error(f"{name} not found")
                missing.append(SourceNotFoundError(name))
                continue
            log.info(f"processing {name}", style="cyan")
            found.append(path)
        result = await self._process_paths(found, operation)
        result.failures[:0] = missing
        return result

    # publish

    async def publish_file(self, path: Path) -> Path:
        path = Path(path)
        text = await self._read(path)
        meta, body = parse_front_matter(text, path)
        draft = DraftRecord(name=path.stem, metadata=meta, body=body)
        record = resolve_publish(draft, source=path)
        dest = publish_destination(record, self.config.publish_dir)
        await self._write(path, dest, record.text())
        await asyncio.to_thread(path.unlink)
        return dest

    async def publish_all(self) -> StageResult:
        log.info("publishing all drafts..", style="cyan")
        return await self._process_tree(
            Path(self.config.drafts_dir), self.publish_file, exclude=Path(self.config.publish_dir)
        )

    async def publish_named(self, names: Iterable[str]) -> StageResult:
        return await self._process_named(names, Path(self.config.drafts_dir), self.publish_file)

    # build

    async def build_file(self, path: Path, force: bool = False) -> Optional[Path]:
        path = Path(path)
        text = await self._read(path)
        meta, body = parse_front_matter(text, path)
        url = meta.get("url")
        if not url:
            raise ContentError(path, "missing url in front matter")
        dest = record_path(self.config.content_dir, str(url))
        if not await should_build(force, path, dest):
            self._verbose(f"skipped {path.name}", style="red")
            return None
        html_text = await asyncio.to_thread(self.renderer.render, body)
        record = BuiltRecord.from_front_matter(meta, html_text)
        await self._write(path, dest, dump_record(record.to_dict()))
        return dest

    async def build_all(self, force: bool = False) -> StageResult:
        log.info("building all published content..", style="cyan")
        publish_dir = Path(self.config.publish_dir)
        if not publish_dir.exists():
            raise SourceNotFoundError(publish_dir)
        await asyncio.to_thread(Path(self.config.content_dir).mkdir, parents=True, exist_ok=True)

        async def build(path: Path) -> Optional[Path]:
            return await self.build_file(path, force)

        return await self._process_tree(publish_dir, build)

    async def build_named(self, names: Iterable[str], force: bool = False) -> StageResult:
        async def build(path: Path) -> Optional[Path]:
            return await self.build_file(path, force)

        return await self._process_named(names, Path(self.config.publish_dir), build)

    # indexes

    async def build_indexes(self) -> list[Path]:
        log.info("building indexes..", style="cyan")
        indexers = get_indexers(self.config.indexers)
        indexes_dir = Path(self.config.indexes_dir)
        records = await load_records(Path(self.config.content_dir), indexes_dir)
        descriptors = run_indexers(records, indexers)
        return await write_indexes(indexes_dir, descriptors)

    # commands

    async def build(self, force: bool = False) -> tuple[StageResult, list[Path]]:
        built = await self.build_all(force)
        indexes = await self.build_indexes()
        return built, indexes

    async def run(self, force: bool = False) -> RunResult:
        published = await self.publish_all()
        built, indexes = await self.build(force)
        return RunResult(published=published, built=built, indexes=indexes)
