from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Awaitable, Callable, Optional

from .errors import SourceNotFoundError

ErrorCallback = Callable[[BaseException], None]
FileCallback = Callable[[Path, "TaskTracker"], None]
EndCallback = Callable[[list, "TaskTracker"], None]


class TaskTracker:
    def __init__(self, start: int = 1, on_error: Optional[ErrorCallback] = None):
        self._current = start
        self._done = asyncio.Event()
        self._tasks: set[asyncio.Task] = set()
        self._on_error = on_error
        self.errors: list[BaseException] = []

    @property
    def current(self) -> int:
        return self._current

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def add_ref(self) -> None:
        self._current += 1

    def remove_ref(self) -> None:
        self._current -= 1
        if self._current == 0:
            self._done.set()

    def add(self, operation: Awaitable) -> asyncio.Task:
        self.add_ref()
        task = asyncio.ensure_future(operation)
        self._tasks.add(task)
        task.add_done_callback(self._settle)
        return task

    def _settle(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled():
            exc = task.exception()
            if exc is not None:
                self.errors.append(exc)
                if self._on_error is not None:
                    self._on_error(exc)
        self.remove_ref()

    async def wait(self) -> None:
        await self._done.wait()


async def walk_tree(
    root: Path,
    on_file: FileCallback,
    on_end: Optional[EndCallback] = None,
    on_error: Optional[ErrorCallback] = None,
) -> TaskTracker:
    root = Path(root)
    if not root.exists():
        raise SourceNotFoundError(root)

    tracker = TaskTracker(1, on_error=on_error)
    entries: list[Path] = []
    for entry in root.rglob("*"):
        entries.append(entry)
        on_file(entry, tracker)
        # let already registered work make progress while we enumerate
        await asyncio.sleep(0)
    if on_end is not None:
        on_end(entries, tracker)
    tracker.remove_ref()
    await tracker.wait()
    return tracker
