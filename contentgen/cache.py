from __future__ import annotations

import asyncio
import datetime as dt
import json
from pathlib import Path


async def should_build(force: bool, source: Path, dest: Path) -> bool:
    if force:
        return True
    try:
        if not await asyncio.to_thread(dest.exists):
            return True
        dest_stat, source_stat = await asyncio.gather(
            asyncio.to_thread(dest.stat), asyncio.to_thread(source.stat)
        )
    except OSError:
        return True
    return source_stat.st_mtime > dest_stat.st_mtime


def json_default(value: object) -> str:
    if isinstance(value, (dt.datetime, dt.date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def dump_record(data: object) -> str:
    return json.dumps(data, ensure_ascii=False, default=json_default)


def load_record(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


async def read_record(path: Path) -> dict:
    return await asyncio.to_thread(load_record, path)
