"""Tests for the incremental build decision."""

import datetime as dt
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from contentgen.cache import dump_record, should_build


def touch(path: Path, mtime: float) -> Path:
    path.write_text("x", encoding="utf-8")
    os.utime(path, (mtime, mtime))
    return path


class TestShouldBuild:
    @pytest.mark.asyncio
    async def test_force_always_builds(self, tmp_path: Path):
        source = touch(tmp_path / "a.md", 1_000)
        dest = touch(tmp_path / "a.json", 2_000)
        assert await should_build(True, source, dest)

    @pytest.mark.asyncio
    async def test_missing_destination(self, tmp_path: Path):
        source = touch(tmp_path / "a.md", 1_000)
        assert await should_build(False, source, tmp_path / "a.json")

    @pytest.mark.asyncio
    async def test_fresh_destination_skipped(self, tmp_path: Path):
        source = touch(tmp_path / "a.md", 1_000)
        dest = touch(tmp_path / "a.json", 2_000)
        assert not await should_build(False, source, dest)

    @pytest.mark.asyncio
    async def test_equal_mtime_skipped(self, tmp_path: Path):
        source = touch(tmp_path / "a.md", 1_500)
        dest = touch(tmp_path / "a.json", 1_500)
        assert not await should_build(False, source, dest)

    @pytest.mark.asyncio
    async def test_newer_source_builds(self, tmp_path: Path):
        source = touch(tmp_path / "a.md", 3_000)
        dest = touch(tmp_path / "a.json", 2_000)
        assert await should_build(False, source, dest)

    @pytest.mark.asyncio
    async def test_missing_source_builds(self, tmp_path: Path):
        dest = touch(tmp_path / "a.json", 2_000)
        assert await should_build(False, tmp_path / "gone.md", dest)

    @pytest.mark.asyncio
    async def test_stat_failure_builds(self, tmp_path: Path):
        source = touch(tmp_path / "a.md", 1_000)
        dest = touch(tmp_path / "a.json", 2_000)
        with patch.object(Path, "stat", side_effect=PermissionError("denied")):
            assert await should_build(False, source, dest)


class TestDumpRecord:
    def test_dates_are_iso_strings(self):
        text = dump_record({"date": dt.datetime(2024, 3, 9, 14, 5), "day": dt.date(2024, 3, 9)})
        assert text == '{"date": "2024-03-09T14:05:00", "day": "2024-03-09"}'

    def test_unicode_kept(self):
        assert dump_record({"title": "Café"}) == '{"title": "Café"}'
