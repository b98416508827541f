"""Tests for publish resolution and destination naming."""

import datetime as dt
from pathlib import Path

import pytest

from contentgen.content import parse_front_matter
from contentgen.errors import ContentError
from contentgen.publish import publish_destination, resolve_publish
from contentgen.records import DraftRecord, PublishedRecord

NOW = dt.datetime(2024, 3, 9, 14, 5, 6, 789)


def draft(name="my-post", body="", **metadata):
    return DraftRecord(name=name, metadata=metadata, body=body)


class TestResolvePublish:
    def test_date_defaults_to_now(self):
        record = resolve_publish(draft(title="Hi"), now=NOW)
        assert record.date == NOW.replace(microsecond=0)
        assert record.metadata["date"] == NOW.replace(microsecond=0)

    def test_existing_date_kept(self):
        record = resolve_publish(draft(title="Hi", date=dt.date(2020, 11, 2)), now=NOW)
        assert record.date == dt.datetime(2020, 11, 2)
        assert record.metadata["date"] == dt.date(2020, 11, 2)
        assert record.url == "2020/11/hi"

    def test_string_date(self):
        record = resolve_publish(draft(title="Hi", date="2021-01-15T08:00"), now=NOW)
        assert record.url == "2021/01/hi"

    def test_invalid_date(self):
        with pytest.raises(ContentError):
            resolve_publish(draft(title="Hi", date="someday"), now=NOW)

    def test_title_from_heading(self):
        record = resolve_publish(draft(body="# Hello World\n\ntext"), now=NOW)
        assert record.title == "Hello World"
        assert record.url == "2024/03/hello-world"

    def test_title_falls_back_to_name(self):
        record = resolve_publish(draft(name="fallback-name", body="# Hello *there*"), now=NOW)
        assert record.title == "fallback-name"
        assert record.url == "2024/03/fallback-name"

    def test_slug_overrides_title(self):
        record = resolve_publish(draft(title="Long Title", slug="Short One"), now=NOW)
        assert record.url == "2024/03/short-one"

    def test_explicit_url_wins(self):
        record = resolve_publish(draft(title="T", slug="s", url="/foo/bar"), now=NOW)
        assert record.url == "foo/bar"
        assert record.metadata["url"] == "foo/bar"

    def test_explicit_url_strips_single_separator(self):
        record = resolve_publish(draft(title="T", url="//foo"), now=NOW)
        assert record.url == "/foo"

    @pytest.mark.parametrize("title", ["Hello World", "Ünïcode: Títle!", "a/b/c", "  x  "])
    def test_derived_url_shape(self, title):
        record = resolve_publish(draft(title=title), now=NOW)
        assert not record.url.startswith("/")
        year, month, slug = record.url.split("/", 2)
        assert (year, month) == ("2024", "03")
        assert "/" not in slug

    def test_name_and_slug_not_persisted(self):
        record = resolve_publish(draft(title="T", slug="s"), now=NOW)
        meta, body = parse_front_matter(record.text())
        assert "slug" not in meta
        assert "name" not in meta
        assert meta["url"] == "2024/03/s"
        assert record.name == "my-post"

    def test_name_in_front_matter_dropped(self):
        record = resolve_publish(
            DraftRecord(name="file", metadata={"name": "other", "title": "T"}, body=""), now=NOW
        )
        assert "name" not in record.metadata
        assert record.name == "file"

    def test_body_preserved(self):
        record = resolve_publish(draft(title="T", body="para\n\nmore"), now=NOW)
        _, body = parse_front_matter(record.text())
        assert body == "para\n\nmore"


class TestPublishDestination:
    def record(self, name, url="2024/03/hello", date=dt.datetime(2024, 3, 1)):
        return PublishedRecord(name=name, date=date, url=url, metadata={})

    def test_prefixes_date(self, tmp_path: Path):
        dest = publish_destination(self.record("hello"), tmp_path)
        assert dest == tmp_path / "2024" / "03" / "2024-03-hello.md"

    def test_keeps_prefixed_name(self, tmp_path: Path):
        dest = publish_destination(self.record("2024-03-hello"), tmp_path)
        assert dest == tmp_path / "2024" / "03" / "2024-03-hello.md"

    def test_other_month_prefix_is_prefixed_again(self, tmp_path: Path):
        dest = publish_destination(self.record("2023-12-hello"), tmp_path)
        assert dest.name == "2024-03-2023-12-hello.md"

    def test_explicit_url_directory(self, tmp_path: Path):
        dest = publish_destination(self.record("about", url="pages/about"), tmp_path)
        assert dest == tmp_path / "pages" / "2024-03-about.md"

    def test_top_level_url(self, tmp_path: Path):
        dest = publish_destination(self.record("about", url="about"), tmp_path)
        assert dest == tmp_path / "2024-03-about.md"
