"""Shared fixtures for contentgen tests."""

from pathlib import Path

import pytest

from contentgen.config import PipelineConfig


@pytest.fixture
def site(tmp_path: Path) -> PipelineConfig:
    config = PipelineConfig(
        drafts_dir=tmp_path / "content" / "drafts",
        publish_dir=tmp_path / "content" / "published",
        content_dir=tmp_path / "public" / "content",
        indexes_dir=tmp_path / "public" / "content" / "indexes",
    )
    config.drafts_dir.mkdir(parents=True)
    config.publish_dir.mkdir(parents=True)
    return config
