from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

import yaml

from .errors import ConfigError
from .indexers import DEFAULT_INDEXERS
from .render import DEFAULT_EXTENSIONS
from .utils import parse_bool, parse_list

try:
    import tomllib as toml
except ImportError:
    import tomli as toml

DEFAULT_CONFIG = "contentgen.toml"
DRAFTS_DIR = Path("content") / "drafts"
PUBLISH_DIR = Path("content") / "published"
CONTENT_DIR = Path("public") / "content"
INDEXES_NAME = "indexes"


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        try:
            data = toml.loads(text)
        except toml.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in config file {path}: {exc}") from exc
    elif suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in config file {path}: {exc}") from exc
        if data is None:
            return {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must be a mapping: {path}")
    return data


@dataclass(frozen=True)
class PipelineConfig:
    drafts_dir: Path = DRAFTS_DIR
    publish_dir: Path = PUBLISH_DIR
    content_dir: Path = CONTENT_DIR
    indexes_dir: Path = CONTENT_DIR / INDEXES_NAME
    indexers: tuple[str, ...] = DEFAULT_INDEXERS
    markdown_extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    minify: bool = True
    minify_options: Mapping = field(default_factory=lambda: MappingProxyType({}))
    verbose: bool = False

    @classmethod
    def from_mapping(cls, values: Mapping, base_dir: Optional[Path] = None) -> "PipelineConfig":

        def dir_value(key: str, default: Path) -> Path:
            value = values.get(key)
            path = Path(value) if value else Path(default)
            if base_dir is not None and not path.is_absolute():
                path = base_dir / path
            return path

        content_dir = dir_value("content_dir", CONTENT_DIR)
        indexes_dir = content_dir / INDEXES_NAME
        if values.get("indexes_dir"):
            indexes_dir = dir_value("indexes_dir", indexes_dir)
        indexers = values.get("indexers")
        minify = values.get("minify")
        extensions = values.get("markdown_extensions")
        minify_options = values.get("minify_options") or {}
        if not isinstance(minify_options, Mapping):
            raise ConfigError("minify_options must be a table")
        return cls(
            drafts_dir=dir_value("drafts_dir", DRAFTS_DIR),
            publish_dir=dir_value("publish_dir", PUBLISH_DIR),
            content_dir=content_dir,
            indexes_dir=indexes_dir,
            indexers=tuple(parse_list(indexers)) if indexers is not None else DEFAULT_INDEXERS,
            markdown_extensions=(
                tuple(parse_list(extensions)) if extensions is not None else DEFAULT_EXTENSIONS
            ),
            minify=True if minify is None else parse_bool(minify),
            minify_options=MappingProxyType(dict(minify_options)),
            verbose=parse_bool(values.get("verbose", False)),
        )
