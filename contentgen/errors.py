from __future__ import annotations

from pathlib import Path


class ContentgenError(Exception):
    """Base exception for all contentgen errors."""


class ConfigError(ContentgenError):
    """Raised for unreadable config files and unknown option values."""


class SourceNotFoundError(ContentgenError):
    """A required input directory or file does not exist."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        super().__init__(f"not found: {self.path}")


class ContentError(ContentgenError):
    """Processing a single document failed."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path.name}: {reason}")
