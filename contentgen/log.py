from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.text import Text

TAG = "contentgen: "

console = Console(highlight=False, soft_wrap=True)


def _line(message: str, style: Optional[str]) -> Text:
    line = Text(TAG, style="grey50")
    line.append(message, style=style)
    return line


def info(message: str, style: Optional[str] = None) -> None:
    console.print(_line(message, style))


def error(message: str) -> None:
    console.print(_line(f"error: {message}", "red"))
