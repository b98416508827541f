from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional, Sequence

import htmlmin
import markdown

from . import log

DEFAULT_EXTENSIONS = ("fenced_code", "tables", "codehilite")
EXTENSION_CONFIGS = {
    "codehilite": {"guess_lang": False},
}
# Comments stay so that summary markers survive into built content.
MINIFY_DEFAULTS = {
    "remove_comments": False,
    "remove_empty_space": True,
    "remove_all_empty_space": False,
    "reduce_empty_attributes": True,
    "reduce_boolean_attributes": False,
    "remove_optional_attribute_quotes": False,
    "convert_charrefs": True,
    "keep_pre": False,
    "pre_tags": ("pre", "textarea"),
    "pre_attr": "pre",
}


def merge_minify_options(selected: Optional[Mapping] = None) -> dict:
    options = dict(MINIFY_DEFAULTS)
    for key, value in (selected or {}).items():
        if key in options:
            options[key] = tuple(value) if isinstance(value, list) else value
        else:
            log.info(f"minify option '{key}' not recognized", style="yellow")
    return options


class Renderer:
    def __init__(
        self,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
        minify: bool = True,
        minify_options: Optional[Mapping] = None,
    ):
        self.extensions = list(extensions)
        self.minify = minify
        self.minify_options = merge_minify_options(minify_options)

    def to_html(self, text: str) -> str:
        md = markdown.Markdown(extensions=self.extensions, extension_configs=EXTENSION_CONFIGS)
        return md.convert(text)

    def render(self, text: str) -> str:
        html_text = self.to_html(text)
        if not self.minify:
            return html_text
        return htmlmin.minify(html_text, **self.minify_options)


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
