from __future__ import annotations

import html as html_lib
import re
from pathlib import Path
from typing import Optional

import markdown
import yaml

from .errors import ContentError

# Characters that separate words; a run of them becomes a single dash.
SLUG_SEP_RE = re.compile(r"[\s\-_./\\:;|+~]+", re.UNICODE)
# Everything else that is not a word character is dropped outright.
SLUG_DROP_RE = re.compile(r"[^\w\s\-./\\:;|+~]+", re.UNICODE)
H1_RE = re.compile(r"<h1[^>]*>(?P<inner>.*?)</h1>", re.IGNORECASE | re.DOTALL)
TAG_RE = re.compile(r"<[^>]+>")
FRONT_MATTER_FENCE = "---"


def slugify(text: str) -> str:
    text = str(text).lower()
    text = SLUG_DROP_RE.sub("", text)
    text = SLUG_SEP_RE.sub("-", text)
    text = text.strip("-")
    return text or "post"


def parse_front_matter(text: str, source: Optional[Path] = None) -> tuple[dict, str]:
    clean_text = text.lstrip("\ufeff")
    lines = clean_text.splitlines()
    if not lines or lines[0].strip() != FRONT_MATTER_FENCE:
        return {}, clean_text

    end = None
    for i in range(1, len(lines)):
        if lines[i].strip() == FRONT_MATTER_FENCE:
            end = i
            break
    if end is None:
        return {}, clean_text

    block = "\n".join(lines[1:end])
    try:
        meta = yaml.safe_load(block)
    except yaml.YAMLError as exc:
        raise ContentError(source or "<text>", f"invalid front matter: {exc}") from exc
    if meta is None:
        meta = {}
    if not isinstance(meta, dict):
        raise ContentError(source or "<text>", "front matter must be a mapping")
    body = "\n".join(lines[end + 1 :])
    return meta, body


def serialize_front_matter(meta: dict, body: str) -> str:
    if not meta:
        return body
    block = yaml.safe_dump(meta, sort_keys=False, allow_unicode=True, default_flow_style=False)
    return f"{FRONT_MATTER_FENCE}\n{block}{FRONT_MATTER_FENCE}\n{body}"


def extract_title(body: str) -> Optional[str]:
    rendered = markdown.markdown(body, extensions=["fenced_code"])
    match = H1_RE.search(rendered)
    if not match:
        return None
    inner = match.group("inner")
    if TAG_RE.search(inner):
        return None
    title = html_lib.unescape(inner).strip()
    return title or None
