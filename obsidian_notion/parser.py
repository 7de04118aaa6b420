from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

from .preprocess import normalize_line_endings, split_code_segments


BRACKETS_RE = re.compile(r"(!?)\[\[([^\]]+)\]\]")
FRONT_MATTER_RE = re.compile(r"^---\n(.*?)\n---(?:\n|$)(.*)$", re.DOTALL)


class FrontMatterError(ValueError):
    """Raised when a note's leading YAML block cannot be parsed."""


@dataclass
class ObsidianNote:
    front_matter: Dict[str, object]
    body: str
    wiki_links: List[str]
    tags: List[str]
    source_name: str
    path: Optional[Path] = None

    @property
    def title(self) -> str:
        for key in ("title", "page"):
            value = self.front_matter.get(key)
            if value:
                return str(value)
        return self.source_name


def parse_front_matter_and_remainder(text: str) -> Tuple[Dict[str, object], str]:
    """Split a leading ``---`` YAML block from the note body."""

    text = normalize_line_endings(text)
    match = FRONT_MATTER_RE.match(text)
    if not match:
        return {}, text

    try:
        data = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as exc:
        raise FrontMatterError(f"Invalid frontmatter: {exc}") from exc
    if not isinstance(data, dict):
        raise FrontMatterError("Frontmatter must be a mapping of properties")

    return data, match.group(2).strip()


def normalize_tags(raw: object) -> List[str]:
    if raw is None or raw == "":
        return []
    if isinstance(raw, (list, tuple)):
        return [str(tag).strip() for tag in raw if str(tag).strip()]
    return [str(raw).strip()]


def extract_bracket_links(text: str) -> List[str]:
    """Return distinct wiki-link targets outside fenced code, in order of appearance."""

    seen = set()
    ordered: List[str] = []
    for segment in split_code_segments(text):
        if segment.is_code:
            continue
        for match in BRACKETS_RE.finditer(segment.content):
            if match.group(1):
                continue
            value = match.group(2).split("|", 1)[0].strip()
            if value and value not in seen:
                seen.add(value)
                ordered.append(value)
    return ordered


def parse_note_text(text: str, source_name: str, path: Optional[Path] = None) -> ObsidianNote:
    front_matter, body = parse_front_matter_and_remainder(text)
    return ObsidianNote(
        front_matter=front_matter,
        body=body,
        wiki_links=extract_bracket_links(body),
        tags=normalize_tags(front_matter.get("tags")),
        source_name=source_name,
        path=path,
    )


def parse_note(path: Path) -> ObsidianNote:
    return parse_note_text(path.read_text(encoding="utf-8"), path.stem, path)
