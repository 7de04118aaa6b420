"""
Markdown preprocessing applied before block conversion.

Obsidian syntax is rewritten into plain Markdown that a standard parser
understands: wiki-links become ordinary links with slug targets, image
embeds become ``[🖼 name]`` markers and tables get a uniform column count.
Fenced code is never touched.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from .tables import normalize_table_columns


FENCE = "```"

IMAGE_MARKER_RE = re.compile(r"\[🖼 ([^\]]+)\]")
IMAGE_EMBED_RE = re.compile(r"!\[\[([^\]|]+\.(?:png|jpe?g|gif|svg))(?:\|[^\]]*)?\]\]", re.IGNORECASE)
# Markdown punctuation in embedded file names is backslash-escaped inside markers.
MARKER_PUNCTUATION_RE = re.compile(r"([\\`*_{}\[\]()<>#+!|~&])")
MARKER_ESCAPE_RE = re.compile(r"\\([\\`*_{}\[\]()<>#+!|~&])")
DISPLAY_LINK_RE = re.compile(r"!?\[\[([^\]|]+)\|([^\]]+)\]\]")
# Inner text may hold single bracket pairs, e.g. [[Outer [Inner] Page]].
PLAIN_LINK_RE = re.compile(r"!?\[\[((?:[^\[\]]|\[[^\[\]]*\])+)\]\]")
HEADING_SPACE_RE = re.compile(r"^(#{1,6})([^#\s])", re.MULTILINE)


@dataclass
class Segment:
    content: str
    is_code: bool


@dataclass
class WikiLink:
    raw_inner: str
    display_text: Optional[str] = None

    @property
    def target(self) -> str:
        return self.raw_inner.strip()


def normalize_line_endings(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def split_code_segments(text: str) -> List[Segment]:
    """Split text into alternating prose/fenced-code segments.

    Every line whose stripped form starts with a fence toggles code mode and
    opens a new segment, so the closing fence line leads the following prose
    segment. Joining the contents gives back ``text`` unchanged.
    """

    segments: List[Segment] = []
    current: List[str] = []
    in_code = False

    for line in text.splitlines(keepends=True):
        if line.strip().startswith(FENCE):
            if current:
                segments.append(Segment("".join(current), in_code))
            current = [line]
            in_code = not in_code
            continue
        current.append(line)

    if current:
        segments.append(Segment("".join(current), in_code))
    return segments


def slugify(value: str) -> str:
    """Return the URL-safe slug used as a wiki-link target."""

    slug = value.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def parse_wiki_link(match: re.Match[str]) -> WikiLink:
    groups = match.groups()
    if len(groups) == 2:
        return WikiLink(raw_inner=groups[0], display_text=groups[1])
    return WikiLink(raw_inner=groups[0])


def format_wiki_link(link: WikiLink) -> str:
    display = link.display_text if link.display_text is not None else link.raw_inner
    return f"[{display}]({slugify(link.raw_inner)})"


def rewrite_wiki_links(text: str, debug_logger: Optional[logging.Logger] = None) -> str:
    """Rewrite ``[[target|display]]`` and ``[[target]]`` into Markdown links.

    Display-text links go first so the plain pass never sees them. Blank
    targets are left alone, and a link that fails to rewrite is kept as-is.
    """

    def replace(match: re.Match[str]) -> str:
        original = match.group(0)
        try:
            link = parse_wiki_link(match)
            if not link.target:
                return original
            return format_wiki_link(link)
        except Exception as exc:
            if debug_logger:
                debug_logger.warning("Could not rewrite wiki-link %r: %s", original, exc)
            return original

    text = DISPLAY_LINK_RE.sub(replace, text)
    return PLAIN_LINK_RE.sub(replace, text)


def mark_image_embeds(text: str) -> str:
    """Turn ``![[photo.png]]`` embeds into ``[🖼 photo.png]`` markers."""

    def marker(match: re.Match[str]) -> str:
        name = MARKER_PUNCTUATION_RE.sub(r"\\\1", match.group(1))
        return f"[🖼 {name}]"

    return IMAGE_EMBED_RE.sub(marker, text)


def unescape_marker_name(name: str) -> str:
    return MARKER_ESCAPE_RE.sub(r"\1", name)


def fix_heading_spaces(text: str) -> str:
    return HEADING_SPACE_RE.sub(r"\1 \2", text)


def preprocess_segment(text: str, debug_logger: Optional[logging.Logger] = None) -> str:
    text = mark_image_embeds(text)
    text = rewrite_wiki_links(text, debug_logger)
    text = fix_heading_spaces(text)
    return normalize_table_columns(text)


def preprocess(markdown: str, debug_logger: Optional[logging.Logger] = None) -> str:
    """Rewrite Obsidian markdown into plain Markdown, leaving fenced code untouched."""

    text = normalize_line_endings(markdown)
    pieces: List[str] = []
    for segment in split_code_segments(text):
        if segment.is_code:
            pieces.append(segment.content)
        else:
            pieces.append(preprocess_segment(segment.content, debug_logger))

    result = "".join(pieces)
    if debug_logger:
        debug_logger.info("Preprocessed markdown:\n%s", result)
    return result
