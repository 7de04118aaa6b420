"""
Markdown to Notion block conversion.

``convert`` preprocesses Obsidian markdown, hands it to the mistune-backed
primary converter and, if that raises for any reason, switches once to a
line-per-paragraph fallback. Image markers are then moved into paragraphs
of their own.
"""
from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Sequence

import mistune

from .blocks import (
    PLAIN,
    Annotations,
    Block,
    BulletedListItemBlock,
    CodeBlock,
    DividerBlock,
    HeadingBlock,
    ImageBlock,
    NumberedListItemBlock,
    ParagraphBlock,
    QuoteBlock,
    RichText,
    TableBlock,
    TableRowBlock,
    ToDoBlock,
    is_web_url,
    plain_text,
)
from .preprocess import IMAGE_MARKER_RE, normalize_line_endings, preprocess, unescape_marker_name


Converter = Callable[[str], List[Block]]

BR_TAG_RE = re.compile(r"^<br\s*/?>$", re.IGNORECASE)

LANGUAGE_MAP = {
    "py": "python", "python": "python",
    "js": "javascript", "javascript": "javascript",
    "ts": "typescript", "typescript": "typescript",
    "java": "java", "c": "c", "cpp": "c++", "c++": "c++",
    "cs": "c#", "csharp": "c#", "c#": "c#",
    "go": "go", "rust": "rust", "ruby": "ruby", "php": "php",
    "swift": "swift", "kotlin": "kotlin", "scala": "scala",
    "sql": "sql", "sh": "shell", "shell": "shell", "bash": "bash",
    "zsh": "shell", "powershell": "powershell", "ps1": "powershell",
    "yaml": "yaml", "yml": "yaml", "json": "json", "xml": "xml",
    "html": "html", "css": "css", "scss": "scss",
    "markdown": "markdown", "md": "markdown", "mermaid": "mermaid",
    "dockerfile": "docker", "docker": "docker", "r": "r", "lua": "lua",
}

_markdown = mistune.create_markdown(renderer="ast", plugins=["strikethrough", "table", "task_lists", "url"])


class ConversionError(RuntimeError):
    """Raised when the primary converter meets markdown it cannot map to blocks."""


def map_language(info: Optional[str]) -> str:
    if not info or not info.strip():
        return "plain text"
    return LANGUAGE_MAP.get(info.split()[0].lower(), "plain text")


def _merge_runs(runs: Sequence[RichText]) -> List[RichText]:
    merged: List[RichText] = []
    for run in runs:
        if merged and merged[-1].annotations == run.annotations and merged[-1].link == run.link:
            merged[-1] = merged[-1].with_content(merged[-1].content + run.content)
        else:
            merged.append(run)
    return merged


def inline_to_rich_text(
    tokens: Sequence[Dict]
    ,annotations: Annotations = PLAIN
    ,link: Optional[str] = None
) -> List[RichText]:
    """Flatten mistune inline tokens into styled runs."""

    runs: List[RichText] = []
    for token in tokens:
        kind = token["type"]
        children = token.get("children", [])
        if kind == "text":
            runs.append(RichText(token["raw"], annotations, link))
        elif kind in ("softbreak", "linebreak"):
            runs.append(RichText("\n", annotations, link))
        elif kind == "codespan":
            runs.append(RichText(token["raw"], replace(annotations, code=True), link))
        elif kind == "emphasis":
            runs.extend(inline_to_rich_text(children, replace(annotations, italic=True), link))
        elif kind == "strong":
            runs.extend(inline_to_rich_text(children, replace(annotations, bold=True), link))
        elif kind == "strikethrough":
            runs.extend(inline_to_rich_text(children, replace(annotations, strikethrough=True), link))
        elif kind == "link":
            runs.extend(inline_to_rich_text(children, annotations, token["attrs"]["url"]))
        elif kind == "image":
            url = token["attrs"]["url"]
            alt = inline_to_rich_text(children, annotations, url)
            runs.extend(alt or [RichText(url, annotations, url)])
        elif kind == "inline_html":
            raw = token["raw"]
            runs.append(RichText("\n" if BR_TAG_RE.match(raw.strip()) else raw, annotations, link))
        else:
            raise ConversionError(f"Unsupported inline token: {kind}")
    return _merge_runs(runs)


def _standalone_image(tokens: Sequence[Dict]) -> Optional[ImageBlock]:
    significant = [tok for tok in tokens if not (tok["type"] == "text" and not tok["raw"].strip())]
    if len(significant) != 1 or significant[0]["type"] != "image":
        return None
    url = significant[0]["attrs"]["url"]
    if not is_web_url(url):
        return None
    return ImageBlock(url=url, caption=inline_to_rich_text(significant[0].get("children", [])))


def _paragraph(token: Dict) -> List[Block]:
    children = token.get("children", [])
    image = _standalone_image(children)
    if image is not None:
        return [image]
    runs = inline_to_rich_text(children)
    if not runs:
        return []
    return [ParagraphBlock(rich_text=runs)]


def _code_content(raw: str) -> str:
    return raw[:-1] if raw.endswith("\n") else raw


def _list_items(token: Dict) -> List[Block]:
    ordered = token.get("attrs", {}).get("ordered", False)
    items: List[Block] = []
    for item in token.get("children", []):
        children = build_blocks(item.get("children", []))
        rich_text: List[RichText] = []
        if children and isinstance(children[0], ParagraphBlock):
            rich_text = children.pop(0).rich_text

        if item["type"] == "task_list_item":
            checked = bool(item.get("attrs", {}).get("checked", False))
            items.append(ToDoBlock(rich_text=rich_text, children=children, checked=checked))
        elif ordered:
            items.append(NumberedListItemBlock(rich_text=rich_text, children=children))
        else:
            items.append(BulletedListItemBlock(rich_text=rich_text, children=children))
    return items


def _quote(token: Dict) -> QuoteBlock:
    children = build_blocks(token.get("children", []))
    if children and isinstance(children[0], ParagraphBlock):
        return QuoteBlock(rich_text=children[0].rich_text, children=children[1:])
    return QuoteBlock(rich_text=[], children=children)


def _table(token: Dict) -> TableBlock:
    rows: List[List[List[RichText]]] = []
    for section in token.get("children", []):
        if section["type"] == "table_head":
            rows.append([inline_to_rich_text(cell.get("children", [])) for cell in section["children"]])
        elif section["type"] == "table_body":
            for row in section.get("children", []):
                rows.append([inline_to_rich_text(cell.get("children", [])) for cell in row["children"]])
        else:
            raise ConversionError(f"Unsupported table section: {section['type']}")

    width = max((len(cells) for cells in rows), default=0)
    padded = [cells + [[] for _ in range(width - len(cells))] for cells in rows]
    return TableBlock(width=width, rows=[TableRowBlock(cells=cells) for cells in padded])


def build_blocks(tokens: Sequence[Dict]) -> List[Block]:
    """Map mistune block tokens onto block variants."""

    blocks: List[Block] = []
    for token in tokens:
        kind = token["type"]
        if kind == "blank_line":
            continue
        if kind in ("paragraph", "block_text"):
            blocks.extend(_paragraph(token))
        elif kind == "heading":
            level = token.get("attrs", {}).get("level", 1)
            blocks.append(HeadingBlock(level=level, rich_text=inline_to_rich_text(token.get("children", []))))
        elif kind == "block_code":
            info = token.get("attrs", {}).get("info")
            blocks.append(CodeBlock(content=_code_content(token.get("raw", "")), language=map_language(info)))
        elif kind == "thematic_break":
            blocks.append(DividerBlock())
        elif kind == "block_quote":
            blocks.append(_quote(token))
        elif kind == "list":
            blocks.extend(_list_items(token))
        elif kind == "table":
            blocks.append(_table(token))
        elif kind == "block_html":
            raw = token.get("raw", "").strip()
            if raw:
                blocks.append(ParagraphBlock(rich_text=[RichText(raw)]))
        else:
            raise ConversionError(f"Unsupported block token: {kind}")
    return blocks


def markdown_to_blocks(markdown: str) -> List[Block]:
    """Primary conversion through the mistune AST."""

    return build_blocks(_markdown(markdown))


def fallback_blocks(markdown: str) -> List[Block]:
    """Turn every non-blank line into one plain paragraph. Never raises."""

    blocks: List[Block] = []
    for line in markdown.split("\n"):
        if not line.strip():
            continue
        blocks.append(ParagraphBlock(rich_text=[RichText(line)]))
    return blocks


def split_out_images(block: ParagraphBlock) -> List[Block]:
    """Split a paragraph so every ``[🖼 name]`` marker sits in a paragraph of its own."""

    results: List[Block] = []
    pending: List[RichText] = []

    for run in block.rich_text:
        pieces = IMAGE_MARKER_RE.split(run.content)
        if len(pieces) == 1:
            pending.append(run)
            continue

        # pieces alternate: text, marker name, text, marker name, ..., text
        for idx, piece in enumerate(pieces):
            if idx % 2 == 0:
                if piece:
                    pending.append(run.with_content(piece))
                continue
            if pending:
                results.append(ParagraphBlock(rich_text=pending))
                pending = []
            results.append(ParagraphBlock(rich_text=[RichText(f"[🖼 {unescape_marker_name(piece)}]")]))

    if pending:
        results.append(ParagraphBlock(rich_text=pending))
    return results


def postprocess_blocks(blocks: Sequence[Block]) -> List[Block]:
    processed: List[Block] = []
    for block in blocks:
        if isinstance(block, ParagraphBlock) and block.rich_text:
            processed.extend(split_out_images(block))
        else:
            processed.append(block)
    return processed


def convert(
    markdown: str
    ,*
    ,primary: Optional[Converter] = None
    ,debug_logger: Optional[logging.Logger] = None
) -> List[Block]:
    """Convert Obsidian markdown into Notion blocks; always returns a block list."""

    text = normalize_line_endings(markdown)
    preprocessed = preprocess(text, debug_logger)
    primary = primary or markdown_to_blocks

    try:
        blocks = primary(preprocessed)
    except Exception as exc:
        if debug_logger:
            debug_logger.warning("Primary conversion failed, falling back to line conversion: %s", exc)
        blocks = fallback_blocks(preprocessed)

    blocks = postprocess_blocks(blocks)
    if debug_logger:
        first = plain_text(getattr(blocks[0], "rich_text", [])) if blocks else ""
        debug_logger.info("Converted markdown into %d blocks (first: %r)", len(blocks), first[:80])
    return blocks
