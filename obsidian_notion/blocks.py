from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import ClassVar, Dict, List, Optional, Sequence
from urllib.parse import urlparse


CHUNK_SIZE = 1900


@dataclass(frozen=True)
class Annotations:
    '''Styling flags carried by a rich-text run'''

    bold: bool = False
    italic: bool = False
    strikethrough: bool = False
    underline: bool = False
    code: bool = False

    def to_notion(self) -> Dict[str, object]:
        return {
            "bold": self.bold
            ,"italic": self.italic
            ,"strikethrough": self.strikethrough
            ,"underline": self.underline
            ,"code": self.code
            ,"color": "default"
        }


PLAIN = Annotations()


def is_web_url(url: Optional[str]) -> bool:
    """Notion only accepts absolute http(s) URLs for links and external images."""

    if not url:
        return False
    parsed = urlparse(url.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


@dataclass
class RichText:
    content: str
    annotations: Annotations = PLAIN
    link: Optional[str] = None

    def with_content(self, content: str) -> "RichText":
        return replace(self, content=content)

    def to_notion(self) -> List[Dict]:
        """Serialize into one or more API runs, splitting oversized content."""

        pieces = [self.content[i : i + CHUNK_SIZE] for i in range(0, len(self.content), CHUNK_SIZE)] or [""]
        runs: List[Dict] = []
        for piece in pieces:
            text: Dict[str, object] = {"content": piece}
            if is_web_url(self.link):
                text["link"] = {"url": self.link}
            run: Dict[str, object] = {"type": "text", "text": text}
            if self.annotations != PLAIN:
                run["annotations"] = self.annotations.to_notion()
            runs.append(run)
        return runs


def rich_text_to_notion(runs: Sequence[RichText]) -> List[Dict]:
    serialized: List[Dict] = []
    for run in runs:
        serialized.extend(run.to_notion())
    return serialized


def plain_text(runs: Sequence[RichText]) -> str:
    return "".join(run.content for run in runs)


class Block:
    """Base of the block variants; ``kind`` is the Notion block type name."""

    kind: ClassVar[str] = ""

    def body(self) -> Dict:
        raise NotImplementedError

    def to_notion(self) -> Dict:
        return {"object": "block", "type": self.kind, self.kind: self.body()}


@dataclass
class ParagraphBlock(Block):
    kind: ClassVar[str] = "paragraph"

    rich_text: List[RichText] = field(default_factory=list)

    def body(self) -> Dict:
        return {"rich_text": rich_text_to_notion(self.rich_text)}


@dataclass
class HeadingBlock(Block):
    level: int = 1
    rich_text: List[RichText] = field(default_factory=list)

    @property
    def kind(self) -> str:  # type: ignore[override]
        return f"heading_{min(max(self.level, 1), 3)}"

    def body(self) -> Dict:
        return {"rich_text": rich_text_to_notion(self.rich_text)}


@dataclass
class _NestingBlock(Block):
    rich_text: List[RichText] = field(default_factory=list)
    children: List[Block] = field(default_factory=list)

    def body(self) -> Dict:
        body: Dict[str, object] = {"rich_text": rich_text_to_notion(self.rich_text)}
        if self.children:
            body["children"] = blocks_to_notion(self.children)
        return body


@dataclass
class BulletedListItemBlock(_NestingBlock):
    kind: ClassVar[str] = "bulleted_list_item"


@dataclass
class NumberedListItemBlock(_NestingBlock):
    kind: ClassVar[str] = "numbered_list_item"


@dataclass
class QuoteBlock(_NestingBlock):
    kind: ClassVar[str] = "quote"


@dataclass
class ToDoBlock(_NestingBlock):
    kind: ClassVar[str] = "to_do"

    checked: bool = False

    def body(self) -> Dict:
        body = super().body()
        body["checked"] = self.checked
        return body


@dataclass
class CodeBlock(Block):
    kind: ClassVar[str] = "code"

    content: str = ""
    language: str = "plain text"

    def body(self) -> Dict:
        return {"rich_text": RichText(self.content).to_notion(), "language": self.language}


@dataclass
class DividerBlock(Block):
    kind: ClassVar[str] = "divider"

    def body(self) -> Dict:
        return {}


@dataclass
class ImageBlock(Block):
    kind: ClassVar[str] = "image"

    url: str = ""
    caption: List[RichText] = field(default_factory=list)

    def body(self) -> Dict:
        return {
            "type": "external"
            ,"external": {"url": self.url}
            ,"caption": rich_text_to_notion(self.caption)
        }


@dataclass
class TableRowBlock(Block):
    kind: ClassVar[str] = "table_row"

    cells: List[List[RichText]] = field(default_factory=list)

    def body(self) -> Dict:
        return {"cells": [rich_text_to_notion(cell) for cell in self.cells]}


@dataclass
class TableBlock(Block):
    kind: ClassVar[str] = "table"

    width: int = 0
    rows: List[TableRowBlock] = field(default_factory=list)
    has_column_header: bool = True

    def body(self) -> Dict:
        return {
            "table_width": self.width
            ,"has_column_header": self.has_column_header
            ,"has_row_header": False
            ,"children": blocks_to_notion(self.rows)
        }


def blocks_to_notion(blocks: Sequence[Block]) -> List[Dict]:
    """Serialize blocks into the ``children`` payload expected by the Notion API."""

    return [block.to_notion() for block in blocks]
