from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .blocks import Block, blocks_to_notion
from .config import EnvConfig
from .converter import convert
from .notion_client import NotionClient
from .parser import ObsidianNote


MAX_CHILDREN_PER_REQUEST = 100


def batch_children(children: Sequence[Dict], size: int = MAX_CHILDREN_PER_REQUEST) -> List[List[Dict]]:
    return [list(children[i : i + size]) for i in range(0, len(children), size)]


def build_page_payload(
    note: ObsidianNote
    ,database_id: str
    ,blocks: Sequence[Block]
    ,*
    ,title_property: str = "Name"
) -> Dict:
    """Assemble the JSON body for creating a Notion page from a converted note.

    Only the first request-sized batch of children goes into the payload;
    the rest is appended after the page exists.
    """

    children = blocks_to_notion(blocks)
    return {
        "parent": {"database_id": database_id}
        ,"properties": {
            title_property: {"title": [{"type": "text", "text": {"content": note.title}}]}
        }
        ,"children": children[:MAX_CHILDREN_PER_REQUEST]
    }


@dataclass
class ExportResult:
    note: ObsidianNote
    payload: Dict
    blocks: List[Block]

    sent: bool = False
    notion_url: Optional[str] = None
    page_id: Optional[str] = None

    @property
    def block_count(self) -> int:
        return len(self.blocks)


def export_note(
    note: ObsidianNote
    ,env_config: EnvConfig
    ,database_type: str = "default"
    ,*
    ,client: Optional[NotionClient] = None
    ,send_to_notion: bool = False
    ,debug_logger: Optional[logging.Logger] = None
) -> ExportResult:
    """Convert the note body, build the page payload and optionally create the page."""

    database_id = env_config.database_id(database_type)
    if debug_logger:
        debug_logger.info(
            "Note %s: tags=%s wiki_links=%s"
            ,note.source_name
            ,note.tags
            ,note.wiki_links
        )
    blocks = convert(note.body, debug_logger=debug_logger)
    payload = build_page_payload(note, database_id, blocks, title_property=env_config.title_property)

    if not send_to_notion:
        return ExportResult(note=note, payload=payload, blocks=blocks)

    if client is None:
        client = NotionClient(env_config.token)

    if debug_logger:
        debug_logger.info("Sending payload for %s:\n%s", note.source_name, json.dumps(payload, indent=2))
    response = client.create_page(payload)
    if debug_logger:
        debug_logger.info("Response for %s:\n%s", note.source_name, json.dumps(response, indent=2))

    page_id = response.get("id")
    remaining = blocks_to_notion(blocks)[MAX_CHILDREN_PER_REQUEST:]
    if remaining and page_id:
        for batch in batch_children(remaining):
            client.append_block_children(page_id, batch)
            if debug_logger:
                debug_logger.info("Appended %d blocks to %s", len(batch), page_id)

    return ExportResult(
        note=note
        ,payload=payload
        ,blocks=blocks

        ,sent=True
        ,notion_url=response.get("url")
        ,page_id=page_id
    )
