from __future__ import annotations

import logging
from typing import Dict, List, Tuple

import pytest

from obsidian_notion.config import ConfigurationError, EnvConfig
from obsidian_notion.exporter import MAX_CHILDREN_PER_REQUEST, batch_children, build_page_payload, export_note
from obsidian_notion.parser import parse_note_text


class FakeClient:
    def __init__(self) -> None:
        self.created: List[Dict] = []
        self.appended: List[Tuple[str, List[Dict]]] = []

    def create_page(self, payload: Dict) -> Dict:
        self.created.append(payload)
        return {"id": "page-1", "url": "https://www.notion.so/page-1"}

    def append_block_children(self, block_id: str, children: List[Dict]) -> Dict:
        self.appended.append((block_id, children))
        return {"results": children}


@pytest.fixture
def env_config() -> EnvConfig:
    return EnvConfig(token="t", database_ids={"default": "db-default", "coding": "db-coding"}, title_property="Page")


def test_dry_run_payload(env_config: EnvConfig) -> None:
    note = parse_note_text("---\ntitle: My Note\n---\n# Heading\n\nSee [[Other Note]]", "my-note")
    client = FakeClient()

    result = export_note(note, env_config, "coding", client=client)  # type: ignore[arg-type]

    assert result.sent is False
    assert client.created == []
    assert result.payload["parent"] == {"database_id": "db-coding"}
    assert result.payload["properties"] == {
        "Page": {"title": [{"type": "text", "text": {"content": "My Note"}}]}
    }
    assert [child["type"] for child in result.payload["children"]] == ["heading_1", "paragraph"]
    assert result.block_count == 2


def test_send_appends_remaining_children(env_config: EnvConfig, caplog: pytest.LogCaptureFixture) -> None:
    body = "\n\n".join(f"paragraph {i}" for i in range(MAX_CHILDREN_PER_REQUEST * 2 + 10))
    note = parse_note_text(body, "long-note")
    client = FakeClient()
    debug_logger = logging.getLogger("tests.exporter")

    with caplog.at_level(logging.INFO, logger="tests.exporter"):
        result = export_note(
            note
            ,env_config
            ,client=client  # type: ignore[arg-type]
            ,send_to_notion=True
            ,debug_logger=debug_logger
        )

    assert result.sent is True
    assert result.page_id == "page-1"
    assert result.notion_url == "https://www.notion.so/page-1"
    assert len(client.created[0]["children"]) == MAX_CHILDREN_PER_REQUEST
    assert [len(children) for _, children in client.appended] == [100, 10]
    assert all(block_id == "page-1" for block_id, _ in client.appended)
    assert "Appended 10 blocks to page-1" in caplog.text


def test_unknown_database_type(env_config: EnvConfig) -> None:
    note = parse_note_text("body", "n")
    with pytest.raises(ConfigurationError):
        export_note(note, env_config, "daily")


def test_build_page_payload_title_falls_back_to_file_name() -> None:
    note = parse_note_text("text", "2024-01-01 Standup")
    payload = build_page_payload(note, "db", [], title_property="Name")
    assert payload["properties"]["Name"]["title"][0]["text"]["content"] == "2024-01-01 Standup"
    assert payload["children"] == []


def test_batch_children() -> None:
    assert batch_children([{"i": i} for i in range(5)], size=2) == [
        [{"i": 0}, {"i": 1}],
        [{"i": 2}, {"i": 3}],
        [{"i": 4}],
    ]
    assert batch_children([]) == []


def test_debug_log_lists_tags_and_links(env_config: EnvConfig, caplog: pytest.LogCaptureFixture) -> None:
    note = parse_note_text("---\ntags: [alpha, beta]\n---\nSee [[Other Note]] and [[Third|3rd]]", "linked")
    debug_logger = logging.getLogger("tests.exporter.links")

    with caplog.at_level(logging.INFO, logger="tests.exporter.links"):
        export_note(note, env_config, debug_logger=debug_logger)

    assert "Note linked: tags=['alpha', 'beta'] wiki_links=['Other Note', 'Third']" in caplog.text
