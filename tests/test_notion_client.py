from __future__ import annotations

import json
from typing import Any, Dict, List, Tuple

import pytest
import requests

from obsidian_notion.notion_client import NOTION_VERSION, NotionClient


class StubResponse:
    def __init__(self, status_code: int, body: Dict[str, Any]) -> None:
        self.status_code = status_code
        self._body = body
        self.text = json.dumps(body)

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self) -> Dict[str, Any]:
        return self._body


def _install(client: NotionClient, method: str, response: StubResponse) -> List[Tuple[str, Dict]]:
    calls: List[Tuple[str, Dict]] = []

    def fake(url: str, data: str) -> StubResponse:
        calls.append((url, json.loads(data)))
        return response

    setattr(client.session, method, fake)
    return calls


def test_session_headers() -> None:
    client = NotionClient("secret-token")
    assert client.session.headers["Authorization"] == "Bearer secret-token"
    assert client.session.headers["Notion-Version"] == NOTION_VERSION


def test_create_page_posts_payload() -> None:
    client = NotionClient("t")
    calls = _install(client, "post", StubResponse(200, {"id": "p1", "url": "https://notion.so/p1"}))

    response = client.create_page({"parent": {"database_id": "db"}})

    assert response["id"] == "p1"
    assert calls == [("https://api.notion.com/v1/pages", {"parent": {"database_id": "db"}})]


def test_append_block_children_patches_block() -> None:
    client = NotionClient("t")
    calls = _install(client, "patch", StubResponse(200, {"results": []}))

    client.append_block_children("page-1", [{"type": "divider"}])

    assert calls == [("https://api.notion.com/v1/blocks/page-1/children", {"children": [{"type": "divider"}]})]


def test_http_errors_are_reported_and_raised(capsys: pytest.CaptureFixture[str]) -> None:
    client = NotionClient("t")
    _install(client, "post", StubResponse(400, {"message": "body failed validation"}))

    with pytest.raises(requests.HTTPError):
        client.create_page({})
    assert "[error] Notion create failed" in capsys.readouterr().out
