from __future__ import annotations

import json
from typing import Dict, List

try:
    import requests
except ImportError as exc:  # pragma: no cover
    raise SystemExit("The 'requests' package is required. Install it with 'pip install requests'.") from exc


NOTION_VERSION = "2022-06-28"
API_URL = "https://api.notion.com/v1"


class NotionClient:
    def __init__(self, token: str) -> None:
        """Initialize a session configured with the integration token."""

        self.session = requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {token}"
                ,"Notion-Version": NOTION_VERSION
                ,"Content-Type": "application/json"
            }
        )

    def create_page(self, payload: Dict) -> Dict:
        """Create a page via the Notion API and return the response body."""

        response = self.session.post(f"{API_URL}/pages", data=json.dumps(payload))
        try:
            response.raise_for_status()
        except requests.HTTPError as err:
            print(f"[error] Notion create failed: {response.text}")
            raise err
        return response.json()

    def append_block_children(self, block_id: str, children: List[Dict]) -> Dict:
        """Append blocks below an existing page or block."""

        url = f"{API_URL}/blocks/{block_id}/children"
        response = self.session.patch(url, data=json.dumps({"children": children}))
        try:
            response.raise_for_status()
        except requests.HTTPError as err:
            print(f"[error] Notion append failed: {response.text}")
            raise err
        return response.json()
