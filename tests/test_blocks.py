from __future__ import annotations

from obsidian_notion.blocks import (
    CHUNK_SIZE,
    Annotations,
    BulletedListItemBlock,
    CodeBlock,
    DividerBlock,
    HeadingBlock,
    ImageBlock,
    ParagraphBlock,
    RichText,
    TableBlock,
    TableRowBlock,
    ToDoBlock,
    blocks_to_notion,
    is_web_url,
)


def test_paragraph_payload() -> None:
    payload = ParagraphBlock(rich_text=[RichText("hello")]).to_notion()
    assert payload == {
        "object": "block",
        "type": "paragraph",
        "paragraph": {"rich_text": [{"type": "text", "text": {"content": "hello"}}]},
    }


def test_annotations_and_links() -> None:
    run = RichText("site", Annotations(bold=True), link="https://example.com")
    serialized = run.to_notion()[0]
    assert serialized["text"] == {"content": "site", "link": {"url": "https://example.com"}}
    assert serialized["annotations"]["bold"] is True
    assert serialized["annotations"]["italic"] is False


def test_relative_links_are_sent_as_plain_text() -> None:
    serialized = RichText("Page", link="some-page").to_notion()[0]
    assert serialized["text"] == {"content": "Page"}


def test_long_content_is_split_into_runs() -> None:
    runs = RichText("x" * (CHUNK_SIZE * 2 + 5)).to_notion()
    assert [len(run["text"]["content"]) for run in runs] == [CHUNK_SIZE, CHUNK_SIZE, 5]


def test_heading_levels() -> None:
    assert HeadingBlock(level=2, rich_text=[RichText("x")]).to_notion()["type"] == "heading_2"
    assert HeadingBlock(level=6).to_notion()["type"] == "heading_3"


def test_nested_children_and_to_do() -> None:
    item = ToDoBlock(
        rich_text=[RichText("task")],
        children=[BulletedListItemBlock(rich_text=[RichText("sub")])],
        checked=True,
    )
    body = item.to_notion()["to_do"]
    assert body["checked"] is True
    assert body["children"][0]["type"] == "bulleted_list_item"
    assert "children" not in BulletedListItemBlock(rich_text=[RichText("a")]).to_notion()["bulleted_list_item"]


def test_code_divider_image_table() -> None:
    payloads = blocks_to_notion(
        [
            CodeBlock(content="print(1)", language="python"),
            DividerBlock(),
            ImageBlock(url="https://example.com/a.png"),
            TableBlock(
                width=2,
                rows=[TableRowBlock(cells=[[RichText("a")], []])],
            ),
        ]
    )
    assert payloads[0]["code"]["language"] == "python"
    assert payloads[0]["code"]["rich_text"][0]["text"]["content"] == "print(1)"
    assert payloads[1] == {"object": "block", "type": "divider", "divider": {}}
    assert payloads[2]["image"]["external"] == {"url": "https://example.com/a.png"}
    table = payloads[3]["table"]
    assert table["table_width"] == 2
    assert table["children"][0]["table_row"]["cells"][1] == []


def test_is_web_url() -> None:
    assert is_web_url("https://example.com/x")
    assert not is_web_url("maslows-needs")
    assert not is_web_url("mailto:me@example.com")
    assert not is_web_url(None)
