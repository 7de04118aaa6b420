from __future__ import annotations

from pathlib import Path

import pytest

from obsidian_notion.parser import (
    FrontMatterError,
    extract_bracket_links,
    normalize_tags,
    parse_front_matter_and_remainder,
    parse_note,
)


def test_note_without_frontmatter(tmp_path: Path) -> None:
    path = tmp_path / "noFrontmatter.md"
    path.write_text("Just some content without frontmatter", encoding="utf-8")

    note = parse_note(path)
    assert note.front_matter == {}
    assert note.body == "Just some content without frontmatter"
    assert note.tags == []
    assert note.title == "noFrontmatter"


def test_note_with_frontmatter(tmp_path: Path) -> None:
    path = tmp_path / "withFrontmatter.md"
    path.write_text(
        "---\ntitle: Coding Notes\ntags:\n  - coding\n  - python\n---\n\nHere is the body of the note.\n",
        encoding="utf-8",
    )

    note = parse_note(path)
    assert note.title == "Coding Notes"
    assert note.tags == ["coding", "python"]
    assert note.body == "Here is the body of the note."


def test_windows_line_endings() -> None:
    front_matter, body = parse_front_matter_and_remainder("---\r\npage: Home\r\n---\r\nBody\r\n")
    assert front_matter == {"page": "Home"}
    assert body == "Body"


def test_invalid_frontmatter_raises() -> None:
    with pytest.raises(FrontMatterError):
        parse_front_matter_and_remainder("---\nkey: [unclosed\n---\nbody")
    with pytest.raises(FrontMatterError):
        parse_front_matter_and_remainder("---\n- just\n- a list\n---\nbody")


def test_tags_normalization() -> None:
    assert normalize_tags(None) == []
    assert normalize_tags("single") == ["single"]
    assert normalize_tags(["a", " b ", ""]) == ["a", "b"]


def test_wiki_link_inventory() -> None:
    body = "See [[Alpha]] and [[Beta|the beta]] and [[Alpha]].\n![[pic.png]]\n```\n[[In Code]]\n```\n[[Gamma]]"
    assert extract_bracket_links(body) == ["Alpha", "Beta", "Gamma"]
