"""
Utility package for migrating Obsidian notes into Notion pages.

The core is the markdown conversion pipeline: Obsidian wiki-links, image
embeds and jagged tables are rewritten into plain Markdown, converted into
Notion blocks (with a line-per-paragraph fallback) and image markers are
moved into blocks of their own. The CLI wraps it for a single note that is
passed in explicitly.

Entry points are ``convert`` (re-exported here) and ``preprocess.preprocess``.
"""
from .converter import convert

__all__ = [
    "convert",
    "blocks",
    "config",
    "converter",
    "exporter",
    "notion_client",
    "parser",
    "preprocess",
    "tables",
]
