from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Optional

from .config import DATABASE_TYPES, load_env_file
from .exporter import export_note
from .parser import parse_note


LOG_PATH = Path(__file__).resolve().parent.parent / "export.log"
DEBUG_LOG_PATH = Path(__file__).resolve().parent.parent / "export.debug.log"
LOGGER_NAME = "obsidian_notion"


def build_arg_parser() -> argparse.ArgumentParser:
    """Construct the command-line parser for the migration CLI."""

    parser = argparse.ArgumentParser(description="Migrate a single Obsidian note into a Notion database.")
    parser.add_argument("--env", default=".env", help="Path to the .env file with Notion credentials.")
    parser.add_argument(
        "--database-type",
        default="default",
        choices=sorted(DATABASE_TYPES),
        help="Which configured Notion database receives the page.",
    )
    parser.add_argument("--send", action="store_true", help="Actually create the page in Notion.")
    parser.add_argument(
        "--debug-log",
        action="store_true",
        help="Write preprocessed markdown, payloads and Notion responses to export.debug.log",
    )
    parser.add_argument("note_path", help="Markdown file to migrate.")
    return parser


def run_cli(argv: Optional[list[str]] = None) -> None:
    """Entry point invoked by migrate_note_to_notion.py or tests."""

    parser = build_arg_parser()
    args = parser.parse_args(argv)

    env_config = load_env_file(Path(args.env))
    logger = configure_logging(env_config.log_level)
    debug_logger = configure_debug_logger() if args.debug_log else None

    note_path = Path(args.note_path)
    logger.info("Starting migration for %s", note_path)
    try:
        note = parse_note(note_path)
        result = export_note(
            note
            ,env_config
            ,args.database_type
            ,send_to_notion=args.send
            ,debug_logger=debug_logger
        )
    except Exception:
        logger.exception("Migration failed for %s", note_path)
        raise

    print(f"[info] Processed {note_path} into {result.block_count} blocks")
    logger.info("Processed %s into %d blocks", note_path, result.block_count)

    if not args.send:
        print(json.dumps(result.payload, indent=2, ensure_ascii=False))
        logger.info("Dry-run complete for %s", note_path)
    else:
        print(f"[info] Created Notion page: {result.notion_url}")
        logger.info("Created Notion page for %s at %s", note_path, result.notion_url)


def main() -> None:
    run_cli()


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Set up the primary logger that writes to export.log."""

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level, logging.INFO))
    if not logger.handlers:
        handler = logging.FileHandler(LOG_PATH, encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(handler)
    return logger


def configure_debug_logger() -> logging.Logger:
    """Create or return the debug logger that captures markdown, payloads and API responses."""

    debug_logger = logging.getLogger(f"{LOGGER_NAME}.debug")
    if not debug_logger.handlers:
        debug_logger.setLevel(logging.INFO)
        handler = logging.FileHandler(DEBUG_LOG_PATH, encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s [DEBUG] %(message)s"))
        debug_logger.addHandler(handler)
    return debug_logger
