from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional


class ConfigurationError(RuntimeError):
    """Raised when required configuration is missing or malformed."""


DATABASE_TYPES: Dict[str, str] = {
    "default": "NOTION_DATABASE_ID",
    "important": "NOTION_IMPORTANT_NOTES_DB",
    "daily": "NOTION_DAILY_NOTES_DB",
    "project": "NOTION_PROJECT_NOTES_DB",
    "coding": "NOTION_CODING_NOTES_DB",
}

TOKEN_KEYS = ("NOTION_TOKEN", "NOTION_API_KEY")


@dataclass
class EnvConfig:
    '''Settings read from the .env file and the environment'''

    token: str
    database_ids: Dict[str, str] = field(default_factory=dict)
    title_property: str = "Name"
    log_level: str = "INFO"

    def database_id(self, database_type: str = "default") -> str:
        """Return the database id configured for a database type."""

        if database_type not in DATABASE_TYPES:
            choices = ", ".join(DATABASE_TYPES)
            raise ConfigurationError(f"Invalid database type: {database_type} (expected one of {choices})")
        database_id = self.database_ids.get(database_type)
        if not database_id:
            raise ConfigurationError(
                f"No Notion database configured for '{database_type}'. Set {DATABASE_TYPES[database_type]} in .env."
            )
        return database_id


def read_env_file(path: Path) -> Dict[str, str]:
    raw: Dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        raw[key.strip()] = value.strip().strip('"').strip("'")
    return raw


def load_env_file(path: Path, environ: Optional[Mapping[str, str]] = None) -> EnvConfig:
    """Parse the provided .env file, filling gaps from the environment."""

    raw: Dict[str, str] = dict(os.environ if environ is None else environ)
    if path.exists():
        raw.update(read_env_file(path))

    token = next((raw[key] for key in TOKEN_KEYS if raw.get(key)), None)
    if not token:
        raise ConfigurationError("Missing env var: NOTION_TOKEN")

    database_ids = {name: raw[key] for name, key in DATABASE_TYPES.items() if raw.get(key)}
    if not database_ids:
        raise ConfigurationError("Provide at least one database id (e.g. NOTION_DATABASE_ID) in .env")

    return EnvConfig(
        token=token
        ,database_ids=database_ids
        ,title_property=raw.get("NOTION_TITLE_PROPERTY") or "Name"
        ,log_level=(raw.get("LOG_LEVEL") or "INFO").upper()
    )
