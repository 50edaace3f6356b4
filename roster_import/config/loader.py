from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from dotenv import load_dotenv
from jsonschema.exceptions import ValidationError

from ..models.user_record import FieldMapping
from ..parsing.csv_reader import normalize_header

"""Configuration loader.

Responsibilities:
- Load the YAML config (default config/import.yml)
- Validate it against config_schema.json
- Apply defaults and environment overrides (.env is loaded by load_env_file)
"""

__all__ = [
    "ConfigError",
    "DatabaseConfig",
    "RestConfig",
    "StoreConfig",
    "ImportConfig",
    "SCHEMA_PATH",
    "DEFAULT_CONFIG_PATH",
    "load_config",
    "load_env_file",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/import.yml")


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class DatabaseConfig:
    """PostgreSQL fallback settings; PG* / DATABASE_URL environment wins."""
    host: str | None
    port: int | None
    user: str | None
    password: str | None
    database: str | None
    dsn: str | None


@dataclass(frozen=True)
class RestConfig:
    url: str | None
    api_key: str | None
    timeout: float = 30.0


@dataclass(frozen=True)
class StoreConfig:
    backend: str  # rest | postgres | memory
    table: str = "users"
    key: str = "email"
    rest: RestConfig | None = None
    database: DatabaseConfig | None = None


@dataclass(frozen=True)
class ImportConfig:
    source_directory: str
    store: StoreConfig
    field_mappings: list[FieldMapping] = field(default_factory=list)
    persist_interest_fields: bool = True
    error_log_dir: str = "./logs"


def load_env_file(path: Path = Path(".env"), override: bool = True) -> bool:
    """Load .env via python-dotenv; .env values override the process environment."""
    if not path.exists():
        return False
    return load_dotenv(dotenv_path=path, override=override)


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: schema file missing or unreadable, or the data violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _load_field_mappings(raw: list[dict[str, Any]]) -> list[FieldMapping]:
    mappings: list[FieldMapping] = []
    seen: dict[str, str] = {}
    for item in raw:
        column = item["csv_column"]
        key = normalize_header(column)
        if key in seen:
            raise ConfigError(
                f"duplicate field mapping for column {column!r} (already mapped as {seen[key]!r})"
            )
        seen[key] = column
        mappings.append(
            FieldMapping(
                csv_column=column,
                user_field=item["user_field"],
                required=bool(item.get("required", False)),
            )
        )
    return mappings


def _load_store(raw: dict[str, Any]) -> StoreConfig:
    rest_raw = raw.get("rest") or {}
    db_raw = raw.get("database") or {}
    rest = RestConfig(
        url=os.getenv("STORE_URL") or rest_raw.get("url"),
        api_key=os.getenv("STORE_API_KEY") or rest_raw.get("api_key"),
        timeout=float(rest_raw.get("timeout", 30.0)),
    )
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )
    return StoreConfig(
        backend=raw["backend"],
        table=raw.get("table", "users"),
        key=raw.get("key", "email"),
        rest=rest,
        database=db,
    )


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> ImportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")

    _validate_config_schema(data)

    return ImportConfig(
        source_directory=data["source_directory"],
        store=_load_store(data["store"]),
        field_mappings=_load_field_mappings(data.get("field_mappings") or []),
        persist_interest_fields=data.get("persist_interest_fields", True),
        error_log_dir=data.get("error_log_dir", "./logs"),
    )
