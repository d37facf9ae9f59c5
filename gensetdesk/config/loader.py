from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    DEFAULT_HEADER_TOKENS,
    AlertSettings,
    AppConfig,
    DatabaseConfig,
    ImportDefaults,
    TableNames,
)

"""Config loader.

Responsibilities:
- Load YAML config (default config/gensetdesk.yml)
- Validate against config_schema.json (unknown keys rejected)
- Apply defaults for every omitted section / key
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "load_config",
]

DEFAULT_CONFIG_PATH = Path("config/gensetdesk.yml")
SCHEMA_PATH = Path(__file__).with_name("config_schema.json")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or not valid JSON, or the
            config data fails validation (wrong types, unknown keys, ...)
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


def _import_defaults(raw: dict[str, Any]) -> ImportDefaults:
    base = ImportDefaults()
    tokens = raw.get("header_tokens")
    return ImportDefaults(
        fallback_province=raw.get("fallback_province", base.fallback_province),
        unknown_placeholder=raw.get("unknown_placeholder", base.unknown_placeholder),
        missing_placeholder=raw.get("missing_placeholder", base.missing_placeholder),
        min_name_length=raw.get("min_name_length", base.min_name_length),
        header_tokens=frozenset(tokens) if tokens is not None else DEFAULT_HEADER_TOKENS,
    )


def load_config(path: Path) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    alerts_raw = data.get("alerts") or {}
    tables_raw = data.get("tables") or {}
    db_raw = data.get("database") or {}
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )
    return AppConfig(
        import_defaults=_import_defaults(data.get("import") or {}),
        alerts=AlertSettings(
            horizon_days=alerts_raw.get("horizon_days", AlertSettings.horizon_days),
            urgent_days=alerts_raw.get("urgent_days", AlertSettings.urgent_days),
        ),
        tables=TableNames(**tables_raw),
        database=db,
    )
