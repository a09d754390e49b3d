from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    DEFAULT_SOURCE_EXTENSIONS,
    DEFAULT_TARGET_EXTENSIONS,
    DatabaseConfig,
    MatchPolicy,
    MigrateConfig,
)

"""Config loader.

Responsibilities:
- Load YAML config (default: config/migrate.yml)
- Validate against the bundled JSON schema (config_schema.json)
- Apply defaults for every optional key
"""

__all__ = [
    "ConfigError",
    "SCHEMA_PATH",
    "DEFAULT_CONFIG_PATH",
    "load_config",
    "default_config",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/migrate.yml")


class ConfigError(Exception):
    error_type = "CONFIG_ERROR"


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against JSON schema.

    Raises:
        ConfigError: schema file missing or unreadable, or data fails validation
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


def _normalize_extensions(values: list[str] | None, default: tuple[str, ...]) -> tuple[str, ...]:
    if not values:
        return default
    return tuple(v.lower() for v in values)


def default_config() -> MigrateConfig:
    return MigrateConfig()


def load_config(path: Path) -> MigrateConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    db_raw = data.get("database") or {}
    db = DatabaseConfig(
        driver=db_raw.get("driver", "sqlite"),
        dsn=db_raw.get("dsn"),
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        verbose=bool(db_raw.get("verbose", False)),
    )
    defaults = MigrateConfig()
    return MigrateConfig(
        database=db,
        matching=MatchPolicy(data.get("matching", MatchPolicy.CASE_INSENSITIVE.value)),
        source_extensions=_normalize_extensions(data.get("source_extensions"), DEFAULT_SOURCE_EXTENSIONS),
        target_extensions=_normalize_extensions(data.get("target_extensions"), DEFAULT_TARGET_EXTENSIONS),
        # key present with null disables remembered paths
        preferences_file=data["preferences_file"] if "preferences_file" in data else defaults.preferences_file,
        logs_directory=data.get("logs_directory", defaults.logs_directory),
        max_prompt_attempts=data.get("max_prompt_attempts", defaults.max_prompt_attempts),
    )
