from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.grid import DEFAULT_DATE_FORMAT

"""Application config loader.

Sources, lowest to highest precedence:
1. built-in defaults
2. YAML file (``config/shiftmark.yml`` or ``$SHIFTMARK_CONFIG``), optional
3. ``PORT`` environment variable

The CLI loads ``.env`` (python-dotenv) before calling ``load_config`` so that
values from it are visible as environment variables here.
"""

__all__ = [
    "AppConfig",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "load_config",
]

DEFAULT_CONFIG_PATH = Path("config/shiftmark.yml")
CONFIG_PATH_ENV = "SHIFTMARK_CONFIG"
PORT_ENV = "PORT"

CONFIG_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "host": {"type": "string", "minLength": 1},
        "port": {"type": "integer", "minimum": 1, "maximum": 65535},
        "date_format": {"type": "string", "minLength": 2},
        "max_roster_files": {"type": "integer", "minimum": 1},
        "max_content_length": {"type": "integer", "minimum": 1},
        "error_log_dir": {"type": "string", "minLength": 1},
        "debug": {"type": "boolean"},
    },
}


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class AppConfig:
    host: str = "0.0.0.0"
    port: int = 3000
    date_format: str = DEFAULT_DATE_FORMAT  # ネイティブ日付セル -> キー文字列
    max_roster_files: int = 5
    max_content_length: int = 16 * 1024 * 1024
    error_log_dir: str = "./logs"
    debug: bool = False


def _validate_config_schema(data: dict[str, Any]) -> None:
    try:
        jsonschema.validate(data, CONFIG_SCHEMA)
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")
    return data


def load_config(path: Path | None = None) -> AppConfig:
    """Load the application config.

    An explicitly given (or ``$SHIFTMARK_CONFIG``) path must exist; the
    default path is optional and defaults apply when it is absent.
    """
    explicit = path is not None or bool(os.getenv(CONFIG_PATH_ENV))
    if path is None:
        path = Path(os.getenv(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH)

    data: dict[str, Any] = {}
    if path.exists():
        data = _read_yaml(path)
        _validate_config_schema(data)
    elif explicit:
        raise ConfigError(f"config file not found: {path}")

    cfg = AppConfig(**data)

    port_env = os.getenv(PORT_ENV)
    if port_env:
        try:
            port = int(port_env)
        except ValueError as e:
            raise ConfigError(f"invalid {PORT_ENV}: {port_env!r}") from e
        cfg = replace(cfg, port=port)
    return cfg
