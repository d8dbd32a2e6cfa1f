"""
Settings loader (``charges_config.loader``).

Responsibility
--------------
Loads the YAML settings file and parses it into the frozen dataclasses
of ``charges_config.schema``. Runtime callers go through
``charges_config.get_active_settings()``.

Invariants enforced
-------------------
* Every section is optional; an absent section yields its dataclass
  defaults.
* ``base_defaults`` is sanitized strictly over the built-in base shape:
  an invalid field is a configuration error, never silently coerced.
* ``compute_checksum`` is deterministic for identical parsed content.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* A section that is not a mapping  -> ``ValueError``.
* Invalid ``base_defaults`` field  -> ``InvalidConfigPayloadError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from charges_config.schema import ChargesSettings, DatabaseSettings, LoggingSettings
from charges_engines.sanitizer import sanitize_global
from charges_kernel.domain.defaults import GlobalDefaults


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"Settings section {name!r} must be a mapping, got {type(value).__name__}")
    return value


def parse_database(data: dict[str, Any]) -> DatabaseSettings:
    """Parse the ``database`` section."""
    defaults = DatabaseSettings()
    return DatabaseSettings(
        url=str(data.get("url", defaults.url)),
        echo=bool(data.get("echo", defaults.echo)),
    )


def parse_logging(data: dict[str, Any]) -> LoggingSettings:
    """Parse the ``logging`` section."""
    level = str(data.get("level", LoggingSettings().level)).upper()
    return LoggingSettings(level=level)


def parse_base_defaults(data: dict[str, Any]) -> GlobalDefaults:
    """Sanitize the ``base_defaults`` wire payload over the built-in shape."""
    return sanitize_global(data, GlobalDefaults(), strict=True)


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_settings(data: dict[str, Any], source_path: str | None = None) -> ChargesSettings:
    """Parse a full settings document."""
    return ChargesSettings(
        database=parse_database(_section(data, "database")),
        logging=parse_logging(_section(data, "logging")),
        base_defaults=parse_base_defaults(_section(data, "base_defaults")),
        checksum=compute_checksum(data),
        source_path=source_path,
    )
