"""
charges_config -- single public entrypoint for runtime settings.

Responsibility:
    Provides the ONLY way to obtain settings at runtime through
    ``get_active_settings()``. No other component reads the settings file
    directly.

Architecture position:
    Configuration -- sits above ``charges_kernel`` and ``charges_engines``
    (it reuses the payload sanitizer for ``base_defaults``) and below
    ``charges_services``. The kernel MUST NEVER import from
    ``charges_config``.

Failure modes:
    - ``FileNotFoundError`` -- settings file missing.
    - ``yaml.YAMLError`` -- malformed YAML.
    - ``ValueError`` -- a section is not a mapping.
    - ``InvalidConfigPayloadError`` -- invalid ``base_defaults`` field.
"""

from __future__ import annotations

import logging
from pathlib import Path

from charges_config.loader import load_yaml_file, parse_settings
from charges_config.schema import ChargesSettings, DatabaseSettings, LoggingSettings

_logger = logging.getLogger("charges_kernel.config")

_DEFAULT_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"


def get_active_settings(path: Path | str | None = None) -> ChargesSettings:
    """The ONLY public settings entrypoint.

    Not cached: callers hold the returned settings for as long as they
    need them.

    Args:
        path: Settings file. Defaults to charges_config/settings.yaml.

    Returns:
        Frozen ChargesSettings with the checksum of the parsed source.
    """
    settings_path = Path(path) if path is not None else _DEFAULT_SETTINGS_PATH
    data = load_yaml_file(settings_path)
    settings = parse_settings(data, source_path=str(settings_path))

    _logger.info(
        "CHARGES_CONFIG_TRACE",
        extra={
            "trace_type": "CHARGES_CONFIG_TRACE",
            "source_path": settings.source_path,
            "checksum": settings.checksum,
            "database_dialect": settings.database.url.split(":", 1)[0],
            "log_level": settings.logging.level,
        },
    )
    return settings


__all__ = [
    "ChargesSettings",
    "DatabaseSettings",
    "LoggingSettings",
    "get_active_settings",
]
