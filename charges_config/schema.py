"""
ChargesSettings schema.

Typed, frozen view of ``settings.yaml``. The loader parses YAML into these
types; ``get_active_settings()`` is the only way callers obtain them.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from charges_kernel.domain.defaults import GlobalDefaults


@dataclass(frozen=True)
class DatabaseSettings:
    """Connection settings for the configuration store."""

    url: str = "sqlite://"
    echo: bool = False


@dataclass(frozen=True)
class LoggingSettings:
    """Root level for the ``charges_kernel`` logger tree."""

    level: str = "INFO"


@dataclass(frozen=True)
class ChargesSettings:
    """
    Runtime settings.

    ``base_defaults`` is the shape returned for a tenant that never saved
    global defaults.
    """

    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    base_defaults: GlobalDefaults = field(default_factory=GlobalDefaults)
    checksum: str = ""
    source_path: str | None = None
