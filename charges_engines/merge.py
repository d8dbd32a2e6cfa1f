"""
Effective configuration merger.

Resolves a tenant's ``GlobalDefaults`` and an optional counterparty
``RetailerOverride`` into one concrete ``EffectiveDefaults``:

    effective[field] = override[field] if override[field] is not None
                       else global[field]

An explicit override of ``0`` or ``False`` wins over the inherited value;
only ``None`` inherits. ``enabled`` follows the same rule, so a retailer can
be switched off even when the tenant is globally enabled.

Pure and total: never raises, no I/O.
"""

from __future__ import annotations

from typing import Any

from charges_kernel.domain.defaults import (
    CONFIG_FIELDS,
    EffectiveDefaults,
    GlobalDefaults,
    RetailerOverride,
)
from charges_kernel.logging_config import get_logger

logger = get_logger("engines.merge")


def merge_effective_defaults(
    global_defaults: GlobalDefaults | None,
    override: RetailerOverride | None = None,
) -> EffectiveDefaults:
    """
    Merge an override over global defaults field by field.

    Args:
        global_defaults: Tenant defaults; None means the built-in base shape.
        override: Counterparty override, or None for "no override".

    Returns:
        EffectiveDefaults carrying the global record's audit stamps.
    """
    base = global_defaults if global_defaults is not None else GlobalDefaults()

    values: dict[str, Any] = {}
    overridden: list[str] = []
    for name in CONFIG_FIELDS:
        preferred = getattr(override, name) if override is not None else None
        if preferred is not None:
            values[name] = preferred
            overridden.append(name)
        else:
            values[name] = getattr(base, name)

    logger.debug("effective_defaults_merged", extra={
        "has_override": override is not None,
        "overridden_fields": overridden,
    })

    return EffectiveDefaults(
        **values,
        updated_at=base.updated_at,
        updated_by=base.updated_by,
    )
