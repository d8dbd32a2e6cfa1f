"""
Pure domain layer.

Configuration records, tax profiles, line items and money helpers with NO
dependencies on the ORM, the database or I/O. All domain objects are
immutable and deterministic.
"""

from charges_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from charges_kernel.domain.defaults import (
    CONFIG_FIELDS,
    EffectiveDefaults,
    FieldAction,
    FieldUpdate,
    GlobalDefaults,
    LineItem,
    RetailerOverride,
    RetailerOverridePage,
    RoundRule,
    TaxProfile,
    TaxType,
    wire_name,
)
from charges_kernel.domain.values import clamp_pct, is_number, pick_number, round2, to_decimal

__all__ = [
    "CONFIG_FIELDS",
    "Clock",
    "DeterministicClock",
    "EffectiveDefaults",
    "FieldAction",
    "FieldUpdate",
    "GlobalDefaults",
    "LineItem",
    "RetailerOverride",
    "RetailerOverridePage",
    "RoundRule",
    "SystemClock",
    "TaxProfile",
    "TaxType",
    "clamp_pct",
    "is_number",
    "pick_number",
    "round2",
    "to_decimal",
    "wire_name",
]
