"""
Configuration payload sanitizer.

Coerces raw (JSON-ish) configuration payloads into the two canonical
records before the store persists them.

Global payloads -> ``GlobalDefaults``:
    absent field          -> previous value (base shape when no record)
    valid value           -> that value
    invalid value         -> previous value (``taxType`` also accepts null)

Override payloads -> ``RetailerOverride`` (tri-state per field, see
``FieldUpdate``):
    absent field          -> KEEP   stored value unchanged
    explicit null         -> CLEAR  inherit from global
    valid value           -> SET    explicit override (0 / False included)
    invalid value         -> KEEP   previous value

Lenient by default: invalid values are coerced silently (a
``config_field_coerced`` warning is logged per field). With ``strict=True``
the same issues raise ``InvalidConfigPayloadError`` instead.

Ranges: rates, fees and ``discountAmt`` must be >= 0 and below 1e29 (the
stored column range); ``discountPct`` is clamped into [0, 100]. Booleans
are never accepted as numbers.
Keys may use the wire (camelCase) or attribute (snake_case) spelling.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any

from charges_kernel.domain.defaults import (
    BOOL_FIELDS,
    CONFIG_FIELDS,
    FEE_FIELDS,
    RATE_FIELDS,
    FieldAction,
    FieldUpdate,
    GlobalDefaults,
    RetailerOverride,
    RoundRule,
    TaxType,
    wire_name,
)
from charges_kernel.domain.values import MAX_STORED_MAGNITUDE, ZERO, clamp_pct, is_number, to_decimal
from charges_kernel.exceptions import InvalidConfigPayloadError
from charges_kernel.logging_config import get_logger

logger = get_logger("engines.sanitizer")

_ABSENT = object()

OVERRIDE_FIELDS: tuple[str, ...] = CONFIG_FIELDS + ("notes",)


class _Invalid(Exception):
    """Raised by a field parser for a value it cannot accept."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    raise _Invalid("expected boolean")


def _parse_non_negative(value: Any) -> Decimal:
    if not is_number(value):
        raise _Invalid("expected finite number")
    number = to_decimal(value)
    if number < ZERO:
        raise _Invalid("must be >= 0")
    if number >= MAX_STORED_MAGNITUDE:
        raise _Invalid("exceeds storable range")
    return number


def _parse_pct(value: Any) -> Decimal:
    if not is_number(value):
        raise _Invalid("expected finite number")
    return clamp_pct(value)


def _parse_tax_type(value: Any) -> TaxType:
    try:
        return TaxType(value)
    except ValueError:
        raise _Invalid(f"expected one of {[t.value for t in TaxType]}") from None


def _parse_round_rule(value: Any) -> RoundRule:
    try:
        return RoundRule(value)
    except ValueError:
        raise _Invalid(f"expected one of {[r.value for r in RoundRule]}") from None


def _parse_notes(value: Any) -> str:
    if isinstance(value, str):
        return value
    raise _Invalid("expected string")


_PARSERS: dict[str, Callable[[Any], Any]] = {
    **{name: _parse_bool for name in BOOL_FIELDS},
    **{name: _parse_non_negative for name in RATE_FIELDS + FEE_FIELDS},
    "discount_amt": _parse_non_negative,
    "discount_pct": _parse_pct,
    "tax_type": _parse_tax_type,
    "round_rule": _parse_round_rule,
    "notes": _parse_notes,
}


@dataclass(frozen=True)
class FieldIssue:
    """One rejected payload field."""

    field: str
    value: Any
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"field": wire_name(self.field), "value": repr(self.value), "reason": self.reason}


def _lookup(payload: Mapping[str, Any], name: str) -> Any:
    wire = wire_name(name)
    if wire in payload:
        return payload[wire]
    return payload.get(name, _ABSENT)


def _report(record_kind: str, issues: list[FieldIssue], strict: bool) -> None:
    if not issues:
        return
    if strict:
        raise InvalidConfigPayloadError(record_kind, [i.to_dict() for i in issues])
    for issue in issues:
        logger.warning("config_field_coerced", extra={
            "record_kind": record_kind,
            "field": wire_name(issue.field),
            "reason": issue.reason,
        })


def parse_override_update(
    payload: Mapping[str, Any] | None,
    issues: list[FieldIssue] | None = None,
) -> dict[str, FieldUpdate]:
    """
    Translate a partial override payload into one FieldUpdate per field.

    Invalid values become ``KEEP`` and are appended to ``issues`` if given.
    """
    payload = payload or {}
    updates: dict[str, FieldUpdate] = {}
    for name in OVERRIDE_FIELDS:
        raw = _lookup(payload, name)
        if raw is _ABSENT:
            updates[name] = FieldUpdate.keep()
        elif raw is None:
            updates[name] = FieldUpdate.clear()
        else:
            try:
                updates[name] = FieldUpdate.set(_PARSERS[name](raw))
            except _Invalid as exc:
                updates[name] = FieldUpdate.keep()
                if issues is not None:
                    issues.append(FieldIssue(name, raw, exc.reason))
    return updates


def apply_override_update(
    previous: RetailerOverride,
    updates: Mapping[str, FieldUpdate],
) -> RetailerOverride:
    """Apply field updates to a stored override; audit fields untouched."""
    changes = {
        name: update.apply(getattr(previous, name))
        for name, update in updates.items()
        if update.action is not FieldAction.KEEP
    }
    return replace(previous, **changes) if changes else previous


def sanitize_override(
    payload: Mapping[str, Any] | None,
    previous: RetailerOverride | None = None,
    strict: bool = False,
) -> RetailerOverride:
    """
    Sanitize a partial override payload against the stored override.

    Args:
        payload: Raw partial payload.
        previous: Stored override; None means the all-inherit shape.
        strict: Raise instead of coercing invalid values.

    Raises:
        InvalidConfigPayloadError: strict mode only.
    """
    issues: list[FieldIssue] = []
    updates = parse_override_update(payload, issues)
    _report("retailer_override", issues, strict)
    return apply_override_update(previous or RetailerOverride(), updates)


def sanitize_global(
    payload: Mapping[str, Any] | None,
    previous: GlobalDefaults | None = None,
    strict: bool = False,
) -> GlobalDefaults:
    """
    Sanitize a partial global payload against the stored defaults.

    Every configuration field ends up concrete. ``taxType`` may be set to
    null (no fixed tax type); null for any other field is invalid.

    Args:
        payload: Raw partial payload.
        previous: Stored defaults; None means the built-in base shape.
        strict: Raise instead of coercing invalid values.

    Raises:
        InvalidConfigPayloadError: strict mode only.
    """
    payload = payload or {}
    base = previous or GlobalDefaults()
    issues: list[FieldIssue] = []
    changes: dict[str, Any] = {}

    for name in CONFIG_FIELDS:
        raw = _lookup(payload, name)
        if raw is _ABSENT:
            continue
        if raw is None:
            if name == "tax_type":
                changes[name] = None
            else:
                issues.append(FieldIssue(name, raw, "null not allowed"))
            continue
        try:
            changes[name] = _PARSERS[name](raw)
        except _Invalid as exc:
            issues.append(FieldIssue(name, raw, exc.reason))

    _report("global_defaults", issues, strict)
    return replace(base, **changes) if changes else base
