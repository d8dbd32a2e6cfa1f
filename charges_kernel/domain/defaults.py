"""
Defaults -- Configuration record value objects.

Responsibility:
    Immutable shapes for the two persisted configuration levels
    (``GlobalDefaults`` per tenant, ``RetailerOverride`` per tenant and
    counterparty), the transient merged ``EffectiveDefaults``, the tax
    profiles used for tax-type autodetection and the explicit tri-state
    ``FieldUpdate`` used when applying partial override payloads.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - GlobalDefaults always holds concrete values; the dataclass defaults
      are the built-in base shape used when no record exists.
    - RetailerOverride fields are independently nullable; ``None`` means
      "inherit from global" and is distinct from an explicit 0 / False.
    - Records are JSON-ready through ``to_dict()`` using the wire
      (camelCase) field names.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any


class TaxType(str, Enum):
    """Which GST family applies to an order."""

    CGST_SGST = "CGST_SGST"  # Intrastate: central + state components
    IGST = "IGST"  # Interstate: single integrated component


class RoundRule(str, Enum):
    """Whole-currency-unit rounding applied to the grand total."""

    NEAREST = "nearest"
    UP = "up"
    DOWN = "down"


# Configuration fields shared by global, override and effective records,
# in wire order.
CONFIG_FIELDS: tuple[str, ...] = (
    "enabled",
    "tax_type",
    "autodetect_tax_type",
    "gst_rate",
    "cgst_rate",
    "sgst_rate",
    "igst_rate",
    "delivery_fee",
    "packing_fee",
    "insurance_fee",
    "other_fee",
    "discount_pct",
    "discount_amt",
    "round_rule",
    "skip_proforma",
)

RATE_FIELDS: tuple[str, ...] = ("gst_rate", "cgst_rate", "sgst_rate", "igst_rate")
FEE_FIELDS: tuple[str, ...] = ("delivery_fee", "packing_fee", "insurance_fee", "other_fee")
BOOL_FIELDS: tuple[str, ...] = ("enabled", "autodetect_tax_type", "skip_proforma")


def wire_name(name: str) -> str:
    """snake_case attribute name -> camelCase wire name (``gst_rate`` -> ``gstRate``)."""
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _wire_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _record_to_dict(record: Any) -> dict[str, Any]:
    return {wire_name(f.name): _wire_value(getattr(record, f.name)) for f in fields(record)}


@dataclass(frozen=True)
class _ChargesConfig:
    """Concrete configuration values; defaults are the built-in base shape."""

    enabled: bool = True
    tax_type: TaxType | None = None
    autodetect_tax_type: bool = True

    # Percent rates; which set applies depends on the resolved tax type
    gst_rate: Decimal = Decimal("18")
    cgst_rate: Decimal = Decimal("9")
    sgst_rate: Decimal = Decimal("9")
    igst_rate: Decimal = Decimal("18")

    # Flat fees, currency units
    delivery_fee: Decimal = Decimal("0")
    packing_fee: Decimal = Decimal("0")
    insurance_fee: Decimal = Decimal("0")
    other_fee: Decimal = Decimal("0")

    discount_pct: Decimal = Decimal("0")
    discount_amt: Decimal = Decimal("0")

    round_rule: RoundRule = RoundRule.NEAREST
    skip_proforma: bool = False

    def to_dict(self) -> dict[str, Any]:
        return _record_to_dict(self)


@dataclass(frozen=True)
class GlobalDefaults(_ChargesConfig):
    """
    Tenant-wide charges configuration.

    ``GlobalDefaults()`` is the base shape returned when no record exists.
    ``revision`` counts successful writes (0 = never saved).
    """

    updated_at: datetime | None = None
    updated_by: str | None = None
    revision: int = 0


@dataclass(frozen=True)
class EffectiveDefaults(_ChargesConfig):
    """
    Fully resolved configuration for one tenant/counterparty computation.

    Transient, never persisted. Carries the global record's audit stamps.
    """

    updated_at: datetime | None = None
    updated_by: str | None = None


@dataclass(frozen=True)
class RetailerOverride:
    """
    Counterparty-specific override. Every field ``None`` means inherit.
    """

    enabled: bool | None = None
    tax_type: TaxType | None = None
    autodetect_tax_type: bool | None = None

    gst_rate: Decimal | None = None
    cgst_rate: Decimal | None = None
    sgst_rate: Decimal | None = None
    igst_rate: Decimal | None = None

    delivery_fee: Decimal | None = None
    packing_fee: Decimal | None = None
    insurance_fee: Decimal | None = None
    other_fee: Decimal | None = None

    discount_pct: Decimal | None = None
    discount_amt: Decimal | None = None

    round_rule: RoundRule | None = None
    skip_proforma: bool | None = None

    notes: str | None = None

    updated_at: datetime | None = None
    updated_by: str | None = None
    revision: int = 0

    @property
    def is_empty(self) -> bool:
        """True when every configuration field inherits."""
        return all(getattr(self, name) is None for name in CONFIG_FIELDS)

    def cleared(self) -> RetailerOverride:
        """Copy with every configuration field and notes reset to inherit."""
        changes: dict[str, Any] = {name: None for name in CONFIG_FIELDS}
        changes["notes"] = None
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return _record_to_dict(self)


@dataclass(frozen=True)
class RetailerOverridePage:
    """One page of a tenant's overrides, newest first."""

    items: tuple[tuple[str, RetailerOverride], ...]
    next_cursor: str | None = None


# ---------------------------------------------------------------------------
# Tri-state override field updates
# ---------------------------------------------------------------------------


class FieldAction(str, Enum):
    """What a partial payload asks for one override field."""

    KEEP = "keep"  # Field absent: stored value unchanged
    CLEAR = "clear"  # Explicit null: reset to inherit
    SET = "set"  # Explicit valid value


@dataclass(frozen=True)
class FieldUpdate:
    """One override field change: ``KEEP``, ``CLEAR`` or ``SET(value)``."""

    action: FieldAction
    value: Any = None

    @classmethod
    def keep(cls) -> FieldUpdate:
        return cls(FieldAction.KEEP)

    @classmethod
    def clear(cls) -> FieldUpdate:
        return cls(FieldAction.CLEAR)

    @classmethod
    def set(cls, value: Any) -> FieldUpdate:
        return cls(FieldAction.SET, value)

    def apply(self, current: Any) -> Any:
        if self.action is FieldAction.SET:
            return self.value
        if self.action is FieldAction.CLEAR:
            return None
        return current


# ---------------------------------------------------------------------------
# Tax profiles and line items
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TaxProfile:
    """
    Geographic tax identity of a distributor or retailer.

    ``state_code`` wins; otherwise the first two characters of ``gstin``.
    """

    state_code: str | None = None
    gstin: str | None = None

    @classmethod
    def from_mapping(cls, data: dict[str, Any] | None) -> TaxProfile | None:
        if data is None:
            return None
        return cls(state_code=data.get("stateCode", data.get("state_code")), gstin=data.get("gstin"))


# Cart-side spellings accepted for line identifiers
_LINE_ITEM_ALIASES = {"unit": "uom", "image": "image_url"}


@dataclass(frozen=True)
class LineItem:
    """
    One order line. Identifier fields pass through estimation untouched.
    """

    qty: Any = 0
    price: Any = 0
    item_discount_pct: Any = 0

    inventory_id: str | None = None
    sku: str | None = None
    name: str | None = None
    hsn: str | None = None
    uom: str | None = None
    image_url: str | None = None

    # Per-line GST rate, used only by the manual proforma calculator
    gst_rate: Any = 0

    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> LineItem:
        """
        Build from a raw camelCase or snake_case mapping.

        ``unit`` and ``image`` fill ``uom`` and ``image_url`` unless those are
        given too. Unknown keys go to ``extra``.
        """
        known = {f.name for f in fields(cls)} - {"extra"}
        kwargs: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        by_wire = {wire_name(name): name for name in known}
        for key, value in data.items():
            name = key if key in known else by_wire.get(key)
            if name is None:
                extra[key] = value
            else:
                kwargs[name] = value
        for alias, name in _LINE_ITEM_ALIASES.items():
            if alias in data and name not in kwargs:
                kwargs[name] = data[alias]
                extra.pop(alias, None)
        return cls(**kwargs, extra=extra)
