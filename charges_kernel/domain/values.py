"""
Values -- Decimal money normalization helpers.

Responsibility:
    Coerces loosely typed numeric input (int, float, Decimal, numeric str)
    into ``Decimal`` and normalizes every monetary value to 2 decimal places
    before it leaves an engine.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every engine. No outward dependencies.

Invariants enforced:
    - Decimal-only arithmetic: floats are converted through their shortest
      ``repr`` so that 1.005 stays 1.005 and rounds to 1.01.
    - Half-away-from-zero rounding (``ROUND_HALF_UP`` on Decimal).
    - Non-finite or non-numeric input never raises; it becomes the default.
    - Quantizing never raises on large finite values: the context precision
      widens to fit the integer digits.
    - Booleans are never treated as numbers.
"""

from __future__ import annotations

import math
from decimal import ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any

ZERO = Decimal("0")
HUNDRED = Decimal("100")
TWO_PLACES = Decimal("0.01")
WHOLE_UNIT = Decimal("1")

# Exclusive upper bound of a Numeric(38, 9) column (29 integer digits)
MAX_STORED_MAGNITUDE = Decimal("1e29")

_ZERO_MONEY = Decimal("0.00")


def is_number(value: Any) -> bool:
    """True for finite int, float or Decimal values (bool excluded)."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, Decimal):
        return value.is_finite()
    return False


def to_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """
    Coerce a value to a finite Decimal.

    Numeric strings are parsed; anything else that is not a finite number
    returns ``default``.
    """
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        if not math.isfinite(value):
            return default
        result = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            return default
    else:
        return default
    return result if result.is_finite() else default


def round2(value: Any) -> Decimal:
    """Normalize to 2 decimal places, half away from zero. Negative zero becomes 0.00."""
    number = to_decimal(value)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, number.adjusted() + 4)
        result = number.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    return result if result else _ZERO_MONEY


def clamp_pct(value: Any) -> Decimal:
    """Clamp a percentage into [0, 100]; non-numeric input becomes 0."""
    pct = to_decimal(value)
    if pct < ZERO:
        return ZERO
    if pct > HUNDRED:
        return HUNDRED
    return pct


def pick_number(preferred: Any, fallback: Any) -> Decimal:
    """Return ``preferred`` if numeric, else ``fallback`` if numeric, else 0."""
    if is_number(preferred):
        return to_decimal(preferred)
    if is_number(fallback):
        return to_decimal(fallback)
    return ZERO


def quantize_whole(value: Decimal, rounding: str = ROUND_HALF_UP) -> Decimal:
    """Round to a whole currency unit using a ``decimal`` rounding mode."""
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 2)
        return value.quantize(WHOLE_UNIT, rounding=rounding)


__all__ = [
    "HUNDRED",
    "MAX_STORED_MAGNITUDE",
    "ROUND_CEILING",
    "ROUND_FLOOR",
    "ROUND_HALF_UP",
    "TWO_PLACES",
    "ZERO",
    "clamp_pct",
    "is_number",
    "pick_number",
    "quantize_whole",
    "round2",
    "to_decimal",
]
