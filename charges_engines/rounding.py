"""
Rounding policy for order grand totals.

Rounds to a whole currency unit (rupee), independent of the 2-decimal
normalization applied to every other figure, and reports the signed
round-off introduced.

Usage:
    from decimal import Decimal
    from charges_engines.rounding import apply_round_rule

    result = apply_round_rule(Decimal("11800.4"), "up")
    result.rounded    # Decimal("11801")
    result.round_off  # Decimal("0.6")
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from charges_kernel.domain.defaults import RoundRule
from charges_kernel.domain.values import (
    ROUND_CEILING,
    ROUND_FLOOR,
    ROUND_HALF_UP,
    quantize_whole,
    to_decimal,
)

_DECIMAL_MODES = {
    RoundRule.NEAREST: ROUND_HALF_UP,  # half away from zero
    RoundRule.UP: ROUND_CEILING,
    RoundRule.DOWN: ROUND_FLOOR,
}


@dataclass(frozen=True)
class RoundingResult:
    """Rounded amount and the signed adjustment (negative when rounding down)."""

    rounded: Decimal
    round_off: Decimal


def coerce_round_rule(rule: Any) -> RoundRule:
    """Accept a RoundRule or its string value; anything else is ``nearest``."""
    if isinstance(rule, RoundRule):
        return rule
    try:
        return RoundRule(rule)
    except ValueError:
        return RoundRule.NEAREST


def apply_round_rule(amount: Any, rule: Any = RoundRule.NEAREST) -> RoundingResult:
    """
    Round ``amount`` to a whole currency unit.

    Args:
        amount: Unrounded total; non-numeric input is treated as 0.
        rule: ``nearest`` (half away from zero), ``up`` (ceiling) or
            ``down`` (floor). Unknown rules fall back to ``nearest``.

    Returns:
        RoundingResult with ``round_off = rounded - amount``.
    """
    value = to_decimal(amount)
    mode = _DECIMAL_MODES[coerce_round_rule(rule)]
    rounded = quantize_whole(value, mode)
    return RoundingResult(rounded=rounded, round_off=rounded - value)
