"""
Charges computation engine.

Turns an items subtotal and a resolved configuration into the full order
charges breakdown: discount, fees, taxable base, GST split, rounding and
grand total. The same function backs the live settings preview and the
value stored on an order, so both always agree.

Steps, in order:

    1. tax_type     = resolve_tax_type(config, distributor, retailer)
    2. applied      = max(sub_total * clamp(discount_pct) / 100, discount_amt)
    3. fees         = delivery + packing + insurance + other
    4. taxable_base = max(0, sub_total - applied) + fees
    5. CGST_SGST:  cgst = base * cgst_rate / 100, sgst = base * sgst_rate / 100
       IGST:       igst = base * (igst_rate, else gst_rate, else 0) / 100
    6. taxes        = cgst + sgst + igst
    7. grand_total, round_off = apply_round_rule(taxable_base + taxes, round_rule)
    8. every figure normalized to 2 dp

Fees are added after the discount: they are never discounted but are taxed.
The larger of the percentage and the fixed discount is applied (not both).

Pure: no I/O, no clock, never raises on malformed numbers (treated as 0).

Usage:
    from decimal import Decimal
    from charges_engines.charges import ChargesComputationEngine
    from charges_kernel.domain.defaults import EffectiveDefaults, TaxType

    breakdown = ChargesComputationEngine().compute(
        items_sub_total=Decimal("10000"),
        config=EffectiveDefaults(tax_type=TaxType.CGST_SGST, autodetect_tax_type=False),
    )
    breakdown.grand_total  # Decimal("11800.00")
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping

from charges_engines.rounding import apply_round_rule
from charges_engines.tax_type import resolve_tax_type
from charges_engines.tracer import traced_engine
from charges_kernel.domain.defaults import EffectiveDefaults, TaxProfile, TaxType
from charges_kernel.domain.values import (
    HUNDRED,
    ZERO,
    clamp_pct,
    is_number,
    pick_number,
    round2,
    to_decimal,
)
from charges_kernel.logging_config import get_logger

logger = get_logger("engines.charges")

BREAKDOWN_VERSION = 1


@dataclass(frozen=True)
class TaxBreakup:
    """GST components. Either CGST/SGST or IGST is nonzero, never both families."""

    cgst: Decimal
    sgst: Decimal
    igst: Decimal

    @property
    def total(self) -> Decimal:
        return self.cgst + self.sgst + self.igst


@dataclass(frozen=True)
class ChargesBreakdown:
    """
    Complete order charges breakdown. All money normalized to 2 dp.

    ``discount_amt`` is the discount actually applied; ``discount_pct`` the
    clamped configured percentage.
    """

    tax_type: TaxType
    autodetect_tax_type: bool
    sub_total: Decimal
    discount_pct: Decimal
    discount_amt: Decimal
    delivery: Decimal
    packing: Decimal
    insurance: Decimal
    other: Decimal
    taxable_base: Decimal
    tax_breakup: TaxBreakup
    taxes: Decimal
    round_off: Decimal
    grand_total: Decimal
    version: int = BREAKDOWN_VERSION

    @property
    def items_sub_total(self) -> Decimal:
        return self.sub_total

    @property
    def fees_total(self) -> Decimal:
        return self.delivery + self.packing + self.insurance + self.other

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready record for order persistence; Decimals as strings."""
        return {
            "version": self.version,
            "taxType": self.tax_type.value,
            "autodetectTaxType": self.autodetect_tax_type,
            "itemsSubTotal": str(self.sub_total),
            "discountPct": str(self.discount_pct),
            "discountAmt": str(self.discount_amt),
            "delivery": str(self.delivery),
            "packing": str(self.packing),
            "insurance": str(self.insurance),
            "other": str(self.other),
            "taxableBase": str(self.taxable_base),
            "taxBreakup": {
                "cgst": str(self.tax_breakup.cgst),
                "sgst": str(self.tax_breakup.sgst),
                "igst": str(self.tax_breakup.igst),
            },
            "subTotal": str(self.sub_total),
            "taxes": str(self.taxes),
            "roundOff": str(self.round_off),
            "grandTotal": str(self.grand_total),
        }


class ChargesComputationEngine:
    """
    Computes order charges from a subtotal and effective defaults.

    ``enabled`` is not consulted: whether computed charges apply at all is
    the caller's decision.
    """

    @traced_engine(
        "charges",
        str(BREAKDOWN_VERSION),
        fingerprint_fields=("items_sub_total", "config", "distributor_profile", "retailer_profile"),
    )
    def compute(
        self,
        items_sub_total: Any,
        config: EffectiveDefaults | None = None,
        distributor_profile: TaxProfile | Mapping[str, Any] | None = None,
        retailer_profile: TaxProfile | Mapping[str, Any] | None = None,
    ) -> ChargesBreakdown:
        """
        Compute the full charges breakdown.

        Args:
            items_sub_total: Pre-tax items subtotal (usually EstimateResult.subtotal).
            config: Effective defaults; None means the built-in base shape.
            distributor_profile: Supplier tax profile for autodetection.
            retailer_profile: Buyer tax profile for autodetection.

        Returns:
            ChargesBreakdown (version 1).
        """
        eff = config if config is not None else EffectiveDefaults()
        sub_total = to_decimal(items_sub_total)

        tax_type = resolve_tax_type(eff, distributor_profile, retailer_profile)

        discount_pct = clamp_pct(eff.discount_pct) if is_number(eff.discount_pct) else ZERO
        discount_from_pct = sub_total * discount_pct / HUNDRED
        discount_from_amt = to_decimal(eff.discount_amt) if is_number(eff.discount_amt) else ZERO
        applied_discount = max(discount_from_pct, discount_from_amt)

        delivery = pick_number(eff.delivery_fee, ZERO)
        packing = pick_number(eff.packing_fee, ZERO)
        insurance = pick_number(eff.insurance_fee, ZERO)
        other = pick_number(eff.other_fee, ZERO)
        fees = delivery + packing + insurance + other

        taxable_base = max(ZERO, sub_total - applied_discount) + fees

        cgst = sgst = igst = ZERO
        if tax_type is TaxType.CGST_SGST:
            cgst = taxable_base * pick_number(eff.cgst_rate, ZERO) / HUNDRED
            sgst = taxable_base * pick_number(eff.sgst_rate, ZERO) / HUNDRED
        else:
            igst = taxable_base * pick_number(eff.igst_rate, eff.gst_rate) / HUNDRED

        taxes = cgst + sgst + igst
        gross_total = taxable_base + taxes
        rounding = apply_round_rule(gross_total, eff.round_rule)

        breakdown = ChargesBreakdown(
            tax_type=tax_type,
            autodetect_tax_type=bool(eff.autodetect_tax_type),
            sub_total=round2(sub_total),
            discount_pct=discount_pct,
            discount_amt=round2(applied_discount),
            delivery=round2(delivery),
            packing=round2(packing),
            insurance=round2(insurance),
            other=round2(other),
            taxable_base=round2(taxable_base),
            tax_breakup=TaxBreakup(cgst=round2(cgst), sgst=round2(sgst), igst=round2(igst)),
            taxes=round2(taxes),
            round_off=round2(rounding.round_off),
            grand_total=round2(rounding.rounded),
        )

        logger.info("charges_computation_completed", extra={
            "tax_type": tax_type.value,
            "sub_total": str(breakdown.sub_total),
            "discount_applied": str(breakdown.discount_amt),
            "taxable_base": str(breakdown.taxable_base),
            "taxes": str(breakdown.taxes),
            "round_off": str(breakdown.round_off),
            "grand_total": str(breakdown.grand_total),
        })

        return breakdown
