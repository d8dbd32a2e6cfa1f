"""
Proforma calculator: manual per-line GST proforma for a distributor quote.

Unlike ``ChargesComputationEngine`` (which applies one configured rate set
to the whole taxable base), each line here carries its own ``gst_rate`` and
the order-level taxable base is apportioned over lines by their share of
the line subtotal:

    pre_discount  = r2(sub_total + delivery + packing + insurance + other)
    discount      = fixed discountAmt if nonzero, else r2(pre_discount * pct / 100)
    taxable_base  = r2(pre_discount - discount)
    per line      share = r2(line.taxable / sum(line.taxable))
                  tax   = r2(r2(taxable_base * share) * line.gst_rate / 100)
    IGST          igst += tax
    CGST_SGST     cgst += r2(tax / 2), sgst += r2(tax / 2)

Supply is intrastate when both state names are given and match after
trimming and case folding; a missing state defaults to CGST_SGST.
Every intermediate figure is rounded to 2 dp as it is produced.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Mapping

from charges_engines.estimate import EstimatedLine, as_line_item, estimate_line
from charges_engines.rounding import apply_round_rule, coerce_round_rule
from charges_engines.tracer import traced_engine
from charges_kernel.domain.defaults import LineItem, RoundRule, TaxType
from charges_kernel.domain.values import HUNDRED, ZERO, round2
from charges_kernel.logging_config import get_logger

logger = get_logger("engines.proforma")

_TWO = Decimal("2")
_ONE = Decimal("1")


@dataclass(frozen=True)
class OrderCharges:
    """Order-level charges and discounts entered on a proforma."""

    delivery: Decimal = Decimal("0.00")
    packing: Decimal = Decimal("0.00")
    insurance: Decimal = Decimal("0.00")
    other: Decimal = Decimal("0.00")
    discount_pct: Decimal = Decimal("0.00")
    discount_amt: Decimal = Decimal("0.00")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> OrderCharges:
        data = data or {}

        def pick(wire: str, attr: str) -> Decimal:
            return round2(data.get(wire, data.get(attr)))

        return cls(
            delivery=pick("delivery", "delivery"),
            packing=pick("packing", "packing"),
            insurance=pick("insurance", "insurance"),
            other=pick("other", "other"),
            discount_pct=pick("discountPct", "discount_pct"),
            discount_amt=pick("discountAmt", "discount_amt"),
        )


@dataclass(frozen=True)
class ProformaLine:
    """Estimated line plus its own GST rate."""

    line: EstimatedLine
    gst_rate: Decimal


@dataclass(frozen=True)
class ProformaResult:
    """Proforma breakdown; all figures 2 dp, grand total whole units."""

    lines: tuple[ProformaLine, ...]
    order_charges: OrderCharges
    sub_total: Decimal
    discount_total: Decimal
    taxable_base: Decimal
    tax_type: TaxType
    cgst: Decimal
    sgst: Decimal
    igst: Decimal
    round_off: Decimal
    grand_total: Decimal

    @property
    def taxes(self) -> Decimal:
        return self.cgst + self.sgst + self.igst


def tax_type_for_states(distributor_state: str | None, retailer_state: str | None) -> TaxType:
    """Intrastate when both states match (trimmed, case-insensitive)."""
    if not distributor_state or not retailer_state:
        return TaxType.CGST_SGST
    if distributor_state.strip().lower() == retailer_state.strip().lower():
        return TaxType.CGST_SGST
    return TaxType.IGST


def _rounding_rule(rounding: Any) -> RoundRule:
    if isinstance(rounding, str):
        rounding = rounding.lower()
    return coerce_round_rule(rounding)


class ProformaCalculator:
    """Pure per-line GST proforma calculator. No I/O."""

    @traced_engine(
        "proforma",
        "1",
        fingerprint_fields=("lines", "order_charges", "distributor_state", "retailer_state", "rounding"),
    )
    def calculate(
        self,
        lines: Iterable[LineItem | Mapping[str, Any]] | None,
        order_charges: OrderCharges | Mapping[str, Any] | None = None,
        distributor_state: str | None = None,
        retailer_state: str | None = None,
        rounding: RoundRule | str = RoundRule.NEAREST,
    ) -> ProformaResult:
        """
        Calculate a full proforma.

        Args:
            lines: Order lines with qty, price, itemDiscountPct and gstRate.
            order_charges: Fees and order-level discount.
            distributor_state: Supplier state name or code.
            retailer_state: Buyer state name or code.
            rounding: nearest / up / down (case-insensitive).

        Returns:
            ProformaResult.
        """
        charges = (
            order_charges
            if isinstance(order_charges, OrderCharges)
            else OrderCharges.from_mapping(order_charges)
        )

        sub_total = Decimal("0.00")
        normalized: list[ProformaLine] = []
        for raw in lines or ():
            item = as_line_item(raw)
            line = estimate_line(item)
            sub_total = round2(sub_total + line.taxable)
            normalized.append(ProformaLine(line=line, gst_rate=round2(item.gst_rate)))

        pre_discount = round2(
            sub_total + charges.delivery + charges.packing + charges.insurance + charges.other
        )
        discount_from_pct = round2(pre_discount * charges.discount_pct / HUNDRED)
        discount_total = charges.discount_amt if charges.discount_amt else discount_from_pct
        taxable_base = round2(pre_discount - discount_total)

        tax_type = tax_type_for_states(distributor_state, retailer_state)

        cgst = sgst = igst = Decimal("0.00")
        if taxable_base > ZERO:
            total_taxable = ZERO
            for pl in normalized:
                total_taxable = round2(total_taxable + pl.line.taxable)
            if not total_taxable:
                total_taxable = _ONE

            for pl in normalized:
                share = round2(pl.line.taxable / total_taxable)
                allocated_base = round2(taxable_base * share)
                tax_amount = round2(allocated_base * pl.gst_rate / HUNDRED)
                if tax_type is TaxType.IGST:
                    igst = round2(igst + tax_amount)
                else:
                    half = round2(tax_amount / _TWO)
                    cgst = round2(cgst + half)
                    sgst = round2(sgst + half)

        unrounded_total = round2(taxable_base + cgst + sgst + igst)
        result = apply_round_rule(unrounded_total, _rounding_rule(rounding))

        logger.info("proforma_calculation_completed", extra={
            "line_count": len(normalized),
            "tax_type": tax_type.value,
            "taxable_base": str(taxable_base),
            "grand_total": str(result.rounded),
        })

        return ProformaResult(
            lines=tuple(normalized),
            order_charges=charges,
            sub_total=sub_total,
            discount_total=discount_total,
            taxable_base=taxable_base,
            tax_type=tax_type,
            cgst=cgst,
            sgst=sgst,
            igst=igst,
            round_off=round2(result.round_off),
            grand_total=result.rounded,
        )
