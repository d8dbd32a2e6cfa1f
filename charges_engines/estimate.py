"""
Line-item estimator: pre-tax, pre-charges order subtotal.

Runs at order-request time over raw order lines. Per line:

    qty, price, item_discount_pct  rounded to 2 dp
    gross            = r2(qty * price)
    discount_amount  = r2(gross * item_discount_pct / 100)
    taxable          = r2(gross - discount_amount)

The subtotal is accumulated as ``subtotal = r2(subtotal + taxable)`` after
EVERY line. Summing unrounded values and rounding once at the end drifts
differently over many lines, so the incremental order must stay as is.

No taxes or order-level charges are applied here; no I/O.

Usage:
    from charges_engines.estimate import LineItemEstimator

    result = LineItemEstimator().estimate([
        {"sku": "A1", "qty": 2, "price": 99.5, "itemDiscountPct": 10},
    ])
    result.subtotal  # Decimal("179.10")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable, Mapping

from charges_engines.tracer import traced_engine
from charges_kernel.domain.defaults import LineItem
from charges_kernel.domain.values import HUNDRED, round2
from charges_kernel.logging_config import get_logger

logger = get_logger("engines.estimate")


@dataclass(frozen=True)
class EstimatedLine:
    """One normalized order line with its computed pre-tax figures."""

    qty: Decimal
    price: Decimal
    item_discount_pct: Decimal
    gross: Decimal
    discount_amount: Decimal
    taxable: Decimal

    # Pass-through identifiers
    inventory_id: str | None = None
    sku: str | None = None
    name: str | None = None
    hsn: str | None = None
    uom: str | None = None
    image_url: str | None = None

    # Unrecognized caller keys, echoed under the computed fields
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.extra,
            "inventoryId": self.inventory_id,
            "name": self.name,
            "sku": self.sku,
            "hsn": self.hsn,
            "uom": self.uom,
            "imageUrl": self.image_url,
            "qty": str(self.qty),
            "price": str(self.price),
            "itemDiscountPct": str(self.item_discount_pct),
            "gross": str(self.gross),
            "discountAmount": str(self.discount_amount),
            "taxable": str(self.taxable),
        }


@dataclass(frozen=True)
class EstimateResult:
    """Normalized lines plus the incrementally rounded subtotal."""

    items: tuple[EstimatedLine, ...] = field(default_factory=tuple)
    subtotal: Decimal = Decimal("0.00")

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [line.to_dict() for line in self.items],
            "subtotal": str(self.subtotal),
        }


def as_line_item(item: LineItem | Mapping[str, Any] | None) -> LineItem:
    if isinstance(item, LineItem):
        return item
    if item is None:
        return LineItem()
    return LineItem.from_mapping(dict(item))


def estimate_line(item: LineItem) -> EstimatedLine:
    """Compute gross, discount and taxable for a single line."""
    qty = round2(item.qty)
    price = round2(item.price)
    item_discount_pct = round2(item.item_discount_pct)

    gross = round2(qty * price)
    discount_amount = round2(gross * item_discount_pct / HUNDRED)
    taxable = round2(gross - discount_amount)

    return EstimatedLine(
        qty=qty,
        price=price,
        item_discount_pct=item_discount_pct,
        gross=gross,
        discount_amount=discount_amount,
        taxable=taxable,
        inventory_id=item.inventory_id,
        sku=item.sku,
        name=item.name,
        hsn=item.hsn,
        uom=item.uom,
        image_url=item.image_url,
        extra=dict(item.extra),
    )


class LineItemEstimator:
    """
    Pre-tax order estimate.

    Pure and deterministic: identical input yields identical output.
    """

    @traced_engine("estimate", "1", fingerprint_fields=("items",))
    def estimate(
        self,
        items: Iterable[LineItem | Mapping[str, Any]] | None,
    ) -> EstimateResult:
        """
        Estimate a list of order lines.

        Args:
            items: LineItem objects or raw mappings (camelCase or snake_case).
                Non-numeric quantities, prices or discounts count as 0.

        Returns:
            EstimateResult with per-line figures and the subtotal.
        """
        subtotal = Decimal("0.00")
        lines: list[EstimatedLine] = []

        for raw in items or ():
            line = estimate_line(as_line_item(raw))
            subtotal = round2(subtotal + line.taxable)
            lines.append(line)

        logger.debug("estimate_completed", extra={
            "line_count": len(lines),
            "subtotal": str(subtotal),
        })

        return EstimateResult(items=tuple(lines), subtotal=subtotal)
