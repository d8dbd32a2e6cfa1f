"""
Tests for the line-item estimator.

Covers:
- Per-line gross / discount / taxable figures
- Incremental 2 dp subtotal
- Raw mapping input (camelCase and snake_case)
- Malformed numbers treated as 0
"""

from decimal import Decimal

from charges_engines.estimate import EstimateResult, LineItemEstimator, estimate_line
from charges_kernel.domain.defaults import LineItem


class TestEstimateLine:
    """Single-line figures."""

    def test_discounted_line(self):
        line = estimate_line(LineItem(qty=2, price=Decimal("99.5"), item_discount_pct=10))
        assert line.gross == Decimal("199.00")
        assert line.discount_amount == Decimal("19.90")
        assert line.taxable == Decimal("179.10")

    def test_float_inputs_round_half_up(self):
        line = estimate_line(LineItem(qty=1, price=1.005))
        assert line.price == Decimal("1.01")
        assert line.taxable == Decimal("1.01")

    def test_identifiers_pass_through(self):
        line = estimate_line(LineItem(qty=1, price=10, sku="A1", inventory_id="inv-1", hsn="3004"))
        assert line.sku == "A1"
        assert line.inventory_id == "inv-1"
        assert line.hsn == "3004"

    def test_non_numeric_values_are_zero(self):
        line = estimate_line(LineItem(qty="lots", price=None, item_discount_pct=True))
        assert line.qty == Decimal("0.00")
        assert line.taxable == Decimal("0.00")


class TestLineItemEstimator:
    """Order-level estimate."""

    def setup_method(self):
        self.estimator = LineItemEstimator()

    def test_empty_order(self):
        result = self.estimator.estimate([])
        assert result == EstimateResult()
        assert result.subtotal == Decimal("0.00")

    def test_none_items(self):
        assert self.estimator.estimate(None).items == ()

    def test_subtotal_of_mapping_lines(self):
        result = self.estimator.estimate([
            {"sku": "A1", "qty": 2, "price": 99.5, "itemDiscountPct": 10},
            {"sku": "B2", "qty": 3, "price": "10.10", "item_discount_pct": 0},
        ])
        assert [line.sku for line in result.items] == ["A1", "B2"]
        assert result.items[1].taxable == Decimal("30.30")
        assert result.subtotal == Decimal("209.40")

    def test_subtotal_equals_sum_of_rounded_lines(self):
        items = [{"qty": 3, "price": "0.335", "itemDiscountPct": 7} for _ in range(25)]
        result = self.estimator.estimate(items)
        assert result.subtotal == sum((line.taxable for line in result.items), Decimal("0"))

    def test_unknown_keys_echoed_but_not_computed(self):
        result = self.estimator.estimate([{"qty": 1, "price": 5, "colour": "red"}])
        assert result.subtotal == Decimal("5.00")
        assert result.items[0].extra == {"colour": "red"}
        assert result.items[0].to_dict()["colour"] == "red"

    def test_extra_keys_cannot_shadow_computed_figures(self):
        line = self.estimator.estimate([{"qty": 2, "price": 5, "gross": "999"}]).items[0]
        assert line.to_dict()["gross"] == "10.00"

    def test_cart_unit_and_image_keys(self):
        line = self.estimator.estimate([{"qty": 1, "price": 2, "unit": "kg", "image": "x.png"}]).items[0]
        assert line.uom == "kg"
        assert line.image_url == "x.png"
        data = line.to_dict()
        assert data["uom"] == "kg"
        assert data["imageUrl"] == "x.png"
        assert "unit" not in data
        assert "image" not in data

    def test_huge_quantities_round_without_error(self):
        result = self.estimator.estimate([{"qty": 1e20, "price": 1e10}])
        assert result.items[0].gross == Decimal("1e30")
        assert result.subtotal == Decimal("1e30")
        assert result.to_dict()["subtotal"].endswith(".00")

    def test_deterministic(self):
        items = [{"qty": 1.5, "price": 33.33, "itemDiscountPct": 12.5}]
        assert self.estimator.estimate(items) == self.estimator.estimate(items)

    def test_to_dict_uses_wire_names(self):
        result = self.estimator.estimate([{"qty": 1, "price": 5, "imageUrl": "x.png"}])
        data = result.to_dict()
        assert data["subtotal"] == "5.00"
        assert data["items"][0]["imageUrl"] == "x.png"
        assert data["items"][0]["taxable"] == "5.00"
