"""
Tests for merging a retailer override over global defaults.

Covers:
- Absent global record falls back to the base shape
- Only None inherits; explicit 0 and False win
- Audit stamps come from the global record
"""

from datetime import datetime, timezone
from decimal import Decimal

from charges_engines.merge import merge_effective_defaults
from charges_kernel.domain.defaults import (
    CONFIG_FIELDS,
    EffectiveDefaults,
    GlobalDefaults,
    RetailerOverride,
    RoundRule,
    TaxType,
)


class TestMergeEffectiveDefaults:
    """Field-by-field override precedence."""

    def setup_method(self):
        self.global_defaults = GlobalDefaults(
            delivery_fee=Decimal("50"),
            discount_pct=Decimal("5"),
            round_rule=RoundRule.UP,
            updated_at=datetime(2024, 3, 1, tzinfo=timezone.utc),
            updated_by="admin",
            revision=4,
        )

    def test_no_global_no_override_is_base_shape(self):
        effective = merge_effective_defaults(None)
        assert effective == EffectiveDefaults()
        assert effective.gst_rate == Decimal("18")
        assert effective.cgst_rate == Decimal("9")
        assert effective.tax_type is None

    def test_no_override_copies_global(self):
        effective = merge_effective_defaults(self.global_defaults)
        for name in CONFIG_FIELDS:
            assert getattr(effective, name) == getattr(self.global_defaults, name)

    def test_empty_override_inherits_everything(self):
        effective = merge_effective_defaults(self.global_defaults, RetailerOverride())
        assert effective == merge_effective_defaults(self.global_defaults)

    def test_zero_override_wins_over_global(self):
        override = RetailerOverride(delivery_fee=Decimal("0"))
        effective = merge_effective_defaults(self.global_defaults, override)
        assert effective.delivery_fee == Decimal("0")

    def test_unset_override_inherits_global(self):
        override = RetailerOverride(packing_fee=Decimal("10"))
        effective = merge_effective_defaults(self.global_defaults, override)
        assert effective.delivery_fee == Decimal("50")
        assert effective.packing_fee == Decimal("10")

    def test_false_override_wins(self):
        override = RetailerOverride(enabled=False, autodetect_tax_type=False)
        effective = merge_effective_defaults(self.global_defaults, override)
        assert effective.enabled is False
        assert effective.autodetect_tax_type is False

    def test_enum_overrides(self):
        override = RetailerOverride(tax_type=TaxType.IGST, round_rule=RoundRule.DOWN)
        effective = merge_effective_defaults(self.global_defaults, override)
        assert effective.tax_type is TaxType.IGST
        assert effective.round_rule is RoundRule.DOWN

    def test_audit_stamps_from_global(self):
        override = RetailerOverride(gst_rate=Decimal("12"), updated_by="someone-else")
        effective = merge_effective_defaults(self.global_defaults, override)
        assert effective.updated_by == "admin"
        assert effective.updated_at == self.global_defaults.updated_at

    def test_notes_never_leak_into_effective(self):
        override = RetailerOverride(notes="special terms")
        effective = merge_effective_defaults(self.global_defaults, override)
        assert not hasattr(effective, "notes")

    def test_merge_logs_overridden_fields(self, captured_logs):
        merge_effective_defaults(self.global_defaults, RetailerOverride(other_fee=Decimal("1")))
        records = [r for r in captured_logs() if r["message"] == "effective_defaults_merged"]
        assert records
        assert records[-1]["overridden_fields"] == ["other_fee"]
