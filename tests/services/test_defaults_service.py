"""
Tests for ChargesDefaultsService (the configuration store).

Covers:
- Reads degrade to the base shape / all-inherit override
- Partial global and override writes
- Audit stamps and revisions, optimistic concurrency
- Clearing an override restores inheritance without deleting the row
- Effective defaults resolution
- Newest-first override listing with a cursor
- Missing identifiers and strict payload validation
"""

from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from charges_kernel.domain.defaults import (
    GlobalDefaults,
    RetailerOverride,
    RoundRule,
    TaxType,
)
from charges_kernel.exceptions import (
    InvalidConfigPayloadError,
    MissingIdentifierError,
    OptimisticLockError,
)
from charges_kernel.models.charges_defaults import GlobalDefaultsRecord, RetailerOverrideRecord
from charges_services.defaults_service import ChargesDefaultsService

TEST_TENANT_ID = "dist-001"
TEST_COUNTERPARTY_ID = "ret-001"
TEST_ACTOR_ID = "user-42"


def _backend_down(*args, **kwargs):
    raise OperationalError("SELECT 1", {}, Exception("connection refused"))


@pytest.fixture
def store(session, clock):
    return ChargesDefaultsService(session, clock=clock)


class TestReads:
    """Absent configuration is never an error."""

    def test_global_defaults_absent_is_base_shape(self, store):
        assert store.get_global_defaults(TEST_TENANT_ID) == GlobalDefaults()

    def test_custom_base_shape(self, session):
        base = GlobalDefaults(gst_rate=Decimal("12"))
        store = ChargesDefaultsService(session, base_defaults=base)
        assert store.get_global_defaults(TEST_TENANT_ID) is base
        assert store.base_defaults is base

    def test_override_absent_is_all_inherit(self, store):
        override = store.get_retailer_override(TEST_TENANT_ID, TEST_COUNTERPARTY_ID)
        assert override == RetailerOverride()
        assert override.is_empty

    def test_missing_ids_on_read_degrade(self, store, captured_logs):
        assert store.get_global_defaults(None) == GlobalDefaults()
        assert store.get_retailer_override(TEST_TENANT_ID, "") == RetailerOverride()
        messages = [r["message"] for r in captured_logs()]
        assert "global_defaults_read_without_tenant" in messages
        assert "retailer_override_read_without_ids" in messages

    def test_backend_read_error_degrades(self, store, monkeypatch, captured_logs):
        store.set_global_defaults(TEST_TENANT_ID, {"deliveryFee": 50})
        monkeypatch.setattr(store.selector, "get_global", _backend_down)
        monkeypatch.setattr(store.selector, "get_override", _backend_down)
        monkeypatch.setattr(store.selector, "list_overrides", _backend_down)

        assert store.get_global_defaults(TEST_TENANT_ID) == GlobalDefaults()
        assert store.get_retailer_override(TEST_TENANT_ID, TEST_COUNTERPARTY_ID).is_empty
        assert store.list_retailer_overrides(TEST_TENANT_ID).items == ()
        failures = [r for r in captured_logs() if r["message"] == "global_defaults_read_failed"]
        assert failures and failures[0]["exc_type"] == "OperationalError"


class TestGlobalWrites:
    """Tenant defaults upsert."""

    def test_first_save_creates_record(self, store, session, clock):
        saved = store.set_global_defaults(
            TEST_TENANT_ID, {"deliveryFee": 50, "taxType": "IGST"}, actor_id=TEST_ACTOR_ID
        )
        assert saved.delivery_fee == Decimal("50")
        assert saved.tax_type is TaxType.IGST
        assert saved.gst_rate == Decimal("18")
        assert saved.updated_at == clock.now()
        assert saved.updated_by == TEST_ACTOR_ID
        assert saved.revision == 1
        count = session.execute(select(func.count()).select_from(GlobalDefaultsRecord)).scalar_one()
        assert count == 1

    def test_partial_update_keeps_other_fields(self, store):
        store.set_global_defaults(TEST_TENANT_ID, {"deliveryFee": 50, "roundRule": "up"})
        saved = store.set_global_defaults(TEST_TENANT_ID, {"packingFee": 5})
        assert saved.delivery_fee == Decimal("50")
        assert saved.packing_fee == Decimal("5")
        assert saved.round_rule is RoundRule.UP
        assert saved.revision == 2
        count = store.session.execute(select(func.count()).select_from(GlobalDefaultsRecord)).scalar_one()
        assert count == 1

    def test_read_back(self, store):
        store.set_global_defaults(TEST_TENANT_ID, {"gstRate": 12, "cgstRate": 6, "sgstRate": 6})
        loaded = store.get_global_defaults(TEST_TENANT_ID)
        assert loaded.gst_rate == Decimal("12")
        assert loaded.cgst_rate == Decimal("6")
        assert loaded.revision == 1

    def test_invalid_field_coerced_to_previous(self, store):
        store.set_global_defaults(TEST_TENANT_ID, {"deliveryFee": 50})
        saved = store.set_global_defaults(TEST_TENANT_ID, {"deliveryFee": -10, "otherFee": 2})
        assert saved.delivery_fee == Decimal("50")
        assert saved.other_fee == Decimal("2")

    def test_tenants_isolated(self, store):
        store.set_global_defaults("dist-A", {"deliveryFee": 50})
        assert store.get_global_defaults("dist-B") == GlobalDefaults()

    def test_missing_tenant_raises(self, store):
        with pytest.raises(MissingIdentifierError) as exc_info:
            store.set_global_defaults("", {"deliveryFee": 50})
        assert exc_info.value.code == "MISSING_IDENTIFIER"
        assert exc_info.value.identifier == "tenant_id"

    def test_strict_service_rejects_and_writes_nothing(self, session):
        store = ChargesDefaultsService(session, strict=True)
        with pytest.raises(InvalidConfigPayloadError):
            store.set_global_defaults(TEST_TENANT_ID, {"gstRate": "eighteen"})
        count = session.execute(select(func.count()).select_from(GlobalDefaultsRecord)).scalar_one()
        assert count == 0

    def test_save_logged_with_context(self, store, captured_logs):
        store.set_global_defaults(TEST_TENANT_ID, {"deliveryFee": 50}, actor_id=TEST_ACTOR_ID)
        saved = [r for r in captured_logs() if r["message"] == "global_defaults_saved"]
        assert len(saved) == 1
        assert saved[0]["changed_fields"] == ["deliveryFee"]
        assert saved[0]["tenant_id"] == TEST_TENANT_ID
        assert saved[0]["actor_id"] == TEST_ACTOR_ID
        assert saved[0]["revision"] == 1


class TestOptimisticConcurrency:
    """expected_revision guards against lost updates."""

    def test_matching_revision_accepted(self, store):
        first = store.set_global_defaults(TEST_TENANT_ID, {"deliveryFee": 50}, expected_revision=0)
        second = store.set_global_defaults(
            TEST_TENANT_ID, {"deliveryFee": 60}, expected_revision=first.revision
        )
        assert second.revision == 2

    def test_stale_revision_rejected(self, store):
        store.set_global_defaults(TEST_TENANT_ID, {"deliveryFee": 50})
        store.set_global_defaults(TEST_TENANT_ID, {"deliveryFee": 60})
        with pytest.raises(OptimisticLockError) as exc_info:
            store.set_global_defaults(TEST_TENANT_ID, {"deliveryFee": 70}, expected_revision=1)
        err = exc_info.value
        assert err.expected_revision == 1
        assert err.actual_revision == 2
        assert store.get_global_defaults(TEST_TENANT_ID).delivery_fee == Decimal("60")

    def test_override_revision_checked(self, store):
        store.set_retailer_override(TEST_TENANT_ID, TEST_COUNTERPARTY_ID, {"gstRate": 5})
        with pytest.raises(OptimisticLockError) as exc_info:
            store.set_retailer_override(
                TEST_TENANT_ID, TEST_COUNTERPARTY_ID, {"gstRate": 12}, expected_revision=0
            )
        assert exc_info.value.record_key == f"{TEST_TENANT_ID}/{TEST_COUNTERPARTY_ID}"

    def test_without_expected_revision_last_write_wins(self, store):
        store.set_global_defaults(TEST_TENANT_ID, {"deliveryFee": 50})
        saved = store.set_global_defaults(TEST_TENANT_ID, {"deliveryFee": 70})
        assert saved.delivery_fee == Decimal("70")


class TestOverrideWrites:
    """Counterparty override upsert and clear."""

    def test_partial_override(self, store):
        store.set_retailer_override(
            TEST_TENANT_ID, TEST_COUNTERPARTY_ID, {"deliveryFee": 0, "notes": "pickup"}
        )
        saved = store.set_retailer_override(TEST_TENANT_ID, TEST_COUNTERPARTY_ID, {"gstRate": 5})
        assert saved.delivery_fee == Decimal("0")
        assert saved.gst_rate == Decimal("5")
        assert saved.notes == "pickup"
        assert saved.packing_fee is None
        assert saved.revision == 2

    def test_null_clears_single_field(self, store):
        store.set_retailer_override(
            TEST_TENANT_ID, TEST_COUNTERPARTY_ID, {"deliveryFee": 0, "gstRate": 5}
        )
        saved = store.set_retailer_override(
            TEST_TENANT_ID, TEST_COUNTERPARTY_ID, {"deliveryFee": None}
        )
        assert saved.delivery_fee is None
        assert saved.gst_rate == Decimal("5")

    def test_clear_restores_inheritance_and_keeps_row(self, store, session):
        store.set_retailer_override(
            TEST_TENANT_ID, TEST_COUNTERPARTY_ID, {"enabled": False, "notes": "x"}
        )
        cleared = store.clear_retailer_override(
            TEST_TENANT_ID, TEST_COUNTERPARTY_ID, actor_id=TEST_ACTOR_ID
        )
        assert cleared.is_empty
        assert cleared.notes is None
        assert cleared.updated_by == TEST_ACTOR_ID
        assert cleared.revision == 2
        count = session.execute(select(func.count()).select_from(RetailerOverrideRecord)).scalar_one()
        assert count == 1

    def test_missing_counterparty_raises(self, store):
        with pytest.raises(MissingIdentifierError) as exc_info:
            store.set_retailer_override(TEST_TENANT_ID, None, {"gstRate": 5})
        assert exc_info.value.identifier == "counterparty_id"

    def test_save_logged(self, store, captured_logs):
        store.clear_retailer_override(TEST_TENANT_ID, TEST_COUNTERPARTY_ID)
        saved = [r for r in captured_logs() if r["message"] == "retailer_override_saved"]
        assert saved and saved[0]["inherits_all"] is True
        assert saved[0]["counterparty_id"] == TEST_COUNTERPARTY_ID


class TestEffectiveDefaults:
    """Override over global over base."""

    def test_base_only(self, store):
        effective = store.get_effective_defaults(TEST_TENANT_ID, TEST_COUNTERPARTY_ID)
        assert effective.gst_rate == Decimal("18")
        assert effective.enabled is True

    def test_zero_override_wins(self, store):
        store.set_global_defaults(TEST_TENANT_ID, {"deliveryFee": 50, "packingFee": 10})
        store.set_retailer_override(TEST_TENANT_ID, TEST_COUNTERPARTY_ID, {"deliveryFee": 0})
        effective = store.get_effective_defaults(TEST_TENANT_ID, TEST_COUNTERPARTY_ID)
        assert effective.delivery_fee == Decimal("0")
        assert effective.packing_fee == Decimal("10")

    def test_without_counterparty_uses_global(self, store):
        store.set_global_defaults(TEST_TENANT_ID, {"deliveryFee": 50})
        store.set_retailer_override(TEST_TENANT_ID, TEST_COUNTERPARTY_ID, {"deliveryFee": 0})
        assert store.get_effective_defaults(TEST_TENANT_ID).delivery_fee == Decimal("50")

    def test_cleared_override_inherits(self, store):
        store.set_global_defaults(TEST_TENANT_ID, {"deliveryFee": 50})
        store.set_retailer_override(TEST_TENANT_ID, TEST_COUNTERPARTY_ID, {"deliveryFee": 0})
        store.clear_retailer_override(TEST_TENANT_ID, TEST_COUNTERPARTY_ID)
        effective = store.get_effective_defaults(TEST_TENANT_ID, TEST_COUNTERPARTY_ID)
        assert effective.delivery_fee == Decimal("50")

    def test_disabled_retailer(self, store):
        store.set_retailer_override(TEST_TENANT_ID, TEST_COUNTERPARTY_ID, {"enabled": False})
        assert store.get_effective_defaults(TEST_TENANT_ID, TEST_COUNTERPARTY_ID).enabled is False


class TestListOverrides:
    """Newest-first pagination."""

    def _seed(self, store, clock):
        for counterparty in ("ret-a", "ret-b", "ret-c"):
            store.set_retailer_override(TEST_TENANT_ID, counterparty, {"gstRate": 5})
            clock.advance(60)
        store.set_retailer_override("other-tenant", "ret-z", {"gstRate": 5})

    def test_newest_first(self, store, clock):
        self._seed(store, clock)
        page = store.list_retailer_overrides(TEST_TENANT_ID)
        assert [cp for cp, _ in page.items] == ["ret-c", "ret-b", "ret-a"]
        assert page.next_cursor is None

    def test_cursor_pagination(self, store, clock):
        self._seed(store, clock)
        first = store.list_retailer_overrides(TEST_TENANT_ID, limit=2)
        assert [cp for cp, _ in first.items] == ["ret-c", "ret-b"]
        assert first.next_cursor == "ret-b"

        second = store.list_retailer_overrides(TEST_TENANT_ID, limit=2, after=first.next_cursor)
        assert [cp for cp, _ in second.items] == ["ret-a"]
        assert second.next_cursor is None

    def test_same_timestamp_ordered_by_counterparty(self, store):
        for counterparty in ("ret-b", "ret-a"):
            store.set_retailer_override(TEST_TENANT_ID, counterparty, {"gstRate": 5})
        page = store.list_retailer_overrides(TEST_TENANT_ID, limit=1)
        assert [cp for cp, _ in page.items] == ["ret-a"]
        second = store.list_retailer_overrides(TEST_TENANT_ID, limit=1, after=page.next_cursor)
        assert [cp for cp, _ in second.items] == ["ret-b"]

    def test_unknown_cursor_starts_over(self, store, clock):
        self._seed(store, clock)
        page = store.list_retailer_overrides(TEST_TENANT_ID, after="ret-unknown")
        assert len(page.items) == 3

    def test_missing_tenant_is_empty(self, store):
        assert store.list_retailer_overrides(None).items == ()
