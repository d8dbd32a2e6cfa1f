"""
charges_services.defaults_service -- Charges configuration store.

Responsibility:
    Read and write the two configuration levels (tenant-wide defaults,
    per-counterparty overrides) and resolve the effective defaults for a
    tenant/counterparty pair.

Architecture position:
    Services -- stateful orchestration over engines + kernel. Receives a
    Session via constructor injection; flushes, never commits.

Invariants enforced:
    - Tenant and counterparty ids are explicit parameters on every call;
      there is no ambient "current tenant".
    - Every write is sanitized, stamped (updated_at from the injected clock,
      updated_by from actor_id) and bumps ``revision``.
    - Writes are last-write-wins unless the caller passes
      ``expected_revision``, in which case a mismatch raises
      OptimisticLockError.

Failure modes:
    - MissingIdentifierError when a write lacks tenant/counterparty id.
    - Reads never fail: an absent row or a backend read error
      (SQLAlchemyError) yields the base shape / all-inherit override.
    - Backend write errors propagate untouched; nothing is retried here.

Usage:
    with session_scope() as session:
        store = ChargesDefaultsService(session)
        store.set_global_defaults("dist-1", {"deliveryFee": 50}, actor_id="u-7")
        effective = store.get_effective_defaults("dist-1", "ret-9")
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from charges_engines.merge import merge_effective_defaults
from charges_engines.sanitizer import OVERRIDE_FIELDS, sanitize_global, sanitize_override
from charges_kernel.domain.clock import Clock, SystemClock
from charges_kernel.domain.defaults import (
    CONFIG_FIELDS,
    EffectiveDefaults,
    GlobalDefaults,
    RetailerOverride,
    RetailerOverridePage,
    wire_name,
)
from charges_kernel.exceptions import MissingIdentifierError, OptimisticLockError
from charges_kernel.logging_config import LogContext, get_logger
from charges_kernel.models.charges_defaults import GlobalDefaultsRecord, RetailerOverrideRecord
from charges_kernel.selectors.defaults_selector import (
    ChargesDefaultsSelector,
    global_to_dto,
    override_to_dto,
)
from charges_services.base import BaseService

logger = get_logger("services.defaults")


def _column_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _changed_fields(before: Any, after: Any, names: tuple[str, ...]) -> list[str]:
    return [wire_name(n) for n in names if getattr(before, n) != getattr(after, n)]


class ChargesDefaultsService(BaseService[GlobalDefaultsRecord]):
    """
    Configuration store for tenant defaults and retailer overrides.

    Args:
        session: Caller-owned SQLAlchemy session.
        clock: Time source for ``updated_at`` stamps.
        base_defaults: Shape returned when a tenant has no global record.
        strict: Reject invalid payload fields instead of coercing them.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        base_defaults: GlobalDefaults | None = None,
        strict: bool = False,
    ):
        super().__init__(session)
        self.selector = ChargesDefaultsSelector(session)
        self._clock = clock or SystemClock()
        self._base_defaults = base_defaults or GlobalDefaults()
        self._strict = strict

    @property
    def base_defaults(self) -> GlobalDefaults:
        return self._base_defaults

    # -----------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------

    def get_global_defaults(self, tenant_id: str | None) -> GlobalDefaults:
        """Tenant defaults; the base shape when absent or unreadable."""
        if not tenant_id:
            logger.warning("global_defaults_read_without_tenant")
            return self._base_defaults
        try:
            stored = self.selector.get_global(tenant_id)
        except SQLAlchemyError:
            logger.warning(
                "global_defaults_read_failed",
                extra={"tenant_id": tenant_id},
                exc_info=True,
            )
            return self._base_defaults
        return stored if stored is not None else self._base_defaults

    def get_retailer_override(
        self, tenant_id: str | None, counterparty_id: str | None
    ) -> RetailerOverride:
        """Counterparty override; all-inherit when absent or unreadable."""
        if not tenant_id or not counterparty_id:
            logger.warning("retailer_override_read_without_ids")
            return RetailerOverride()
        try:
            stored = self.selector.get_override(tenant_id, counterparty_id)
        except SQLAlchemyError:
            logger.warning(
                "retailer_override_read_failed",
                extra={"tenant_id": tenant_id, "counterparty_id": counterparty_id},
                exc_info=True,
            )
            return RetailerOverride()
        return stored if stored is not None else RetailerOverride()

    def get_effective_defaults(
        self, tenant_id: str | None, counterparty_id: str | None = None
    ) -> EffectiveDefaults:
        """
        Effective configuration: override (non-None fields) over global over base.

        Without a counterparty the global defaults apply as-is.
        """
        global_defaults = self.get_global_defaults(tenant_id)
        override = (
            self.get_retailer_override(tenant_id, counterparty_id)
            if counterparty_id
            else None
        )
        return merge_effective_defaults(global_defaults, override)

    def list_retailer_overrides(
        self,
        tenant_id: str | None,
        limit: int = 50,
        after: str | None = None,
    ) -> RetailerOverridePage:
        """Page of a tenant's overrides, newest first; empty on read failure."""
        if not tenant_id:
            return RetailerOverridePage(items=())
        try:
            return self.selector.list_overrides(tenant_id, limit=limit, after=after)
        except SQLAlchemyError:
            logger.warning(
                "retailer_override_list_failed",
                extra={"tenant_id": tenant_id},
                exc_info=True,
            )
            return RetailerOverridePage(items=())

    # -----------------------------------------------------------------
    # Writes
    # -----------------------------------------------------------------

    def set_global_defaults(
        self,
        tenant_id: str | None,
        payload: Mapping[str, Any] | None,
        actor_id: str | None = None,
        expected_revision: int | None = None,
    ) -> GlobalDefaults:
        """
        Sanitize a partial payload and upsert the tenant's defaults.

        Args:
            tenant_id: Tenant (distributor) id. Required.
            payload: Partial wire payload; absent fields keep stored values.
            actor_id: Stamped as ``updated_by``.
            expected_revision: Optional optimistic-concurrency token.

        Returns:
            The saved GlobalDefaults.

        Raises:
            MissingIdentifierError: tenant_id missing.
            OptimisticLockError: expected_revision does not match.
            InvalidConfigPayloadError: strict service and invalid fields.
        """
        if not tenant_id:
            raise MissingIdentifierError("set_global_defaults", "tenant_id")

        with LogContext.bind(tenant_id=tenant_id, actor_id=actor_id):
            record = self.selector.find_global_record(tenant_id)
            current_revision = record.revision if record is not None else 0
            self._check_revision("global_defaults", tenant_id, current_revision, expected_revision)

            previous = global_to_dto(record) if record is not None else self._base_defaults
            clean = sanitize_global(payload, previous, strict=self._strict)

            if record is None:
                record = GlobalDefaultsRecord(tenant_id=tenant_id)
                self.session.add(record)

            for name in CONFIG_FIELDS:
                setattr(record, name, _column_value(getattr(clean, name)))
            record.updated_at = self._clock.now()
            record.updated_by = actor_id
            record.revision = current_revision + 1
            self.session.flush()

            logger.info("global_defaults_saved", extra={
                "revision": record.revision,
                "changed_fields": _changed_fields(previous, clean, CONFIG_FIELDS),
            })
            return global_to_dto(record)

    def set_retailer_override(
        self,
        tenant_id: str | None,
        counterparty_id: str | None,
        payload: Mapping[str, Any] | None,
        actor_id: str | None = None,
        expected_revision: int | None = None,
    ) -> RetailerOverride:
        """
        Sanitize a partial payload and upsert the counterparty override.

        Per field: absent keeps the stored value, null clears it to
        inherit, a valid value overrides.

        Raises:
            MissingIdentifierError: tenant_id or counterparty_id missing.
            OptimisticLockError: expected_revision does not match.
            InvalidConfigPayloadError: strict service and invalid fields.
        """
        if not tenant_id:
            raise MissingIdentifierError("set_retailer_override", "tenant_id")
        if not counterparty_id:
            raise MissingIdentifierError("set_retailer_override", "counterparty_id")

        with LogContext.bind(tenant_id=tenant_id, counterparty_id=counterparty_id, actor_id=actor_id):
            record = self.selector.find_override_record(tenant_id, counterparty_id)
            current_revision = record.revision if record is not None else 0
            record_key = f"{tenant_id}/{counterparty_id}"
            self._check_revision("retailer_override", record_key, current_revision, expected_revision)

            previous = override_to_dto(record) if record is not None else RetailerOverride()
            clean = sanitize_override(payload, previous, strict=self._strict)

            if record is None:
                record = RetailerOverrideRecord(tenant_id=tenant_id, counterparty_id=counterparty_id)
                self.session.add(record)

            for name in OVERRIDE_FIELDS:
                setattr(record, name, _column_value(getattr(clean, name)))
            record.updated_at = self._clock.now()
            record.updated_by = actor_id
            record.revision = current_revision + 1
            self.session.flush()

            logger.info("retailer_override_saved", extra={
                "revision": record.revision,
                "changed_fields": _changed_fields(previous, clean, OVERRIDE_FIELDS),
                "inherits_all": clean.is_empty,
            })
            return override_to_dto(record)

    def clear_retailer_override(
        self,
        tenant_id: str | None,
        counterparty_id: str | None,
        actor_id: str | None = None,
        expected_revision: int | None = None,
    ) -> RetailerOverride:
        """Restore full inheritance by writing null to every field; the row stays."""
        return self.set_retailer_override(
            tenant_id,
            counterparty_id,
            {name: None for name in OVERRIDE_FIELDS},
            actor_id=actor_id,
            expected_revision=expected_revision,
        )

    def _check_revision(
        self,
        record_kind: str,
        record_key: str,
        current_revision: int,
        expected_revision: int | None,
    ) -> None:
        if expected_revision is None or expected_revision == current_revision:
            return
        logger.warning("config_write_conflict", extra={
            "record_kind": record_kind,
            "expected_revision": expected_revision,
            "actual_revision": current_revision,
        })
        raise OptimisticLockError(record_kind, record_key, expected_revision, current_revision)
