"""
Charges configuration selector.

Read-only access to the global defaults and retailer override rows.

Key design decisions:
- Returns domain DTOs (GlobalDefaults, RetailerOverride), not ORM rows
- Missing rows return None; falling back to the base shape is the
  caller's decision
- Override listing is newest first with a counterparty-id cursor
"""

from __future__ import annotations

from sqlalchemy import and_, or_, select

from charges_kernel.domain.defaults import (
    CONFIG_FIELDS,
    GlobalDefaults,
    RetailerOverride,
    RetailerOverridePage,
    RoundRule,
    TaxType,
)
from charges_kernel.models.charges_defaults import GlobalDefaultsRecord, RetailerOverrideRecord
from charges_kernel.selectors.base import BaseSelector


def _enum_or_none(enum_cls, value):
    if value is None:
        return None
    return enum_cls(value)


def global_to_dto(record: GlobalDefaultsRecord) -> GlobalDefaults:
    """Convert an ORM global defaults row to its DTO."""
    values = {name: getattr(record, name) for name in CONFIG_FIELDS}
    values["tax_type"] = _enum_or_none(TaxType, record.tax_type)
    values["round_rule"] = RoundRule(record.round_rule)
    return GlobalDefaults(
        **values,
        updated_at=record.updated_at,
        updated_by=record.updated_by,
        revision=record.revision,
    )


def override_to_dto(record: RetailerOverrideRecord) -> RetailerOverride:
    """Convert an ORM override row to its DTO."""
    values = {name: getattr(record, name) for name in CONFIG_FIELDS}
    values["tax_type"] = _enum_or_none(TaxType, record.tax_type)
    values["round_rule"] = _enum_or_none(RoundRule, record.round_rule)
    return RetailerOverride(
        **values,
        notes=record.notes,
        updated_at=record.updated_at,
        updated_by=record.updated_by,
        revision=record.revision,
    )


class ChargesDefaultsSelector(BaseSelector[GlobalDefaultsRecord]):
    """Queries for the two configuration records of a tenant."""

    def find_global_record(self, tenant_id: str) -> GlobalDefaultsRecord | None:
        stmt = select(GlobalDefaultsRecord).where(GlobalDefaultsRecord.tenant_id == tenant_id)
        return self.session.execute(stmt).scalar_one_or_none()

    def find_override_record(
        self, tenant_id: str, counterparty_id: str
    ) -> RetailerOverrideRecord | None:
        stmt = select(RetailerOverrideRecord).where(
            RetailerOverrideRecord.tenant_id == tenant_id,
            RetailerOverrideRecord.counterparty_id == counterparty_id,
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def get_global(self, tenant_id: str) -> GlobalDefaults | None:
        """Stored global defaults, or None when the tenant never saved any."""
        record = self.find_global_record(tenant_id)
        return global_to_dto(record) if record is not None else None

    def get_override(self, tenant_id: str, counterparty_id: str) -> RetailerOverride | None:
        """Stored override, or None when the pair has no row."""
        record = self.find_override_record(tenant_id, counterparty_id)
        return override_to_dto(record) if record is not None else None

    def list_overrides(
        self,
        tenant_id: str,
        limit: int = 50,
        after: str | None = None,
    ) -> RetailerOverridePage:
        """
        List a tenant's overrides, most recently updated first.

        Args:
            tenant_id: Tenant whose overrides to list.
            limit: Page size (at least 1).
            after: Counterparty id of the last row of the previous page.
                An unknown cursor starts from the first page.

        Returns:
            RetailerOverridePage of (counterparty_id, override) pairs.
        """
        limit = max(1, limit)
        stmt = select(RetailerOverrideRecord).where(RetailerOverrideRecord.tenant_id == tenant_id)

        if after is not None:
            cursor = self.find_override_record(tenant_id, after)
            if cursor is not None:
                stmt = stmt.where(
                    or_(
                        RetailerOverrideRecord.updated_at < cursor.updated_at,
                        and_(
                            RetailerOverrideRecord.updated_at == cursor.updated_at,
                            RetailerOverrideRecord.counterparty_id > cursor.counterparty_id,
                        ),
                    )
                )

        stmt = stmt.order_by(
            RetailerOverrideRecord.updated_at.desc(),
            RetailerOverrideRecord.counterparty_id.asc(),
        ).limit(limit + 1)

        records = list(self.session.execute(stmt).scalars().all())
        has_more = len(records) > limit
        records = records[:limit]

        items = tuple((r.counterparty_id, override_to_dto(r)) for r in records)
        next_cursor = records[-1].counterparty_id if has_more and records else None
        return RetailerOverridePage(items=items, next_cursor=next_cursor)


__all__ = [
    "ChargesDefaultsSelector",
    "global_to_dto",
    "override_to_dto",
]
