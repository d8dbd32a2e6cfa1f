"""
Module: charges_kernel.models.charges_defaults
Responsibility: ORM persistence for the two configuration levels: one
    tenant-wide defaults row per tenant and one nullable override row per
    tenant + counterparty pair.
Architecture position: Kernel > Models. May import from db/base.py only.

Invariants enforced:
    - uq_global_defaults_tenant: at most one global row per tenant.
    - uq_retailer_override_pair: at most one override per tenant/counterparty.
    - Global configuration columns are NOT NULL; override configuration
      columns are nullable (NULL = inherit).

Failure modes:
    - IntegrityError when two writers race to create the same row; the
      service layer does not retry.

Non-goals:
    - Rows hold no computed charges; breakdowns are never persisted here.
"""

from decimal import Decimal

from sqlalchemy import Boolean, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from charges_kernel.db.base import ConfigRecordBase


class GlobalDefaultsRecord(ConfigRecordBase):
    """Tenant-wide charges defaults. Created lazily on first save."""

    __tablename__ = "charges_global_defaults"

    __table_args__ = (
        UniqueConstraint("tenant_id", name="uq_global_defaults_tenant"),
    )

    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False)
    tax_type: Mapped[str | None] = mapped_column(String(16), nullable=True)
    autodetect_tax_type: Mapped[bool] = mapped_column(Boolean, nullable=False)

    gst_rate: Mapped[Decimal] = mapped_column(nullable=False)
    cgst_rate: Mapped[Decimal] = mapped_column(nullable=False)
    sgst_rate: Mapped[Decimal] = mapped_column(nullable=False)
    igst_rate: Mapped[Decimal] = mapped_column(nullable=False)

    delivery_fee: Mapped[Decimal] = mapped_column(nullable=False)
    packing_fee: Mapped[Decimal] = mapped_column(nullable=False)
    insurance_fee: Mapped[Decimal] = mapped_column(nullable=False)
    other_fee: Mapped[Decimal] = mapped_column(nullable=False)

    discount_pct: Mapped[Decimal] = mapped_column(nullable=False)
    discount_amt: Mapped[Decimal] = mapped_column(nullable=False)

    round_rule: Mapped[str] = mapped_column(String(16), nullable=False)
    skip_proforma: Mapped[bool] = mapped_column(Boolean, nullable=False)


class RetailerOverrideRecord(ConfigRecordBase):
    """
    Counterparty override. Clearing writes NULL to every field; the row stays.
    """

    __tablename__ = "charges_retailer_overrides"

    __table_args__ = (
        UniqueConstraint("tenant_id", "counterparty_id", name="uq_retailer_override_pair"),
        Index("idx_retailer_override_updated", "tenant_id", "updated_at"),
    )

    counterparty_id: Mapped[str] = mapped_column(String(128), nullable=False)

    enabled: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    tax_type: Mapped[str | None] = mapped_column(String(16), nullable=True)
    autodetect_tax_type: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    gst_rate: Mapped[Decimal | None] = mapped_column(nullable=True)
    cgst_rate: Mapped[Decimal | None] = mapped_column(nullable=True)
    sgst_rate: Mapped[Decimal | None] = mapped_column(nullable=True)
    igst_rate: Mapped[Decimal | None] = mapped_column(nullable=True)

    delivery_fee: Mapped[Decimal | None] = mapped_column(nullable=True)
    packing_fee: Mapped[Decimal | None] = mapped_column(nullable=True)
    insurance_fee: Mapped[Decimal | None] = mapped_column(nullable=True)
    other_fee: Mapped[Decimal | None] = mapped_column(nullable=True)

    discount_pct: Mapped[Decimal | None] = mapped_column(nullable=True)
    discount_amt: Mapped[Decimal | None] = mapped_column(nullable=True)

    round_rule: Mapped[str | None] = mapped_column(String(16), nullable=True)
    skip_proforma: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
