"""
charges_services.quote_service -- Order charges quotes and live previews.

Responsibility:
    Compose the configuration store with the pure engines so that the
    settings-screen preview and the figure stored on an order are produced
    by the very same code path:

        estimate(items) -> subtotal
        get_effective_defaults(tenant, counterparty) -> config
        compute(subtotal, config, profiles) -> breakdown

Architecture position:
    Services -- orchestration over engines + kernel. Performs reads only.

Invariants enforced:
    - Preview of unsaved settings sanitizes the draft payload exactly as a
      save would, without writing anything.
    - ``enabled`` is surfaced on the quote; the engine itself never
      zeroes a breakdown.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from sqlalchemy.orm import Session

from charges_engines.charges import ChargesBreakdown, ChargesComputationEngine
from charges_engines.estimate import EstimateResult, LineItemEstimator
from charges_engines.merge import merge_effective_defaults
from charges_engines.sanitizer import sanitize_global, sanitize_override
from charges_kernel.domain.clock import Clock
from charges_kernel.domain.defaults import (
    EffectiveDefaults,
    GlobalDefaults,
    LineItem,
    TaxProfile,
)
from charges_kernel.logging_config import LogContext, get_logger
from charges_services.defaults_service import ChargesDefaultsService

logger = get_logger("services.quote")

ProfileLike = TaxProfile | Mapping[str, Any] | None


@dataclass(frozen=True)
class OrderQuote:
    """Estimate, resolved configuration and charges for one order."""

    estimate: EstimateResult
    effective_defaults: EffectiveDefaults
    breakdown: ChargesBreakdown

    @property
    def charges_enabled(self) -> bool:
        return bool(self.effective_defaults.enabled)

    @property
    def skip_proforma(self) -> bool:
        return bool(self.effective_defaults.skip_proforma)


class ChargesQuoteService:
    """Quotes order charges for a tenant/counterparty pair."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        base_defaults: GlobalDefaults | None = None,
    ):
        self.store = ChargesDefaultsService(session, clock=clock, base_defaults=base_defaults)
        self.estimator = LineItemEstimator()
        self.engine = ChargesComputationEngine()

    def preview(
        self,
        tenant_id: str,
        counterparty_id: str | None,
        items_sub_total: Any,
        distributor_profile: ProfileLike = None,
        retailer_profile: ProfileLike = None,
    ) -> ChargesBreakdown:
        """Charges for a subtotal under the saved configuration."""
        effective = self.store.get_effective_defaults(tenant_id, counterparty_id)
        return self.engine.compute(
            items_sub_total=items_sub_total,
            config=effective,
            distributor_profile=distributor_profile,
            retailer_profile=retailer_profile,
        )

    def preview_draft(
        self,
        tenant_id: str,
        counterparty_id: str | None,
        items_sub_total: Any,
        global_payload: Mapping[str, Any] | None = None,
        override_payload: Mapping[str, Any] | None = None,
        distributor_profile: ProfileLike = None,
        retailer_profile: ProfileLike = None,
    ) -> ChargesBreakdown:
        """
        Charges under unsaved settings drafts, as they would be after saving.

        Drafts are sanitized over the stored records; nothing is written.
        """
        global_defaults = sanitize_global(
            global_payload, self.store.get_global_defaults(tenant_id)
        )
        override = None
        if counterparty_id:
            override = sanitize_override(
                override_payload,
                self.store.get_retailer_override(tenant_id, counterparty_id),
            )
        effective = merge_effective_defaults(global_defaults, override)
        return self.engine.compute(
            items_sub_total=items_sub_total,
            config=effective,
            distributor_profile=distributor_profile,
            retailer_profile=retailer_profile,
        )

    def quote_order(
        self,
        tenant_id: str,
        counterparty_id: str | None,
        items: Iterable[LineItem | Mapping[str, Any]],
        distributor_profile: ProfileLike = None,
        retailer_profile: ProfileLike = None,
    ) -> OrderQuote:
        """Estimate the order lines and compute charges on their subtotal."""
        with LogContext.bind(tenant_id=tenant_id, counterparty_id=counterparty_id):
            estimate = self.estimator.estimate(list(items))
            effective = self.store.get_effective_defaults(tenant_id, counterparty_id)
            breakdown = self.engine.compute(
                items_sub_total=estimate.subtotal,
                config=effective,
                distributor_profile=distributor_profile,
                retailer_profile=retailer_profile,
            )

            logger.info("order_quoted", extra={
                "line_count": len(estimate.items),
                "subtotal": str(estimate.subtotal),
                "grand_total": str(breakdown.grand_total),
                "charges_enabled": bool(effective.enabled),
            })
            return OrderQuote(estimate=estimate, effective_defaults=effective, breakdown=breakdown)
