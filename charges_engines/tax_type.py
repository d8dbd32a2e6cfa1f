"""
Tax-type resolver: intrastate CGST+SGST vs interstate IGST.

When autodetection is enabled and both parties expose a state code, equal
codes mean an intrastate supply (CGST_SGST) and different codes an
interstate supply (IGST). Otherwise the configured tax type applies,
defaulting to CGST_SGST.

A party's state code is its explicit ``state_code``, else the first two
characters of its GSTIN (no checksum validation), else none. A missing code
disables autodetection for that computation only.
"""

from __future__ import annotations

from typing import Any, Mapping

from charges_kernel.domain.defaults import TaxProfile, TaxType
from charges_kernel.logging_config import get_logger

logger = get_logger("engines.tax_type")


def _profile_field(profile: Any, attr: str, wire: str) -> Any:
    if isinstance(profile, Mapping):
        return profile.get(wire, profile.get(attr))
    return getattr(profile, attr, None)


def state_code_from_gstin(gstin: Any) -> str | None:
    """First two characters of a GSTIN, or None if shorter / not a string."""
    if not isinstance(gstin, str) or len(gstin) < 2:
        return None
    return gstin[:2]


def state_code_of(profile: TaxProfile | Mapping[str, Any] | None) -> str | None:
    """Explicit state code, else GSTIN-derived, else None."""
    if profile is None:
        return None
    explicit = _profile_field(profile, "state_code", "stateCode")
    if isinstance(explicit, str) and explicit:
        return explicit
    return state_code_from_gstin(_profile_field(profile, "gstin", "gstin"))


def _configured_tax_type(value: Any) -> TaxType:
    if isinstance(value, TaxType):
        return value
    try:
        return TaxType(value)
    except ValueError:
        return TaxType.CGST_SGST


def resolve_tax_type(
    config: Any,
    distributor_profile: TaxProfile | Mapping[str, Any] | None = None,
    retailer_profile: TaxProfile | Mapping[str, Any] | None = None,
) -> TaxType:
    """
    Decide which GST family applies.

    Args:
        config: Effective defaults (reads ``autodetect_tax_type`` and ``tax_type``).
        distributor_profile: Supplier tax profile, optional.
        retailer_profile: Buyer tax profile, optional.

    Returns:
        TaxType.CGST_SGST or TaxType.IGST.
    """
    if getattr(config, "autodetect_tax_type", False):
        distributor_state = state_code_of(distributor_profile)
        retailer_state = state_code_of(retailer_profile)
        if distributor_state and retailer_state:
            resolved = (
                TaxType.CGST_SGST if distributor_state == retailer_state else TaxType.IGST
            )
            logger.debug("tax_type_autodetected", extra={
                "distributor_state": distributor_state,
                "retailer_state": retailer_state,
                "tax_type": resolved.value,
            })
            return resolved

    return _configured_tax_type(getattr(config, "tax_type", None))
