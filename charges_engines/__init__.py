"""
Module: charges_engines
Responsibility:
    Package entrypoint re-exporting the pure calculation engines: config
    merge, sanitization, tax-type resolution, line-item estimate, charges
    computation, rounding and the manual proforma calculator.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import charges_kernel.domain and charges_kernel.logging_config.
    MUST NOT import charges_services or charges_config.

Invariants enforced:
    - Purity: engines never read the clock or touch a database.
    - Decimal-only arithmetic for every monetary figure.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Estimate, charges and proforma invocations are traced via
    ``@traced_engine``, emitting CHARGES_ENGINE_TRACE records with an input
    fingerprint for replay verification.
"""

from charges_engines.charges import (
    BREAKDOWN_VERSION,
    ChargesBreakdown,
    ChargesComputationEngine,
    TaxBreakup,
)
from charges_engines.estimate import EstimatedLine, EstimateResult, LineItemEstimator
from charges_engines.merge import merge_effective_defaults
from charges_engines.proforma import OrderCharges, ProformaCalculator, ProformaResult
from charges_engines.rounding import RoundingResult, apply_round_rule
from charges_engines.sanitizer import (
    FieldIssue,
    apply_override_update,
    parse_override_update,
    sanitize_global,
    sanitize_override,
)
from charges_engines.tax_type import resolve_tax_type, state_code_of

__all__ = [
    "BREAKDOWN_VERSION",
    "ChargesBreakdown",
    "ChargesComputationEngine",
    "EstimateResult",
    "EstimatedLine",
    "FieldIssue",
    "LineItemEstimator",
    "OrderCharges",
    "ProformaCalculator",
    "ProformaResult",
    "RoundingResult",
    "TaxBreakup",
    "apply_override_update",
    "apply_round_rule",
    "merge_effective_defaults",
    "parse_override_update",
    "resolve_tax_type",
    "sanitize_global",
    "sanitize_override",
    "state_code_of",
]
