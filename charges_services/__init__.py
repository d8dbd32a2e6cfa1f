"""
charges_services -- Package init and public API.

Responsibility:
    Stateful orchestration that composes the pure engines
    (charges_engines/) with database sessions. This is the only layer that
    holds sessions or reads wall-clock time.

Architecture position:
    Dependency direction:
        charges_services/ -> charges_engines/  (allowed)
        charges_services/ -> charges_kernel/   (allowed)
        charges_engines/  -> charges_services/ (FORBIDDEN)
        charges_kernel/   -> charges_services/ (FORBIDDEN)
"""

from charges_services.defaults_service import ChargesDefaultsService
from charges_services.quote_service import ChargesQuoteService, OrderQuote

__all__ = [
    "ChargesDefaultsService",
    "ChargesQuoteService",
    "OrderQuote",
]
