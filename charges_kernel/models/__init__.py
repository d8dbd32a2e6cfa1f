"""ORM models for the charges configuration store."""

from charges_kernel.models.charges_defaults import GlobalDefaultsRecord, RetailerOverrideRecord

__all__ = ["GlobalDefaultsRecord", "RetailerOverrideRecord"]
