"""
Charges Kernel

Configuration and domain core for distributor order charges:
- Tenant-wide defaults with per-retailer nullable overrides
- Deterministic Decimal money normalization
- Structured JSON logging and typed exceptions
- SQLAlchemy persistence for the two configuration records
"""

__version__ = "0.1.0"
