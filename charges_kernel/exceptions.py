"""
Typed exception hierarchy for the charges kernel.

Every error carries a machine-readable ``code`` class attribute and keeps its
context as attributes, so callers catch by type and read structured data
instead of parsing messages.

    ChargesKernelError (base)
    |
    +-- ConfigError
    |   +-- MissingIdentifierError
    |   +-- InvalidConfigPayloadError
    |
    +-- ConcurrencyError
        +-- OptimisticLockError

Code                      | When raised
--------------------------|------------------------------------------------
MISSING_IDENTIFIER        | Write call without tenant / counterparty id
INVALID_CONFIG_PAYLOAD    | Strict sanitization found invalid field values
OPTIMISTIC_LOCK_CONFLICT  | expected_revision does not match stored revision

Absent configuration and malformed field values are NOT errors by default:
reads degrade to the base shape, lenient sanitization coerces to the previous
value. Backend write failures propagate untouched (no retries here).
"""


class ChargesKernelError(Exception):
    """
    Base exception for all charges kernel errors.

    All subclasses must have a ``code`` class attribute.
    """

    code: str = "CHARGES_KERNEL_ERROR"


# Configuration exceptions


class ConfigError(ChargesKernelError):
    """Base exception for configuration record errors."""

    code: str = "CONFIG_ERROR"


class MissingIdentifierError(ConfigError):
    """
    A write was attempted without a required identifier.

    This is a caller bug; it is never recovered at this layer.
    """

    code: str = "MISSING_IDENTIFIER"

    def __init__(self, operation: str, identifier: str):
        self.operation = operation
        self.identifier = identifier
        super().__init__(f"{operation}: {identifier} required")


class InvalidConfigPayloadError(ConfigError):
    """Strict sanitization rejected one or more payload fields."""

    code: str = "INVALID_CONFIG_PAYLOAD"

    def __init__(self, record_kind: str, field_errors: list[dict]):
        self.record_kind = record_kind
        self.field_errors = field_errors
        fields = ", ".join(e["field"] for e in field_errors)
        super().__init__(
            f"Invalid {record_kind} payload: {len(field_errors)} error(s) ({fields})"
        )


# Concurrency exceptions


class ConcurrencyError(ChargesKernelError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"


class OptimisticLockError(ConcurrencyError):
    """Configuration record was modified by another writer."""

    code: str = "OPTIMISTIC_LOCK_CONFLICT"

    def __init__(self, record_kind: str, record_key: str, expected_revision: int, actual_revision: int):
        self.record_kind = record_kind
        self.record_key = record_key
        self.expected_revision = expected_revision
        self.actual_revision = actual_revision
        super().__init__(
            f"Concurrent modification of {record_kind} {record_key}: "
            f"expected revision {expected_revision}, found {actual_revision}"
        )
