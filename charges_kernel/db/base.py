"""
Module: charges_kernel.db.base
Responsibility: Declarative base classes for the SQLAlchemy ORM models.
    Provides the UUID primary key convention, the type annotation map for
    consistent column types and the audit/revision columns shared by both
    configuration records.
Architecture position: Kernel > DB. Lowest-level import target in the
    kernel. MUST NOT import from models/, services/ or domain/.

Invariants enforced:
    - UUID primary keys (uuid4, stored as String(36)).
    - Decimal maps to Numeric(38, 9); monetary values are never stored as float.
    - ``updated_at`` / ``updated_by`` are stamped by the service layer from an
      injected clock, and ``revision`` increments on every write.
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import BigInteger, DateTime, Integer, Numeric, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """
    UUID type stored as String(36) for cross-database portability.

    Converts UUID -> str on bind and str -> UUID on load.
    """

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return None

    def process_result_value(self, value, dialect):
        if value is not None:
            return PyUUID(value)
        return None


class Base(DeclarativeBase):
    """
    Declarative base for all models.

    Guarantees:
        - id is always a uuid4-generated UUID stored as String(36).
        - Decimal maps to Numeric(38, 9).
        - datetime maps to DateTime(timezone=True).
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(38, 9),
        datetime: DateTime(timezone=True),
        PyUUID: UUIDString(),
        int: BigInteger,
    }

    id: Mapped[PyUUID] = mapped_column(
        UUIDString(),
        primary_key=True,
        default=uuid4,
    )


class ConfigRecordBase(Base):
    """
    Abstract base for configuration records.

    ``updated_by`` is the free-form actor id of the last writer (may be
    None). ``revision`` starts at 1 on first save.
    """

    __abstract__ = True

    tenant_id: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
    )

    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    updated_by: Mapped[str | None] = mapped_column(
        String(128),
        nullable=True,
    )

    revision: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )


# Re-export UUID for convenience
UUID = PyUUID
