"""
BaseService -- abstract base for session-holding services.

Responsibility:
    Common constructor for services that read and write configuration
    rows through a caller-supplied SQLAlchemy ``Session``.

Invariants enforced:
    Services flush within the caller's transaction and never commit or
    roll back; the caller (``session_scope`` or a test harness) owns the
    transaction boundary.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from charges_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for services.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
    """

    def __init__(self, session: Session):
        self.session = session
