"""Database layer: declarative base and engine/session management."""

from charges_kernel.db.base import Base, ConfigRecordBase, UUIDString

__all__ = ["Base", "ConfigRecordBase", "UUIDString"]
