"""Database layer - engine, base classes, types."""

from retainer_kernel.db.base import UUID, Base, TrackedBase, UUIDString
from retainer_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    session_scope,
)
from retainer_kernel.db.types import ZERO, Hours, Money, to_decimal

__all__ = [
    "get_engine",
    "get_session",
    "init_engine_from_url",
    "session_scope",
    "create_tables",
    "Base",
    "TrackedBase",
    "UUIDString",
    "UUID",
    "Money",
    "Hours",
    "ZERO",
    "to_decimal",
]
