"""Database layer - engine, declarative base, column types."""

from costs_kernel.db.base import UUID, Base, ExactDecimal, TimestampedBase, UUIDString
from costs_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    session_scope,
)

__all__ = [
    "init_engine_from_url",
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "Base",
    "TimestampedBase",
    "ExactDecimal",
    "UUIDString",
    "UUID",
]
