"""
Module: costs_kernel.db.base
Responsibility: Declarative base classes for the cost ORM models.  Provides
    the UUID primary key convention and a type annotation map so every
    Decimal column has the same exact precision on every backend.
Architecture position: Kernel > DB.  Lowest-level import target for models/.
    MUST NOT import from models/, selectors/, domain/, or outer layers.

Invariants enforced:
    - UUID primary keys on every model.
    - Decimal columns map to Numeric(38, 9).  On SQLite, which has no exact
      decimal type, they are stored as text so no value passes through float.
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import DateTime, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """UUID type stored as String(36) for cross-database portability."""

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


class _DecimalText(TypeDecorator):
    """Decimal stored as its exact string form."""

    impl = String(64)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return format(Decimal(value), "f")
        return None

    def process_result_value(self, value, dialect):
        if value is not None:
            return Decimal(value)
        return None


# Numeric(38, 9) everywhere except SQLite
ExactDecimal = Numeric(38, 9, asdecimal=True).with_variant(_DecimalText(), "sqlite")


class Base(DeclarativeBase):
    """
    Declarative base for all cost models.

    Guarantees:
        - id is always a uuid4-generated UUID stored as String(36).
        - Decimal maps to ExactDecimal.
        - datetime maps to DateTime(timezone=True).
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: ExactDecimal,
        datetime: DateTime(timezone=True),
        PyUUID: UUIDString(),
    }

    id: Mapped[PyUUID] = mapped_column(
        UUIDString(),
        primary_key=True,
        default=uuid4,
    )


class TimestampedBase(Base):
    """Abstract base with creation and update timestamps."""

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


# Re-export UUID for convenience
UUID = PyUUID
