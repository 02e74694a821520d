"""
SQLAlchemy ORM models for cost types, time entries and cost entries.

Entries are append-only from the cost core's point of view: they are
created by the host's logging actions and only ever read here.

Invariants enforced
-------------------
* All monetary and quantity fields use ``Decimal`` (ExactDecimal) -- NEVER float.
* ``user_id`` is the author of the entry; it drives "own" scoping.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from costs_kernel.db.base import TimestampedBase, UUIDString
from costs_kernel.domain.models import CostLogEntry, CostType, TimeLogEntry


class CostTypeModel(TimestampedBase):
    """Reference data: a category of material cost."""

    __tablename__ = "cost_types"

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    unit: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    unit_plural: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    def to_dto(self) -> CostType:
        return CostType(id=self.id, name=self.name, unit=self.unit, unit_plural=self.unit_plural)


class TimeEntryModel(TimestampedBase):
    """Logged hours at an hourly rate."""

    __tablename__ = "time_entries"

    __table_args__ = (
        Index("idx_time_entries_work_package", "work_package_id"),
    )

    work_package_id: Mapped[UUID] = mapped_column(ForeignKey("work_packages.id"), nullable=False)
    user_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    hours: Mapped[Decimal] = mapped_column(nullable=False)
    rate: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    activity: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    spent_on: Mapped[date | None] = mapped_column(Date, nullable=True)

    def to_dto(self) -> TimeLogEntry:
        return TimeLogEntry(
            id=self.id,
            work_item_id=self.work_package_id,
            user_id=self.user_id,
            hours=self.hours,
            rate=self.rate,
            activity=self.activity,
            spent_on=self.spent_on,
        )


class CostEntryModel(TimestampedBase):
    """A directly logged cost of some cost type."""

    __tablename__ = "cost_entries"

    __table_args__ = (
        Index("idx_cost_entries_work_package", "work_package_id"),
    )

    work_package_id: Mapped[UUID] = mapped_column(ForeignKey("work_packages.id"), nullable=False)
    user_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    # No FK; dangling types are reported by the aggregator.
    cost_type_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    units: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    spent_on: Mapped[date | None] = mapped_column(Date, nullable=True)

    def to_dto(self) -> CostLogEntry:
        return CostLogEntry(
            id=self.id,
            work_item_id=self.work_package_id,
            user_id=self.user_id,
            cost_type_id=self.cost_type_id,
            amount=self.amount,
            units=self.units,
            spent_on=self.spent_on,
        )
