"""
Cost Domain Models (``costs_kernel.domain.models``).

Responsibility
--------------
Frozen dataclass value objects for the nouns the cost core reads:
projects, work items, users, cost types, and the two kinds of log
entries (time and cost).

Architecture position
---------------------
**Kernel > Domain** -- pure data definitions with ZERO I/O.  Work items,
projects and users are owned by the host application; these DTOs are the
read-only view the cost core needs of them.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary and quantity fields use ``Decimal`` -- NEVER ``float``.
* Log entries reference their work item, user and cost type by id only.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from costs_kernel.domain.values import Currency, Money

DEFAULT_CURRENCY_CODE = "EUR"
DEFAULT_CURRENCY_FORMAT = "%n %u"

ANONYMOUS_USER_ID = UUID(int=0)


@dataclass(frozen=True)
class CurrencySettings:
    """Currency code and display template for a project."""
    code: str = DEFAULT_CURRENCY_CODE
    format: str = DEFAULT_CURRENCY_FORMAT
    unit: str | None = None  # replaces %u; defaults to the code

    @property
    def currency(self) -> Currency:
        return Currency(self.code)

    @property
    def display_unit(self) -> str:
        return self.unit if self.unit is not None else self.currency.code

    def zero(self) -> Money:
        return Money.zero(self.currency)


@dataclass(frozen=True)
class Project:
    """A project; owns work items and decides whether costs are tracked."""
    id: UUID
    name: str
    costs_enabled: bool = True
    currency: CurrencySettings = CurrencySettings()


@dataclass(frozen=True)
class WorkItem:
    """A trackable unit of project work (task, bug, ...)."""
    id: UUID
    project: Project
    subject: str

    @property
    def project_id(self) -> UUID:
        return self.project.id

    @property
    def costs_enabled(self) -> bool:
        return self.project.costs_enabled


@dataclass(frozen=True)
class User:
    """The requesting user.  Only ever read for permission checks."""
    id: UUID
    name: str = ""
    admin: bool = False
    logged_in: bool = True

    @classmethod
    def anonymous(cls) -> User:
        return cls(id=ANONYMOUS_USER_ID, name="Anonymous", logged_in=False)


@dataclass(frozen=True)
class CostType:
    """Category for material cost entries (travel, equipment, ...)."""
    id: UUID
    name: str
    unit: str = ""
    unit_plural: str = ""


@dataclass(frozen=True)
class TimeLogEntry:
    """Logged time on a work item.  Labor cost is hours x hourly rate."""
    id: UUID
    work_item_id: UUID
    user_id: UUID
    hours: Decimal
    rate: Decimal
    activity: str = ""
    spent_on: date | None = None

    @property
    def costs(self) -> Decimal:
        return self.hours * self.rate


@dataclass(frozen=True)
class CostLogEntry:
    """Directly logged (material) cost on a work item."""
    id: UUID
    work_item_id: UUID
    user_id: UUID
    cost_type_id: UUID
    amount: Decimal
    units: Decimal = Decimal("0")
    spent_on: date | None = None


@dataclass(frozen=True)
class CostTypeSummary:
    """Spent units and costs of one cost type on one work item."""
    cost_type: CostType
    spent_units: Decimal
    costs: Money
