"""
Cost Aggregation -- labor, material and overall costs of a work item.

Responsibility:
    Sums time-log and cost-log entries of one work item into Money
    figures and a per-cost-type breakdown.  Entries are read through a
    CostEntrySource; the aggregator never writes.

Architecture position:
    Kernel > Domain.  Pure computation over entries supplied by the
    caller's source (in-memory or costs_kernel.selectors).

Invariants enforced:
    - overall_cost == labor_cost + material_cost, exactly (Decimal)
    - labor_cost == sum(hours * rate); material_cost == sum(amount)
    - Summation order never changes a result
    - costs_by_type is ordered by cost type id
    - Costs disabled on the project -> every operation returns
      NOT_APPLICABLE, never zero and never an exception
    - author_id restricts every figure to entries logged by that user

Failure modes:
    - ForeignEntryError if the source hands back an entry of another work item
    - UnknownCostTypeError if a cost entry's type is not in the catalog
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal
from typing import Protocol, TypeVar
from uuid import UUID

from costs_kernel.domain.models import (
    CostLogEntry,
    CostType,
    CostTypeSummary,
    TimeLogEntry,
    WorkItem,
)
from costs_kernel.domain.values import NOT_APPLICABLE, Money, NotApplicable
from costs_kernel.exceptions import ForeignEntryError, UnknownCostTypeError
from costs_kernel.logging_config import get_logger

logger = get_logger("domain.aggregation")

_Entry = TypeVar("_Entry", TimeLogEntry, CostLogEntry)


class CostEntrySource(Protocol):
    """Read path into the log-entry store.

    A single aggregation call is assumed to observe a consistent snapshot;
    providing that is the store's job.
    """

    def time_entries_for(self, work_item: WorkItem) -> Sequence[TimeLogEntry]: ...

    def cost_entries_for(self, work_item: WorkItem) -> Sequence[CostLogEntry]: ...

    def cost_types(self) -> Mapping[UUID, CostType]: ...


class InMemoryCostEntrySource:
    """CostEntrySource over plain sequences of entries."""

    def __init__(
        self,
        time_entries: Iterable[TimeLogEntry] = (),
        cost_entries: Iterable[CostLogEntry] = (),
        cost_types: Iterable[CostType] = (),
    ):
        self._time_entries = tuple(time_entries)
        self._cost_entries = tuple(cost_entries)
        self._cost_types = {ct.id: ct for ct in cost_types}

    def time_entries_for(self, work_item: WorkItem) -> Sequence[TimeLogEntry]:
        return [e for e in self._time_entries if e.work_item_id == work_item.id]

    def cost_entries_for(self, work_item: WorkItem) -> Sequence[CostLogEntry]:
        return [e for e in self._cost_entries if e.work_item_id == work_item.id]

    def cost_types(self) -> Mapping[UUID, CostType]:
        return dict(self._cost_types)


class CostAggregator:
    """
    Computes cost figures for a work item.

    Contract:
        Every public figure method returns NOT_APPLICABLE when the work
        item's project has costs disabled.  Otherwise it returns Money in
        the project's currency (zero when there are no entries).

    Non-goals:
        - Does NOT check permissions (CostVisibilityPolicy does)
        - Does NOT round or format (costs_kernel.domain.formatting does)
    """

    def __init__(self, source: CostEntrySource):
        self._source = source

    def cost_type_catalog(self) -> Mapping[UUID, CostType]:
        return self._source.cost_types()

    # -- validated entry access ------------------------------------------

    def time_entries(self, work_item: WorkItem, author_id: UUID | None = None) -> list[TimeLogEntry]:
        """Time entries of ``work_item``, optionally only those by ``author_id``."""
        entries = self._checked(work_item, self._source.time_entries_for(work_item))
        return _authored_by(entries, author_id)

    def cost_entries(self, work_item: WorkItem, author_id: UUID | None = None) -> list[CostLogEntry]:
        """Cost entries of ``work_item`` with their cost types resolved."""
        entries = self._checked(work_item, self._source.cost_entries_for(work_item))
        catalog = self._source.cost_types()
        for entry in entries:
            if entry.cost_type_id not in catalog:
                logger.error(
                    "inconsistent_cost_entry",
                    extra={
                        "entry_id": str(entry.id),
                        "cost_type_id": str(entry.cost_type_id),
                        "work_item_id": str(work_item.id),
                    },
                )
                raise UnknownCostTypeError(str(entry.id), str(entry.cost_type_id))
        return _authored_by(entries, author_id)

    # -- figures ---------------------------------------------------------

    def labor_cost(self, work_item: WorkItem, author_id: UUID | None = None) -> Money | NotApplicable:
        if not self._applicable(work_item, "labor_cost"):
            return NOT_APPLICABLE
        currency = work_item.project.currency.currency
        return Money(
            amount=sum((e.costs for e in self.time_entries(work_item, author_id)), Decimal("0")),
            currency=currency,
        )

    def material_cost(self, work_item: WorkItem, author_id: UUID | None = None) -> Money | NotApplicable:
        if not self._applicable(work_item, "material_cost"):
            return NOT_APPLICABLE
        currency = work_item.project.currency.currency
        return Money(
            amount=sum((e.amount for e in self.cost_entries(work_item, author_id)), Decimal("0")),
            currency=currency,
        )

    def overall_cost(self, work_item: WorkItem, author_id: UUID | None = None) -> Money | NotApplicable:
        labor = self.labor_cost(work_item, author_id)
        material = self.material_cost(work_item, author_id)
        if labor is NOT_APPLICABLE or material is NOT_APPLICABLE:
            return NOT_APPLICABLE
        return labor + material

    def costs_by_type(
        self, work_item: WorkItem, author_id: UUID | None = None
    ) -> dict[CostType, Money] | NotApplicable:
        """Material costs grouped by cost type, ordered by cost type id."""
        summaries = self.cost_type_summaries(work_item, author_id)
        if summaries is NOT_APPLICABLE:
            return NOT_APPLICABLE
        return {summary.cost_type: summary.costs for summary in summaries}

    def cost_type_summaries(
        self, work_item: WorkItem, author_id: UUID | None = None
    ) -> list[CostTypeSummary] | NotApplicable:
        """Spent units and costs per cost type, ordered by cost type id."""
        if not self._applicable(work_item, "costs_by_type"):
            return NOT_APPLICABLE
        catalog = self._source.cost_types()
        units: dict[UUID, Decimal] = {}
        amounts: dict[UUID, Decimal] = {}
        for entry in self.cost_entries(work_item, author_id):
            units[entry.cost_type_id] = units.get(entry.cost_type_id, Decimal("0")) + entry.units
            amounts[entry.cost_type_id] = amounts.get(entry.cost_type_id, Decimal("0")) + entry.amount

        currency = work_item.project.currency.currency
        return [
            CostTypeSummary(
                cost_type=catalog[type_id],
                spent_units=units[type_id],
                costs=Money(amount=amounts[type_id], currency=currency),
            )
            for type_id in sorted(amounts)
        ]

    # -- internals -------------------------------------------------------

    @staticmethod
    def _applicable(work_item: WorkItem, figure: str) -> bool:
        if work_item.costs_enabled:
            return True
        logger.debug(
            "cost_aggregation_not_applicable",
            extra={"figure": figure, "work_item_id": str(work_item.id)},
        )
        return False

    @staticmethod
    def _checked(work_item: WorkItem, entries: Iterable[_Entry]) -> list[_Entry]:
        result = list(entries)
        for entry in result:
            if entry.work_item_id != work_item.id:
                logger.error(
                    "inconsistent_log_entry",
                    extra={
                        "entry_id": str(entry.id),
                        "entry_work_item_id": str(entry.work_item_id),
                        "work_item_id": str(work_item.id),
                    },
                )
                raise ForeignEntryError(str(entry.id), str(work_item.id), str(entry.work_item_id))
        return result


def _authored_by(entries: list[_Entry], author_id: UUID | None) -> list[_Entry]:
    if author_id is None:
        return entries
    return [e for e in entries if e.user_id == author_id]
