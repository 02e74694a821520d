"""
Module: costs_kernel.selectors.cost_entry_selector
Responsibility: CostEntrySource over a SQLAlchemy session.  Loads work
    items with their project, the entries logged on them, and the cost
    type catalog, and returns them as domain DTOs.
Architecture position: Kernel > Selectors.  Plugged into CostAggregator.

Failure modes:
    - WorkItemNotFoundError if work_item() is asked for an unknown id.
"""

from collections.abc import Callable, Mapping, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from costs_kernel.domain.models import (
    CostLogEntry,
    CostType,
    CurrencySettings,
    TimeLogEntry,
    WorkItem,
)
from costs_kernel.exceptions import WorkItemNotFoundError
from costs_kernel.logging_config import get_logger
from costs_kernel.models import CostEntryModel, CostTypeModel, TimeEntryModel, WorkPackageModel
from costs_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.cost_entry")


def _default_currency(project_id: UUID) -> CurrencySettings:
    return CurrencySettings()


class CostEntrySelector(BaseSelector):
    """
    Read-only access to work items and their log entries.

    ``currency_for`` maps a project id to its currency settings; hosts pass
    ``CostsSettings.currency_for`` from costs_config.
    """

    def __init__(
        self,
        session: Session,
        currency_for: Callable[[UUID], CurrencySettings] = _default_currency,
    ):
        super().__init__(session)
        self._currency_for = currency_for

    def work_item(self, work_item_id: UUID) -> WorkItem:
        model = self.session.get(WorkPackageModel, work_item_id)
        if model is None:
            raise WorkItemNotFoundError(str(work_item_id))
        return model.to_dto(self._currency_for(model.project_id))

    def work_items_in_project(self, project_id: UUID) -> list[WorkItem]:
        stmt = (
            select(WorkPackageModel)
            .where(WorkPackageModel.project_id == project_id)
            .order_by(WorkPackageModel.id)
        )
        currency = self._currency_for(project_id)
        return [m.to_dto(currency) for m in self.session.scalars(stmt)]

    def time_entries_for(self, work_item: WorkItem) -> Sequence[TimeLogEntry]:
        stmt = (
            select(TimeEntryModel)
            .where(TimeEntryModel.work_package_id == work_item.id)
            .order_by(TimeEntryModel.id)
        )
        entries = [m.to_dto() for m in self.session.scalars(stmt)]
        logger.debug(
            "time_entries_loaded",
            extra={"work_item_id": str(work_item.id), "count": len(entries)},
        )
        return entries

    def cost_entries_for(self, work_item: WorkItem) -> Sequence[CostLogEntry]:
        stmt = (
            select(CostEntryModel)
            .where(CostEntryModel.work_package_id == work_item.id)
            .order_by(CostEntryModel.id)
        )
        entries = [m.to_dto() for m in self.session.scalars(stmt)]
        logger.debug(
            "cost_entries_loaded",
            extra={"work_item_id": str(work_item.id), "count": len(entries)},
        )
        return entries

    def cost_types(self) -> Mapping[UUID, CostType]:
        stmt = select(CostTypeModel).order_by(CostTypeModel.id)
        return {m.id: m.to_dto() for m in self.session.scalars(stmt)}
