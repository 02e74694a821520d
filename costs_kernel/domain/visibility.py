"""
Cost Visibility Policy -- which cost figures a user may see, and how.

Responsibility:
    Combines PermissionResolver answers with CostAggregator figures.  For
    each exposable field it decides a CostScope (all entries, own entries,
    or nothing), asks the aggregator for the figure restricted to that
    scope, and renders it with the project's currency template.

Architecture position:
    Kernel > Domain.  Depends on aggregation, formatting and the
    PermissionResolver protocol.  Holds no state between evaluations.

Invariants enforced:
    - Costs disabled -> every field is omitted, whatever the permissions
    - Full permission -> figure over all entries of the work item
    - Only the "own" permission -> figure over the user's own entries
    - Neither permission -> field omitted (None), never zero
    - The aggregator is never called for a field the user may not see
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from costs_kernel.domain.aggregation import CostAggregator
from costs_kernel.domain.formatting import format_currency
from costs_kernel.domain.models import (
    CostLogEntry,
    CostTypeSummary,
    CurrencySettings,
    TimeLogEntry,
    User,
    WorkItem,
)
from costs_kernel.domain.permissions import CostScope, Permission, PermissionResolver
from costs_kernel.domain.values import Money
from costs_kernel.logging_config import LogContext, get_logger

logger = get_logger("domain.visibility")


class CostField(str, Enum):
    LABOR_COSTS = "labor_costs"
    MATERIAL_COSTS = "material_costs"
    OVERALL_COSTS = "overall_costs"
    COSTS_BY_TYPE = "costs_by_type"


# field -> (full permission, own-scoped permission)
FIELD_PERMISSIONS: Mapping[CostField, tuple[Permission, Permission]] = MappingProxyType({
    CostField.LABOR_COSTS: (Permission.VIEW_COST_ENTRIES, Permission.VIEW_OWN_COST_ENTRIES),
    CostField.MATERIAL_COSTS: (Permission.VIEW_COST_ENTRIES, Permission.VIEW_OWN_COST_ENTRIES),
    CostField.OVERALL_COSTS: (Permission.VIEW_COST_ENTRIES, Permission.VIEW_OWN_COST_ENTRIES),
    CostField.COSTS_BY_TYPE: (Permission.VIEW_COST_ENTRIES, Permission.VIEW_OWN_COST_ENTRIES),
})

MONEY_FIELDS = (CostField.LABOR_COSTS, CostField.MATERIAL_COSTS, CostField.OVERALL_COSTS)


@dataclass(frozen=True)
class WorkItemCosts:
    """Everything one user may see of one work item's costs.

    A field that is not visible is absent from ``figures`` and its
    formatted value is None.
    """
    work_item: WorkItem
    scopes: Mapping[CostField, CostScope]
    figures: Mapping[CostField, Money] = field(default_factory=dict)
    summaries: tuple[CostTypeSummary, ...] | None = None
    can_log_costs: bool = False
    can_show_costs: bool = False

    @property
    def currency(self) -> CurrencySettings:
        return self.work_item.project.currency

    def is_visible(self, cost_field: CostField) -> bool:
        return self.scopes.get(cost_field, CostScope.NONE) is not CostScope.NONE

    def formatted(self, cost_field: CostField) -> str | None:
        figure = self.figures.get(cost_field)
        if figure is None:
            return None
        return format_currency(figure, self.currency)

    @property
    def labor_costs(self) -> str | None:
        return self.formatted(CostField.LABOR_COSTS)

    @property
    def material_costs(self) -> str | None:
        return self.formatted(CostField.MATERIAL_COSTS)

    @property
    def overall_costs(self) -> str | None:
        return self.formatted(CostField.OVERALL_COSTS)

    @property
    def costs_by_type(self) -> dict[str, str] | None:
        """Cost type name -> formatted costs, in cost type id order."""
        if self.summaries is None:
            return None
        return {s.cost_type.name: format_currency(s.costs, self.currency) for s in self.summaries}


class CostVisibilityPolicy:
    """
    Decides per field whether a user sees a cost figure and over which entries.

    Contract:
        ``evaluate`` is a pure function of (user, work item, project
        settings, log entries).  Safe to call concurrently.
    """

    def __init__(self, resolver: PermissionResolver, aggregator: CostAggregator):
        self._resolver = resolver
        self._aggregator = aggregator

    @property
    def aggregator(self) -> CostAggregator:
        return self._aggregator

    def _allowed(self, user: User, permission: Permission, work_item: WorkItem) -> bool:
        return self._resolver.is_allowed(user, permission, work_item.project)

    def _scope(
        self, user: User, work_item: WorkItem, full: Permission, own: Permission
    ) -> CostScope:
        if not work_item.costs_enabled:
            return CostScope.NONE
        if self._allowed(user, full, work_item):
            return CostScope.ALL
        if self._allowed(user, own, work_item):
            return CostScope.OWN
        return CostScope.NONE

    def scope_for(self, user: User, work_item: WorkItem, cost_field: CostField) -> CostScope:
        full, own = FIELD_PERMISSIONS[cost_field]
        return self._scope(user, work_item, full, own)

    def figure(self, user: User, work_item: WorkItem, cost_field: CostField) -> Money | None:
        """The Money figure for one field, or None when it is not visible."""
        if cost_field is CostField.COSTS_BY_TYPE:
            raise ValueError("costs_by_type is not a single figure; use summaries()")
        scope = self.scope_for(user, work_item, cost_field)
        if scope is CostScope.NONE:
            return None
        author_id = user.id if scope is CostScope.OWN else None
        compute = {
            CostField.LABOR_COSTS: self._aggregator.labor_cost,
            CostField.MATERIAL_COSTS: self._aggregator.material_cost,
            CostField.OVERALL_COSTS: self._aggregator.overall_cost,
        }[cost_field]
        result = compute(work_item, author_id)
        return result if isinstance(result, Money) else None

    def summaries(self, user: User, work_item: WorkItem) -> tuple[CostTypeSummary, ...] | None:
        scope = self.scope_for(user, work_item, CostField.COSTS_BY_TYPE)
        if scope is CostScope.NONE:
            return None
        author_id = user.id if scope is CostScope.OWN else None
        result = self._aggregator.cost_type_summaries(work_item, author_id)
        return tuple(result) if isinstance(result, list) else None

    def can_log_costs(self, user: User, work_item: WorkItem) -> bool:
        """Whether the logCosts link is advertised."""
        return self._scope(user, work_item, Permission.LOG_COSTS, Permission.LOG_OWN_COSTS) is not CostScope.NONE

    def can_show_costs(self, user: User, work_item: WorkItem) -> bool:
        """Whether the showCosts link is advertised."""
        return self._scope(
            user, work_item, Permission.VIEW_COST_ENTRIES, Permission.VIEW_OWN_COST_ENTRIES
        ) is not CostScope.NONE

    def evaluate(self, user: User, work_item: WorkItem) -> WorkItemCosts:
        with LogContext.bind(user_id=user.id, work_item_id=work_item.id, project_id=work_item.project_id):
            scopes = {f: self.scope_for(user, work_item, f) for f in CostField}
            figures: dict[CostField, Money] = {}
            for cost_field in MONEY_FIELDS:
                figure = self.figure(user, work_item, cost_field)
                if figure is not None:
                    figures[cost_field] = figure

            costs = WorkItemCosts(
                work_item=work_item,
                scopes=MappingProxyType(scopes),
                figures=MappingProxyType(figures),
                summaries=self.summaries(user, work_item),
                can_log_costs=self.can_log_costs(user, work_item),
                can_show_costs=self.can_show_costs(user, work_item),
            )
            logger.debug(
                "cost_visibility_evaluated",
                extra={
                    "scopes": {f.value: s.value for f, s in scopes.items()},
                    "costs_enabled": work_item.costs_enabled,
                },
            )
            return costs

    # -- per-entry listings ------------------------------------------------

    def cost_entry_scope(self, user: User, work_item: WorkItem) -> CostScope:
        return self._scope(user, work_item, Permission.VIEW_COST_ENTRIES, Permission.VIEW_OWN_COST_ENTRIES)

    def time_entry_scope(self, user: User, work_item: WorkItem) -> CostScope:
        return self._scope(user, work_item, Permission.VIEW_TIME_ENTRIES, Permission.VIEW_OWN_TIME_ENTRIES)

    def visible_cost_entries(self, user: User, work_item: WorkItem) -> list[CostLogEntry]:
        scope = self.cost_entry_scope(user, work_item)
        if scope is CostScope.NONE:
            return []
        return self._aggregator.cost_entries(work_item, user.id if scope is CostScope.OWN else None)

    def visible_time_entries(self, user: User, work_item: WorkItem) -> list[TimeLogEntry]:
        scope = self.time_entry_scope(user, work_item)
        if scope is CostScope.NONE:
            return []
        return self._aggregator.time_entries(work_item, user.id if scope is CostScope.OWN else None)

    def cost_rates_visible(self, user: User, work_item: WorkItem) -> bool:
        """Whether amounts of individual cost entries may be shown."""
        return work_item.costs_enabled and self._allowed(user, Permission.VIEW_COST_RATES, work_item)

    def hourly_rate_visible(self, user: User, work_item: WorkItem, entry: TimeLogEntry) -> bool:
        """Rates of others need view_hourly_rates; own rate needs either rate permission."""
        if self._allowed(user, Permission.VIEW_HOURLY_RATES, work_item):
            return True
        return entry.user_id == user.id and self._allowed(user, Permission.VIEW_OWN_HOURLY_RATE, work_item)
