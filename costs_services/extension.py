"""
costs_services.extension -- The costs module as an injectable bundle.

Responsibility:
    Assembles settings, permission resolver and entry source into one
    ``CostsExtension`` the host's work item layer receives through its
    constructor.  The extension carries everything the host needs to show
    costs: the attribute group and its constraint, the summable query
    columns, the representers and the schema fragments.

Architecture position:
    Services layer.  Sits above costs_kernel and costs_config; the only
    place where the three meet.

Invariants:
    - Nothing is registered globally; two extensions with different
      settings can coexist in one process.
    - Cost attributes are only offered for projects with costs enabled
      (or when no project is known yet).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from costs_config.schema import CostsSettings
from costs_kernel.domain.aggregation import CostAggregator, CostEntrySource
from costs_kernel.domain.api_paths import ApiPaths
from costs_kernel.domain.models import Project, User, WorkItem
from costs_kernel.domain.permissions import PermissionResolver
from costs_kernel.domain.representation import (
    CAPTIONS,
    WorkItemCostsRepresenter,
    WorkItemSumsRepresenter,
    sums_schema,
    work_item_schema,
)
from costs_kernel.domain.visibility import MONEY_FIELDS, CostVisibilityPolicy
from costs_kernel.exceptions import CurrencyMismatchError
from costs_kernel.logging_config import get_logger

logger = get_logger("services.extension")

ATTRIBUTE_GROUP = "costs"
ATTRIBUTE_GROUP_LABEL = "Costs"
COST_ATTRIBUTES = ("costs_by_type", "labor_costs", "material_costs", "overall_costs")


@dataclass(frozen=True)
class QueryColumn:
    """A work item list column contributed by the costs module."""
    name: str
    caption: str
    summable: bool = True
    sortable: bool = False
    groupable: bool = False


QUERY_COLUMNS: tuple[QueryColumn, ...] = tuple(
    QueryColumn(name=f.value, caption=CAPTIONS[f]) for f in MONEY_FIELDS
)


def attribute_available(project: Project | None) -> bool:
    """Cost attributes exist for new work items and for costs-enabled projects."""
    return project is None or project.costs_enabled


@dataclass(frozen=True)
class CostsExtension:
    """Everything a host needs to expose costs on work items."""

    settings: CostsSettings
    policy: CostVisibilityPolicy
    representer: WorkItemCostsRepresenter
    sums_representer: WorkItemSumsRepresenter
    query_columns: tuple[QueryColumn, ...] = QUERY_COLUMNS
    attribute_group: tuple[str, str, tuple[str, ...]] = (
        ATTRIBUTE_GROUP,
        ATTRIBUTE_GROUP_LABEL,
        COST_ATTRIBUTES,
    )

    def attribute_available(self, attribute: str, project: Project | None) -> bool:
        return attribute in COST_ATTRIBUTES and attribute_available(project)

    def represent(self, user: User, work_item: WorkItem, base: dict[str, Any] | None = None) -> dict[str, Any]:
        return self.representer.represent(user, work_item, base)

    def work_item_schema(self, project: Project | None) -> dict[str, Any]:
        return work_item_schema(project)

    def sums_schema(self) -> dict[str, Any]:
        return sums_schema(self.settings.summable_columns)

    def represent_sums(self, user: User, work_items: Sequence[WorkItem]) -> dict[str, str]:
        """Sums in the currency of the work items that contribute to them.

        Only work items showing the user a summed figure count; hidden and
        costs-disabled items are skipped.  The first contributing item's
        project decides code, format and unit; with no contributor the
        global default is used.

        Raises:
            CurrencyMismatchError: if contributing work items' projects use
                different currency codes.
        """
        contributing = self.sums_representer.contributing(user, work_items)
        currency = contributing[0].project.currency if contributing else self.settings.default_currency
        for work_item in contributing:
            if work_item.project.currency.code != currency.code:
                raise CurrencyMismatchError(currency.code, work_item.project.currency.code)
        return self.sums_representer.represent(user, contributing, currency)


def build_costs_extension(
    settings: CostsSettings,
    resolver: PermissionResolver,
    source: CostEntrySource,
    paths: ApiPaths | None = None,
    explicit_absent: bool = False,
) -> CostsExtension:
    """Wire the costs module for one host."""
    policy = CostVisibilityPolicy(resolver, CostAggregator(source))
    extension = CostsExtension(
        settings=settings,
        policy=policy,
        representer=WorkItemCostsRepresenter(policy, paths=paths, explicit_absent=explicit_absent),
        sums_representer=WorkItemSumsRepresenter(policy, settings.summable_columns),
    )
    logger.info(
        "costs_extension_built",
        extra={
            "currency": settings.default_currency.code,
            "summable_columns": list(settings.summable_columns),
            "explicit_absent": explicit_absent,
        },
    )
    return extension


def summable_columns(extension: CostsExtension) -> Iterable[QueryColumn]:
    return (c for c in extension.query_columns if extension.settings.is_summable(c.name))
