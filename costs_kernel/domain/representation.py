"""
Representation -- cost fields, links and schemas for the work item API.

Responsibility:
    Builds the cost part of a work item's outbound representation as a
    fixed pipeline of field providers.  Each provider declares the section
    it writes to, a visibility predicate and a renderer; the representer
    runs them in order and merges the results into the host's dict.

    Also renders the work item schema fragment, the sums and sums schema
    over a list of work items, and the per-entry collections.

Architecture position:
    Kernel > Domain.  Consumes CostVisibilityPolicy; knows nothing about
    HTTP.  Hosts receive a representer through CostsExtension rather than
    by patching their own representer classes.

Invariants enforced:
    - A field the user may not see is omitted, not rendered as null,
      unless the representer was built with ``explicit_absent=True``
    - Links carry no computed values
    - Providers run in declaration order; later providers never overwrite
      keys written by earlier ones in the same section
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from costs_kernel.domain.api_paths import ApiPaths
from costs_kernel.domain.formatting import format_currency
from costs_kernel.domain.models import CostTypeSummary, CurrencySettings, Project, User, WorkItem
from costs_kernel.domain.values import Money
from costs_kernel.domain.visibility import (
    MONEY_FIELDS,
    CostField,
    CostVisibilityPolicy,
    WorkItemCosts,
)
from costs_kernel.logging_config import get_logger

logger = get_logger("domain.representation")

PROPERTIES = "properties"
LINKS = "_links"
EMBEDDED = "_embedded"

API_NAMES: dict[CostField, str] = {
    CostField.LABOR_COSTS: "laborCosts",
    CostField.MATERIAL_COSTS: "materialCosts",
    CostField.OVERALL_COSTS: "overallCosts",
    CostField.COSTS_BY_TYPE: "costsByType",
}

CAPTIONS: dict[CostField, str] = {
    CostField.LABOR_COSTS: "Labor costs",
    CostField.MATERIAL_COSTS: "Material costs",
    CostField.OVERALL_COSTS: "Overall costs",
    CostField.COSTS_BY_TYPE: "Spent units",
}


def _units(value: Decimal) -> str:
    return f"{value:f}"


@dataclass(frozen=True)
class RepresentationContext:
    user: User
    work_item: WorkItem
    costs: WorkItemCosts
    paths: ApiPaths


@dataclass(frozen=True)
class FieldProvider:
    """One entry of the representation pipeline."""
    key: str
    section: str
    visible: Callable[[RepresentationContext], bool]
    render: Callable[[RepresentationContext], Any]


def _money_provider(cost_field: CostField) -> FieldProvider:
    return FieldProvider(
        key=API_NAMES[cost_field],
        section=PROPERTIES,
        visible=lambda ctx: ctx.costs.is_visible(cost_field),
        render=lambda ctx: ctx.costs.formatted(cost_field),
    )


def _log_costs_link(ctx: RepresentationContext) -> dict[str, str]:
    return {
        "href": ctx.paths.new_work_package_cost_entry(ctx.work_item.id),
        "type": "text/html",
        "title": f"Log costs on {ctx.work_item.subject}",
    }


def _show_costs_link(ctx: RepresentationContext) -> dict[str, str]:
    return {
        "href": ctx.paths.cost_reports(ctx.work_item.project_id, ctx.work_item.id),
        "type": "text/html",
        "title": "Show cost entries",
    }


def _summary_element(summary: CostTypeSummary, currency: CurrencySettings, paths: ApiPaths) -> dict[str, Any]:
    return {
        "_type": "AggregatedCostEntry",
        "spentUnits": _units(summary.spent_units),
        "costs": format_currency(summary.costs, currency),
        "_links": {
            "costType": {
                "href": paths.cost_type(summary.cost_type.id),
                "title": summary.cost_type.name,
            },
        },
    }


def costs_by_type_collection(ctx: RepresentationContext) -> dict[str, Any]:
    summaries = ctx.costs.summaries or ()
    elements = [_summary_element(s, ctx.costs.currency, ctx.paths) for s in summaries]
    return {
        "_type": "Collection",
        "total": len(elements),
        "count": len(elements),
        "_embedded": {"elements": elements},
        "_links": {"self": {"href": ctx.paths.summarized_work_package_costs_by_type(ctx.work_item.id)}},
    }


DEFAULT_PROVIDERS: tuple[FieldProvider, ...] = (
    *(_money_provider(f) for f in MONEY_FIELDS),
    FieldProvider(
        key="logCosts",
        section=LINKS,
        visible=lambda ctx: ctx.costs.can_log_costs,
        render=_log_costs_link,
    ),
    FieldProvider(
        key="showCosts",
        section=LINKS,
        visible=lambda ctx: ctx.costs.can_show_costs,
        render=_show_costs_link,
    ),
    FieldProvider(
        key="costsByType",
        section=LINKS,
        visible=lambda ctx: ctx.costs.is_visible(CostField.COSTS_BY_TYPE),
        render=lambda ctx: {"href": ctx.paths.summarized_work_package_costs_by_type(ctx.work_item.id)},
    ),
    FieldProvider(
        key="costsByType",
        section=EMBEDDED,
        visible=lambda ctx: ctx.costs.is_visible(CostField.COSTS_BY_TYPE),
        render=costs_by_type_collection,
    ),
)


class WorkItemCostsRepresenter:
    """
    Runs the provider pipeline for one (user, work item) pair.

    ``explicit_absent`` renders hidden properties as None for hosts whose
    representation format needs every schema key present.  Hidden links
    and embedded resources are always omitted, and so is every cost key
    of a work item whose project has costs disabled (its schema is empty).
    """

    def __init__(
        self,
        policy: CostVisibilityPolicy,
        paths: ApiPaths | None = None,
        providers: Sequence[FieldProvider] = DEFAULT_PROVIDERS,
        explicit_absent: bool = False,
    ):
        self._policy = policy
        self._paths = paths or ApiPaths()
        self._providers = tuple(providers)
        self._explicit_absent = explicit_absent

    @property
    def providers(self) -> tuple[FieldProvider, ...]:
        return self._providers

    def represent(
        self,
        user: User,
        work_item: WorkItem,
        base: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Merge the cost fields into a copy of ``base`` and return it."""
        ctx = RepresentationContext(
            user=user,
            work_item=work_item,
            costs=self._policy.evaluate(user, work_item),
            paths=self._paths,
        )
        result: dict[str, Any] = dict(base or {})
        for section in (LINKS, EMBEDDED):
            if section in result:
                result[section] = dict(result[section])
        null_hidden = self._explicit_absent and work_item.costs_enabled
        for provider in self._providers:
            visible = provider.visible(ctx)
            if not visible and not (null_hidden and provider.section == PROPERTIES):
                continue
            value = provider.render(ctx) if visible else None
            target = result if provider.section == PROPERTIES else result.setdefault(provider.section, {})
            target.setdefault(provider.key, value)
        return result

    def represent_costs_by_type(self, user: User, work_item: WorkItem) -> dict[str, Any] | None:
        """The summarized_costs_by_type resource, or None if hidden."""
        costs = self._policy.evaluate(user, work_item)
        if not costs.is_visible(CostField.COSTS_BY_TYPE):
            return None
        return costs_by_type_collection(RepresentationContext(user, work_item, costs, self._paths))

    def represent_cost_entries(self, user: User, work_item: WorkItem) -> dict[str, Any]:
        """Cost entries of the work item the user may see, as a collection."""
        entries = self._policy.visible_cost_entries(user, work_item)
        show_costs = self._policy.cost_rates_visible(user, work_item)
        currency = work_item.project.currency
        catalog = self._policy.aggregator.cost_type_catalog()
        elements = []
        for entry in entries:
            element: dict[str, Any] = {
                "_type": "CostEntry",
                "id": str(entry.id),
                "spentUnits": _units(entry.units),
                "spentOn": entry.spent_on.isoformat() if entry.spent_on else None,
                "_links": {
                    "self": {"href": self._paths.cost_entry(entry.id)},
                    "costType": {
                        "href": self._paths.cost_type(entry.cost_type_id),
                        "title": catalog[entry.cost_type_id].name,
                    },
                    "user": {"href": self._paths.user(entry.user_id)},
                    "workPackage": {
                        "href": self._paths.work_package(work_item.id),
                        "title": work_item.subject,
                    },
                },
            }
            if show_costs:
                element["costs"] = format_currency(Money(entry.amount, currency.currency), currency)
            elements.append(element)
        return {
            "_type": "Collection",
            "total": len(elements),
            "count": len(elements),
            "_embedded": {"elements": elements},
            "_links": {"self": {"href": self._paths.cost_entries_by_work_package(work_item.id)}},
        }

    def represent_time_entries(self, user: User, work_item: WorkItem) -> dict[str, Any]:
        """Time entries the user may see; rates only where rate permissions allow."""
        currency = work_item.project.currency
        elements = []
        for entry in self._policy.visible_time_entries(user, work_item):
            element: dict[str, Any] = {
                "_type": "TimeEntry",
                "id": str(entry.id),
                "hours": _units(entry.hours),
                "activity": entry.activity,
                "spentOn": entry.spent_on.isoformat() if entry.spent_on else None,
                "_links": {"user": {"href": self._paths.user(entry.user_id)}},
            }
            if self._policy.hourly_rate_visible(user, work_item, entry):
                element["hourlyRate"] = format_currency(entry.rate, currency)
                element["costs"] = format_currency(entry.costs, currency)
            elements.append(element)
        return {
            "_type": "Collection",
            "total": len(elements),
            "count": len(elements),
            "_embedded": {"elements": elements},
        }


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


SCHEMA_ORDER = (
    CostField.OVERALL_COSTS,
    CostField.LABOR_COSTS,
    CostField.MATERIAL_COSTS,
    CostField.COSTS_BY_TYPE,
)


def _schema_entry(cost_field: CostField) -> dict[str, Any]:
    return {
        "type": "Collection" if cost_field is CostField.COSTS_BY_TYPE else "String",
        "name": CAPTIONS[cost_field],
        "required": False,
        "hasDefault": False,
        "writable": False,
    }


def work_item_schema(project: Project | None) -> dict[str, Any]:
    """Schema fragment for the cost fields; empty unless costs are enabled."""
    if project is None or not project.costs_enabled:
        return {}
    return {API_NAMES[f]: _schema_entry(f) for f in SCHEMA_ORDER}


def sums_schema(summable_columns: Iterable[str]) -> dict[str, Any]:
    """Schema fragment for the summed cost columns that are enabled."""
    enabled = set(summable_columns)
    return {API_NAMES[f]: _schema_entry(f) for f in MONEY_FIELDS if f.value in enabled}


class WorkItemSumsRepresenter:
    """
    Sums of the money fields over a list of work items.

    Each work item contributes only what the user may see of it (its
    scope for that field).  A column is present only if it is summable.
    """

    def __init__(self, policy: CostVisibilityPolicy, summable_columns: Iterable[str]):
        self._policy = policy
        self._columns = tuple(f for f in MONEY_FIELDS if f.value in set(summable_columns))

    def contributing(self, user: User, work_items: Iterable[WorkItem]) -> list[WorkItem]:
        """Work items showing the user at least one summed figure."""
        return [
            wi for wi in work_items
            if any(self._policy.figure(user, wi, f) is not None for f in self._columns)
        ]

    def sums(
        self, user: User, work_items: Iterable[WorkItem], currency: CurrencySettings
    ) -> dict[CostField, Money]:
        totals = {f: currency.zero() for f in self._columns}
        for work_item in work_items:
            for cost_field in self._columns:
                figure = self._policy.figure(user, work_item, cost_field)
                if figure is not None:
                    totals[cost_field] = totals[cost_field] + figure
        return totals

    def represent(
        self, user: User, work_items: Iterable[WorkItem], currency: CurrencySettings
    ) -> dict[str, str]:
        totals = self.sums(user, work_items, currency)
        logger.debug("cost_sums_rendered", extra={"columns": [f.value for f in self._columns]})
        return {API_NAMES[f]: format_currency(total, currency) for f, total in totals.items()}
