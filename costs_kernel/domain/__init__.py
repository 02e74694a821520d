"""
Pure domain layer.

This module contains data transfer objects and the cost policy logic
with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- Configuration files

All domain objects are immutable and every evaluation is deterministic.
"""

from costs_kernel.domain.aggregation import (
    CostAggregator,
    CostEntrySource,
    InMemoryCostEntrySource,
)
from costs_kernel.domain.api_paths import ApiPaths
from costs_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from costs_kernel.domain.formatting import format_currency
from costs_kernel.domain.models import (
    CostLogEntry,
    CostType,
    CostTypeSummary,
    CurrencySettings,
    Project,
    TimeLogEntry,
    User,
    WorkItem,
)
from costs_kernel.domain.permissions import (
    PERMISSION_TABLE,
    CostScope,
    Permission,
    PermissionResolver,
    RequireScope,
)
from costs_kernel.domain.representation import (
    DEFAULT_PROVIDERS,
    FieldProvider,
    WorkItemCostsRepresenter,
    WorkItemSumsRepresenter,
    sums_schema,
    work_item_schema,
)
from costs_kernel.domain.values import NOT_APPLICABLE, Currency, Money, NotApplicable
from costs_kernel.domain.visibility import CostField, CostVisibilityPolicy, WorkItemCosts

__all__ = [
    # Values
    "Currency",
    "Money",
    "NOT_APPLICABLE",
    "NotApplicable",
    "CurrencyRegistry",
    "CurrencyInfo",
    # DTOs
    "CostLogEntry",
    "CostType",
    "CostTypeSummary",
    "CurrencySettings",
    "Project",
    "TimeLogEntry",
    "User",
    "WorkItem",
    # Permissions
    "PERMISSION_TABLE",
    "CostScope",
    "Permission",
    "PermissionResolver",
    "RequireScope",
    # Aggregation and policy
    "CostAggregator",
    "CostEntrySource",
    "InMemoryCostEntrySource",
    "CostField",
    "CostVisibilityPolicy",
    "WorkItemCosts",
    "format_currency",
    # Representation
    "ApiPaths",
    "DEFAULT_PROVIDERS",
    "FieldProvider",
    "WorkItemCostsRepresenter",
    "WorkItemSumsRepresenter",
    "sums_schema",
    "work_item_schema",
]
