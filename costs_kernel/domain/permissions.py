"""
costs_kernel.domain.permissions -- Cost permission table and resolver contract.

Responsibility:
    Declares every permission the costs module contributes, each with the
    minimum scope a user must have in the project before a role grant
    counts (anyone / logged in / project member).  Declares the
    PermissionResolver protocol the visibility policy consumes.

Architecture position:
    Kernel > Domain.  Pure lookup tables, no I/O.  The concrete resolver
    lives in costs_services.permission_resolver; hosts may supply their own.

Invariants:
    - The table is the single source of permission names; resolvers answer
      False for anything not in it.
    - "Own" permissions restrict to entries authored by the requesting user.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Protocol, runtime_checkable

from costs_kernel.domain.models import Project, User, WorkItem


class Permission(str, Enum):
    VIEW_TIME_ENTRIES = "view_time_entries"
    LOG_TIME = "log_time"
    EDIT_TIME_ENTRIES = "edit_time_entries"
    VIEW_OWN_TIME_ENTRIES = "view_own_time_entries"
    EDIT_OWN_TIME_ENTRIES = "edit_own_time_entries"
    MANAGE_PROJECT_ACTIVITIES = "manage_project_activities"
    VIEW_OWN_HOURLY_RATE = "view_own_hourly_rate"
    VIEW_HOURLY_RATES = "view_hourly_rates"
    EDIT_OWN_HOURLY_RATE = "edit_own_hourly_rate"
    EDIT_HOURLY_RATES = "edit_hourly_rates"
    VIEW_COST_RATES = "view_cost_rates"
    LOG_OWN_COSTS = "log_own_costs"
    LOG_COSTS = "log_costs"
    EDIT_OWN_COST_ENTRIES = "edit_own_cost_entries"
    EDIT_COST_ENTRIES = "edit_cost_entries"
    VIEW_COST_ENTRIES = "view_cost_entries"
    VIEW_OWN_COST_ENTRIES = "view_own_cost_entries"


class RequireScope(str, Enum):
    """Minimum standing a user needs in a project for a grant to apply."""
    ANYONE = "anyone"
    LOGGED_IN = "logged_in"
    PROJECT_MEMBER = "project_member"


class CostScope(str, Enum):
    """Which log entries a user may see figures for."""
    ALL = "all"
    OWN = "own"
    NONE = "none"


@dataclass(frozen=True)
class PermissionSpec:
    permission: Permission
    require: RequireScope = RequireScope.ANYONE
    actions: tuple[str, ...] = ()


_SPECS = (
    PermissionSpec(Permission.VIEW_TIME_ENTRIES, actions=("timelog.index", "timelog.show", "time_entry_reports.report")),
    PermissionSpec(Permission.LOG_TIME, RequireScope.LOGGED_IN, ("timelog.new", "timelog.create", "timelog.edit", "timelog.update")),
    PermissionSpec(Permission.EDIT_TIME_ENTRIES, RequireScope.PROJECT_MEMBER, ("timelog.edit", "timelog.update", "timelog.destroy")),
    PermissionSpec(Permission.VIEW_OWN_TIME_ENTRIES, actions=("timelog.index", "timelog.report")),
    PermissionSpec(Permission.EDIT_OWN_TIME_ENTRIES, RequireScope.LOGGED_IN, ("timelog.edit", "timelog.update", "timelog.destroy")),
    PermissionSpec(Permission.MANAGE_PROJECT_ACTIVITIES, RequireScope.PROJECT_MEMBER, ("time_entry_activities.update",)),
    PermissionSpec(Permission.VIEW_OWN_HOURLY_RATE),
    PermissionSpec(Permission.VIEW_HOURLY_RATES),
    PermissionSpec(Permission.EDIT_OWN_HOURLY_RATE, RequireScope.PROJECT_MEMBER, ("hourly_rates.set_rate", "hourly_rates.edit", "hourly_rates.update")),
    PermissionSpec(Permission.EDIT_HOURLY_RATES, RequireScope.PROJECT_MEMBER, ("hourly_rates.set_rate", "hourly_rates.edit", "hourly_rates.update")),
    PermissionSpec(Permission.VIEW_COST_RATES),
    PermissionSpec(Permission.LOG_OWN_COSTS, RequireScope.LOGGED_IN, ("costlog.new", "costlog.create")),
    PermissionSpec(Permission.LOG_COSTS, RequireScope.PROJECT_MEMBER, ("costlog.new", "costlog.create")),
    PermissionSpec(Permission.EDIT_OWN_COST_ENTRIES, RequireScope.LOGGED_IN, ("costlog.edit", "costlog.update", "costlog.destroy")),
    PermissionSpec(Permission.EDIT_COST_ENTRIES, RequireScope.PROJECT_MEMBER, ("costlog.edit", "costlog.update", "costlog.destroy")),
    PermissionSpec(Permission.VIEW_COST_ENTRIES, actions=("budgets.index", "budgets.show", "costlog.index")),
    PermissionSpec(Permission.VIEW_OWN_COST_ENTRIES, actions=("budgets.index", "budgets.show", "costlog.index")),
)

PERMISSION_TABLE: MappingProxyType[Permission, PermissionSpec] = MappingProxyType(
    {spec.permission: spec for spec in _SPECS}
)


def permission_spec(permission: Permission | str) -> PermissionSpec:
    """Look up a permission's spec.  Raises KeyError for unknown names."""
    try:
        return PERMISSION_TABLE[Permission(permission)]
    except ValueError:
        raise KeyError(permission) from None


def is_known_permission(permission: Permission | str) -> bool:
    try:
        permission_spec(permission)
    except KeyError:
        return False
    return True


def scope_satisfied(require: RequireScope, *, logged_in: bool, member: bool) -> bool:
    """Whether a user's standing in a project meets ``require``."""
    if require is RequireScope.PROJECT_MEMBER:
        return member
    if require is RequireScope.LOGGED_IN:
        return logged_in
    return True


@runtime_checkable
class PermissionResolver(Protocol):
    """Answers whether a user holds a permission in a project or work item.

    Unknown contexts and unknown permissions yield False, never an error.
    Implementations never mutate permission state.
    """

    def is_allowed(
        self,
        user: User,
        permission: Permission | str,
        context: Project | WorkItem | object,
    ) -> bool: ...
