"""
costs_services.permission_resolver -- Role and membership based permission checks.

Responsibility:
    Concrete PermissionResolver for hosts that do not bring their own.
    A user's permissions in a project are the union of the permissions of
    their roles there.  Users without a membership act under the
    non-member role (logged in) or the anonymous role (not logged in).
    A grant only counts if the user meets the permission's RequireScope.

Architecture position:
    Services layer.  Consumes the permission table from costs_kernel;
    consumed by CostVisibilityPolicy through the PermissionResolver protocol.

Invariants:
    - Never raises for unknown permissions or contexts; answers False.
    - Costs disabled on the project -> no cost permission is granted,
      admins included.
    - Read-only: role and membership maps are frozen at construction.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from uuid import UUID

from costs_kernel.domain.models import Project, User, WorkItem
from costs_kernel.domain.permissions import Permission, permission_spec, scope_satisfied
from costs_kernel.logging_config import get_logger

logger = get_logger("services.permission_resolver")

NON_MEMBER_ROLE = "non_member"
ANONYMOUS_ROLE = "anonymous"


def _project_of(context: object) -> Project | None:
    if isinstance(context, Project):
        return context
    if isinstance(context, WorkItem):
        return context.project
    return None


class MembershipPermissionResolver:
    """
    Answers ``is_allowed(user, permission, context)`` from role tables.

    Args:
        role_permissions: role name -> permissions granted by that role.
        memberships: (user id, project id) -> role names held there.
        non_member_role: role applied to logged-in users without membership.
        anonymous_role: role applied to users who are not logged in.
    """

    def __init__(
        self,
        role_permissions: Mapping[str, Iterable[Permission | str]],
        memberships: Mapping[tuple[UUID, UUID], Iterable[str]] | None = None,
        non_member_role: str | None = NON_MEMBER_ROLE,
        anonymous_role: str | None = ANONYMOUS_ROLE,
    ):
        self._role_permissions: Mapping[str, frozenset[str]] = MappingProxyType(
            {name: frozenset(Permission(p).value for p in perms) for name, perms in role_permissions.items()}
        )
        self._memberships: Mapping[tuple[UUID, UUID], tuple[str, ...]] = MappingProxyType(
            {key: tuple(roles) for key, roles in (memberships or {}).items()}
        )
        self._non_member_role = non_member_role
        self._anonymous_role = anonymous_role

    def is_member(self, user: User, project: Project) -> bool:
        return (user.id, project.id) in self._memberships

    def roles_for(self, user: User, project: Project) -> tuple[str, ...]:
        roles = self._memberships.get((user.id, project.id))
        if roles is not None:
            return roles
        fallback = self._non_member_role if user.logged_in else self._anonymous_role
        return (fallback,) if fallback else ()

    def check(self, user: User, permission: Permission | str, context: object) -> tuple[bool, str]:
        """Decide and explain.

        Returns:
            (allowed, reason). reason is empty when allowed, or a short
            message when denied.
        """
        project = _project_of(context)
        if project is None:
            return (False, f"unsupported context {type(context).__name__}")

        try:
            spec = permission_spec(permission)
        except KeyError:
            return (False, f"unknown permission {permission!r}")

        if not project.costs_enabled:
            return (False, "costs module disabled for project")

        if user.admin:
            return (True, "")

        member = self.is_member(user, project)
        if not scope_satisfied(spec.require, logged_in=user.logged_in, member=member):
            return (False, f"permission '{spec.permission.value}' requires {spec.require.value}")

        granted: set[str] = set()
        for role in self.roles_for(user, project):
            granted |= self._role_permissions.get(role, frozenset())

        if spec.permission.value not in granted:
            return (False, f"permission '{spec.permission.value}' not granted")
        return (True, "")

    def is_allowed(self, user: User, permission: Permission | str, context: object) -> bool:
        allowed, reason = self.check(user, permission, context)
        if not allowed:
            logger.debug(
                "permission_denied",
                extra={"permission": getattr(permission, "value", permission), "user_id": str(user.id), "reason": reason},
            )
        return allowed
