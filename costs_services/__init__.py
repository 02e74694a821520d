"""
costs_services -- Wiring of the costs kernel for a host application.

Exports:
    MembershipPermissionResolver: role/membership based PermissionResolver.
    CostsExtension, build_costs_extension: the injectable costs bundle.
"""

from costs_services.extension import (
    COST_ATTRIBUTES,
    QUERY_COLUMNS,
    CostsExtension,
    QueryColumn,
    build_costs_extension,
)
from costs_services.permission_resolver import MembershipPermissionResolver

__all__ = [
    "COST_ATTRIBUTES",
    "QUERY_COLUMNS",
    "CostsExtension",
    "MembershipPermissionResolver",
    "QueryColumn",
    "build_costs_extension",
]
