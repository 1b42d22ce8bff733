"""Role/permission model: catalog, evaluator, guards and route decorators."""

from clinicdesk.core.permissions.catalog import (
    ADMIN_ROLE,
    ALL_PERMISSIONS,
    PERMISSION_LABELS,
    ROLE_LABELS,
    ROLE_PERMISSIONS,
    Permission,
    Role,
    default_permissions,
    parse_permission,
    parse_role,
)
from clinicdesk.core.permissions.evaluator import (
    Capabilities,
    PermissionEvaluator,
    get_evaluator,
)
from clinicdesk.core.permissions.guard import (
    AccessDecision,
    AccessGuard,
    AccessOutcome,
    AccessRequirement,
    Denial,
    PermissionGate,
    check_access,
)
from clinicdesk.core.permissions.models import UserRecord


__all__ = [
    "ADMIN_ROLE",
    "ALL_PERMISSIONS",
    "PERMISSION_LABELS",
    "ROLE_LABELS",
    "ROLE_PERMISSIONS",
    "AccessDecision",
    "AccessGuard",
    "AccessOutcome",
    "AccessRequirement",
    "Capabilities",
    "Denial",
    "Permission",
    "PermissionEvaluator",
    "PermissionGate",
    "Role",
    "UserRecord",
    "check_access",
    "default_permissions",
    "get_evaluator",
    "parse_permission",
    "parse_role",
]
