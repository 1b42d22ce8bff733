"""Permission and role catalog.

The tag spellings here are the wire format shared with the front end;
renaming a member's value breaks every stored user record that grants it.
"""

from enum import StrEnum


class Permission(StrEnum):
    """Fine-grained capability tags, grantable per user."""

    VIEW_PATIENTS = "view_patients"
    MANAGE_PATIENTS = "manage_patients"
    VIEW_STAFF = "view_staff"
    MANAGE_STAFF = "manage_staff"
    VIEW_FINANCE = "view_finance"
    MANAGE_FINANCE = "manage_finance"
    VIEW_PAYROLL = "view_payroll"
    MANAGE_PAYROLL = "manage_payroll"
    VIEW_USERS = "view_users"
    MANAGE_USERS = "manage_users"
    VIEW_REPORTS = "view_reports"
    MANAGE_SETTINGS = "manage_settings"
    MANAGE_DATABASE = "manage_database"


class Role(StrEnum):
    """Job-function roles. Only ADMIN carries implicit grants."""

    ADMIN = "admin"
    DOCTOR = "doctor"
    NURSE = "nurse"
    RECEPTIONIST = "receptionist"
    ACCOUNTANT = "accountant"


ADMIN_ROLE = Role.ADMIN

ALL_PERMISSIONS: frozenset[Permission] = frozenset(Permission)

# Default grants applied when an account is created for a role.
ROLE_PERMISSIONS: dict[Role, tuple[Permission, ...]] = {
    Role.ADMIN: tuple(Permission),
    Role.DOCTOR: (
        Permission.VIEW_PATIENTS,
        Permission.MANAGE_PATIENTS,
        Permission.VIEW_STAFF,
        Permission.VIEW_REPORTS,
    ),
    Role.NURSE: (
        Permission.VIEW_PATIENTS,
        Permission.VIEW_STAFF,
    ),
    Role.RECEPTIONIST: (
        Permission.VIEW_PATIENTS,
        Permission.MANAGE_PATIENTS,
        Permission.VIEW_FINANCE,
        Permission.MANAGE_FINANCE,
    ),
    Role.ACCOUNTANT: (
        Permission.VIEW_PATIENTS,
        Permission.VIEW_STAFF,
        Permission.VIEW_FINANCE,
        Permission.MANAGE_FINANCE,
        Permission.VIEW_PAYROLL,
        Permission.MANAGE_PAYROLL,
        Permission.VIEW_REPORTS,
    ),
}

PERMISSION_LABELS: dict[Permission, str] = {
    Permission.VIEW_PATIENTS: "View patients",
    Permission.MANAGE_PATIENTS: "Manage patients",
    Permission.VIEW_STAFF: "View staff",
    Permission.MANAGE_STAFF: "Manage staff",
    Permission.VIEW_FINANCE: "View finance",
    Permission.MANAGE_FINANCE: "Manage finance",
    Permission.VIEW_PAYROLL: "View payroll",
    Permission.MANAGE_PAYROLL: "Manage payroll",
    Permission.VIEW_USERS: "View users",
    Permission.MANAGE_USERS: "Manage users",
    Permission.VIEW_REPORTS: "View reports",
    Permission.MANAGE_SETTINGS: "Manage settings",
    Permission.MANAGE_DATABASE: "Manage database",
}

ROLE_LABELS: dict[Role, str] = {
    Role.ADMIN: "System administrator",
    Role.DOCTOR: "Doctor",
    Role.NURSE: "Nurse",
    Role.RECEPTIONIST: "Receptionist",
    Role.ACCOUNTANT: "Accountant",
}


def parse_permission(tag: str) -> Permission | None:
    """Return the catalog member for ``tag``, or None if it is not one."""
    try:
        return Permission(tag)
    except ValueError:
        return None


def parse_role(value: str) -> Role | None:
    """Return the catalog role for ``value`` (case-insensitive), or None."""
    try:
        return Role(value.strip().lower())
    except ValueError:
        return None


def default_permissions(role: Role) -> frozenset[Permission]:
    """Permissions granted to a freshly created account of ``role``."""
    return frozenset(ROLE_PERMISSIONS.get(role, ()))
