"""Sidebar menu definition and per-user filtering."""

from dataclasses import dataclass, field

from clinicdesk.core.permissions.catalog import Permission
from clinicdesk.core.permissions.guard import AccessRequirement, PermissionGate
from clinicdesk.core.permissions.models import UserRecord


@dataclass(frozen=True)
class MenuItem:
    key: str
    label: str
    path: str
    requirement: AccessRequirement = field(default_factory=AccessRequirement)


MENU: tuple[MenuItem, ...] = (
    MenuItem("dashboard", "Dashboard", "/"),
    MenuItem(
        "patients",
        "Patients",
        "/patients",
        AccessRequirement.build(permission=Permission.VIEW_PATIENTS),
    ),
    MenuItem(
        "staff",
        "Staff",
        "/staff",
        AccessRequirement.build(permission=Permission.VIEW_STAFF),
    ),
    MenuItem(
        "finance",
        "Finance",
        "/finance",
        AccessRequirement.build(permission=Permission.VIEW_FINANCE),
    ),
    MenuItem(
        "payroll",
        "Payroll",
        "/payroll",
        AccessRequirement.build(permission=Permission.VIEW_PAYROLL),
    ),
    MenuItem(
        "reports",
        "Reports",
        "/reports",
        AccessRequirement.build(permission=Permission.VIEW_REPORTS),
    ),
    MenuItem(
        "users",
        "Users",
        "/users",
        AccessRequirement.build(
            permissions=[Permission.VIEW_USERS, Permission.MANAGE_USERS]
        ),
    ),
    MenuItem(
        "settings",
        "Settings",
        "/settings",
        AccessRequirement.build(
            permissions=[Permission.MANAGE_SETTINGS, Permission.MANAGE_DATABASE]
        ),
    ),
)


def visible_items(user: UserRecord | None, menu: tuple[MenuItem, ...] = MENU) -> list[MenuItem]:
    """Menu entries whose gate lets ``user`` through, in menu order."""
    items: list[MenuItem] = []
    for item in menu:
        shown = PermissionGate(user, item.requirement).render(item)
        if shown is not None:
            items.append(shown)
    return items
