"""Commands: clinicdesk roles / clinicdesk permissions."""

from rich.console import Console
from rich.table import Table

from clinicdesk.core.permissions.catalog import (
    ADMIN_ROLE,
    PERMISSION_LABELS,
    ROLE_LABELS,
    ROLE_PERMISSIONS,
    Permission,
    Role,
)


console = Console()


def list_roles() -> None:
    """List roles and the permissions new accounts of each role receive."""
    table = Table(title="Roles", show_header=True)
    table.add_column("Role", style="cyan", no_wrap=True)
    table.add_column("Label")
    table.add_column("Default permissions")

    for role in Role:
        if role == ADMIN_ROLE:
            grants = "[green]all (implicit)[/green]"
        else:
            grants = ", ".join(p.value for p in ROLE_PERMISSIONS[role])
        table.add_row(role.value, ROLE_LABELS[role], grants)

    console.print()
    console.print(table)
    console.print()


def list_permissions() -> None:
    """List every permission tag in the catalog."""
    table = Table(title="Permissions", show_header=True)
    table.add_column("Tag", style="cyan", no_wrap=True)
    table.add_column("Label")
    table.add_column("Granted by default to")

    for permission in Permission:
        holders = [r.value for r in Role if permission in ROLE_PERMISSIONS[r]]
        table.add_row(permission.value, PERMISSION_LABELS[permission], ", ".join(holders))

    console.print()
    console.print(table)
    console.print()
