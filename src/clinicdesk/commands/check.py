"""Command: clinicdesk check - evaluate an access requirement offline."""

from typing import Annotated

import typer
from rich.console import Console

from clinicdesk.core.permissions.evaluator import get_evaluator
from clinicdesk.core.permissions.guard import AccessRequirement, check_access
from clinicdesk.core.permissions.models import UserRecord


console = Console()


def check(
    role: str = typer.Option("nurse", "--role", "-r", help="Role of the user."),
    grant: list[str] = typer.Option(
        [], "--grant", "-g", help="Permission granted to the user (repeatable)."
    ),
    inactive: bool = typer.Option(False, "--inactive", help="Evaluate an inactive account."),
    anonymous: bool = typer.Option(False, "--anonymous", help="Evaluate with no user at all."),
    require_role: list[str] = typer.Option(
        [], "--require-role", help="Accepted role (repeatable)."
    ),
    require_permission: Annotated[
        str | None,
        typer.Option("--require-permission", "-p", help="Single required permission."),
    ] = None,
    require: list[str] = typer.Option(
        [], "--require", help="Permission in the required list (repeatable)."
    ),
    require_all: bool = typer.Option(
        False, "--all/--any", help="Whether every --require tag is needed, or one."
    ),
) -> None:
    """Evaluate an access check the way the API guards do.

    Exits 0 when access is granted and 1 when it is denied.
    """
    user = None
    if not anonymous:
        user = UserRecord(
            id="cli",
            username="cli",
            role=role,
            permissions=grant,
            is_active=not inactive,
        )
        if user.role is None:
            console.print(f"[yellow]Warning:[/yellow] unknown role '{role}', treated as no role.")
        dropped = sorted(set(grant) - {p.value for p in user.permissions})
        if dropped:
            console.print(f"[yellow]Warning:[/yellow] ignoring unknown permissions: {', '.join(dropped)}")

    requirement = AccessRequirement.build(
        role=require_role or None,
        permission=require_permission,
        permissions=require or None,
        require_all=require_all,
    )
    decision = check_access(user, requirement)

    if user is not None:
        effective = sorted(p.value for p in get_evaluator(user).effective_permissions())
        console.print(f"Effective permissions: {', '.join(effective) or '(none)'}")

    if decision.allowed:
        console.print("[bold green]granted[/bold green]")
        return

    console.print(f"[bold red]denied[/bold red] ({decision.outcome.value}): {decision.message}")
    raise typer.Exit(1)
