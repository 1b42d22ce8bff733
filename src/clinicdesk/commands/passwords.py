"""Command: clinicdesk hash-password."""

import typer
from rich.console import Console

from clinicdesk.core.constants import MAX_PASSWORD_LENGTH, MIN_PASSWORD_LENGTH


console = Console()


def hash_password_cmd(
    password: str = typer.Option(
        ...,
        prompt=True,
        hide_input=True,
        confirmation_prompt=True,
        help="Password to hash.",
    ),
) -> None:
    """Print a bcrypt hash for the users file's password_hash field."""
    from clinicdesk.core.auth.backend import hash_password

    if not MIN_PASSWORD_LENGTH <= len(password) <= MAX_PASSWORD_LENGTH:
        console.print(
            f"[red]Error:[/red] password must be {MIN_PASSWORD_LENGTH}-"
            f"{MAX_PASSWORD_LENGTH} characters."
        )
        raise typer.Exit(1)

    # Plain print so the hash can be piped without markup
    print(hash_password(password))
