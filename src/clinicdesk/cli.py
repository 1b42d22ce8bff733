"""ClinicDesk command line."""

import typer
from rich.console import Console

from clinicdesk import __version__
from clinicdesk.commands import catalog, check, passwords, serve


console = Console()

app = typer.Typer(
    name="clinicdesk",
    help="Inspect the permission catalog, check access and run the API.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command(name="roles")(catalog.list_roles)
app.command(name="permissions")(catalog.list_permissions)
app.command(name="check")(check.check)
app.command(name="hash-password")(passwords.hash_password_cmd)
app.command(name="serve")(serve.serve)


@app.callback(invoke_without_command=True)
def version_callback(
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version and exit."
    ),
) -> None:
    """ClinicDesk - clinic administration access layer."""
    if version:
        console.print(f"[bold cyan]clinicdesk[/bold cyan] version {__version__}")
        raise typer.Exit()


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
