"""Command: clinicdesk serve - run the API under uvicorn."""

import typer


def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind."),
    port: int = typer.Option(8000, "--port", help="Port to listen on."),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes."),
    workers: int = typer.Option(1, "--workers", help="Worker processes."),
) -> None:
    """Run the ClinicDesk API.

    Sessions are held in process memory, so keep a single worker unless a
    sticky load balancer pins each client to one process.
    """
    import uvicorn

    uvicorn.run(
        "clinicdesk.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        workers=workers,
    )
