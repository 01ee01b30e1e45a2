"""
feedwatch serve - Long-running monitor service.

Runs the HTTP API with:
- GET /api/status/{feed_type} - A day's deliveries
- POST /api/trigger-email - Missing-file alert
- GET /api/events - Live status updates (SSE)
- GET /health - Health check
- Background reconcile and daily generation loops
"""

from pathlib import Path

import typer

from feedwatch.cli.project import console
from feedwatch.exceptions import FeedwatchError
from feedwatch.service.server import run_service

app = typer.Typer(name="serve", help="Run the feedwatch monitor service", invoke_without_command=True)


@app.callback()
def serve(
    ctx: typer.Context,
    env: str | None = typer.Option(None, help="Environment (dev, staging, prod)"),
    no_scheduler: bool = typer.Option(False, "--no-scheduler", help="Disable background loops"),
    no_startup_pass: bool = typer.Option(
        False, "--no-startup-pass", help="Skip seeding today and the initial reconcile pass"
    ),
    host: str = typer.Option("0.0.0.0", help="Host to bind to"),
    port: int = typer.Option(5000, help="Port to bind to"),
    project_dir: Path = typer.Option(Path.cwd(), "--project-dir", "-d", help="Project directory"),
) -> None:
    """
    Run feedwatch as a long-running service.

    On startup today's expected deliveries are seeded and one reconciliation
    pass runs before the background loops take over.
    """
    if ctx.invoked_subcommand is None:
        try:
            run_service(
                project_dir=project_dir,
                env=env,
                host=host,
                port=port,
                enable_scheduler=not no_scheduler,
                run_on_startup=not no_startup_pass,
            )
        except FeedwatchError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1) from e
