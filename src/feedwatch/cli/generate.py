"""
feedwatch generate - Seed one day's expected deliveries.
"""

from datetime import datetime
from pathlib import Path

import typer

from feedwatch.cli.project import DATE_FORMATS, console, open_service, resolve_day
from feedwatch.core.schedule import generate_day

app = typer.Typer(name="generate", help="Seed expected deliveries for a day", invoke_without_command=True)


@app.callback()
def generate(
    ctx: typer.Context,
    date: datetime | None = typer.Option(None, "--date", formats=DATE_FORMATS, help="UTC day (default: today)"),
    env: str | None = typer.Option(None, help="Environment (dev, staging, prod)"),
    project_dir: Path = typer.Option(Path.cwd(), "--project-dir", "-d", help="Project directory"),
) -> None:
    """
    Create the expected deliveries of every configured feed type for one day.

    Existing deliveries keep their status, so running this twice is harmless.
    """
    if ctx.invoked_subcommand is None:
        svc = open_service(project_dir, env)
        try:
            summary = generate_day(svc.store, resolve_day(date), svc.monitor.feeds)
        finally:
            svc.store.close()

        console.print(
            f"[bold]{summary.day.date().isoformat()}[/bold]: "
            f"[green]{summary.created} created[/green], {summary.filled} filled, "
            f"[dim]{summary.unchanged} unchanged[/dim]"
        )
        if summary.failed:
            console.print(f"[red]{len(summary.failed)} slots failed:[/red] {', '.join(summary.failed)}")
            raise typer.Exit(1)
