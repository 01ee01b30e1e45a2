"""
feedwatch reconcile - Run a single reconciliation pass.
"""

from pathlib import Path

import typer
from rich.table import Table

from feedwatch.cli.project import console, open_service

app = typer.Typer(name="reconcile", help="Run one reconciliation pass", invoke_without_command=True)


@app.callback()
def reconcile(
    ctx: typer.Context,
    env: str | None = typer.Option(None, help="Environment (dev, staging, prod)"),
    project_dir: Path = typer.Option(Path.cwd(), "--project-dir", "-d", help="Project directory"),
) -> None:
    """
    Probe every due delivery once and record status changes.
    """
    if ctx.invoked_subcommand is None:
        svc = open_service(project_dir, env)
        try:
            summary = svc.reconciler.run_pass()
        finally:
            svc.store.close()

        if summary.skipped:
            console.print(f"[yellow]Pass skipped:[/yellow] {summary.reason}")
            raise typer.Exit(1)

        console.print(
            f"{summary.checked} checked, [green]{summary.changed} changed[/green], "
            f"{'[red]' if summary.errors else ''}{summary.errors} errors{'[/red]' if summary.errors else ''}"
        )
        if summary.events:
            table = Table(title="Status changes", show_header=True)
            table.add_column("Feed", style="cyan")
            table.add_column("Timestamp")
            table.add_column("Status", style="yellow")
            table.add_column("Previous received", style="dim")
            for event in summary.events:
                table.add_row(
                    event.feed_type,
                    event.timestamp.isoformat(),
                    event.status.value,
                    event.previous_timestamp.isoformat() if event.previous_timestamp else "",
                )
            console.print(table)
