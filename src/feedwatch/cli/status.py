"""
feedwatch status - Show a day's deliveries for one feed type.
"""

from datetime import datetime
from pathlib import Path

import typer
from rich.table import Table

from feedwatch.cli.project import DATE_FORMATS, console, open_service, resolve_day
from feedwatch.core.delivery import DeliveryStatus

STATUS_STYLES = {
    DeliveryStatus.EXPECTED: "dim",
    DeliveryStatus.DELAYED: "yellow",
    DeliveryStatus.MISSING: "red",
    DeliveryStatus.RECEIVED: "green",
}


def status(
    feed_type: str = typer.Argument(..., help="Feed type, e.g. metar"),
    date: datetime | None = typer.Option(None, "--date", formats=DATE_FORMATS, help="UTC day (default: today)"),
    env: str | None = typer.Option(None, help="Environment (dev, staging, prod)"),
    project_dir: Path = typer.Option(Path.cwd(), "--project-dir", "-d", help="Project directory"),
) -> None:
    """
    Print one feed type's deliveries for a UTC day.
    """
    svc = open_service(project_dir, env)
    if feed_type not in svc.monitor.feeds:
        svc.store.close()
        console.print(f"[red]Unknown feed type '{feed_type}'[/red] (configured: {', '.join(svc.monitor.feeds)})")
        raise typer.Exit(1)

    day = resolve_day(date)
    try:
        deliveries = svc.store.for_day(feed_type, day)
    finally:
        svc.store.close()

    table = Table(title=f"{feed_type} - {day.date().isoformat()}", show_header=True)
    table.add_column("Timestamp")
    table.add_column("Status")
    table.add_column("Filename", style="cyan")
    table.add_column("Previous received", style="dim")
    for d in deliveries:
        style = STATUS_STYLES.get(d.status, "")
        table.add_row(
            d.timestamp.strftime("%H:%M"),
            f"[{style}]{d.status.value}[/{style}]",
            d.filename or "",
            d.previous_timestamp.isoformat() if d.previous_timestamp else "",
        )
    console.print(table)
