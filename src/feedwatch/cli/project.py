"""
Shared project loading for CLI commands.
"""

from datetime import UTC, datetime
from pathlib import Path

import typer
from rich.console import Console

from feedwatch.exceptions import FeedwatchError
from feedwatch.service.server import MonitorService

console = Console()

DATE_FORMATS = ["%Y-%m-%d"]


def open_service(project_dir: Path, env: str | None) -> MonitorService:
    """Load config and logging for ``project_dir``; exit with status 1 on configuration errors."""
    try:
        return MonitorService.from_project(project_dir, env=env)
    except FeedwatchError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


def resolve_day(date: datetime | None) -> datetime:
    """CLI dates are UTC days; default is today."""
    if date is None:
        return datetime.now(UTC)
    return date.replace(tzinfo=UTC)
