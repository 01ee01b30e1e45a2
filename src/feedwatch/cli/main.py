"""
Main CLI entry point.
"""

import typer

from feedwatch import __version__
from feedwatch.cli import generate, reconcile, serve, status


def version_callback(value: bool):
    """Callback to display version and exit."""
    if value:
        typer.echo(f"feedwatch version {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="feedwatch",
    help="feedwatch - Meteorological feed arrival monitor",
    add_completion=True,
)

app.add_typer(serve.app, name="serve")
app.add_typer(generate.app, name="generate")
app.add_typer(reconcile.app, name="reconcile")
app.command(name="status")(status.status)


@app.callback(invoke_without_command=True)
def entrypoint(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        help="Show version and exit.",
    ),
):
    """
    feedwatch - Meteorological feed arrival monitor.

    Run 'feedwatch <command> --help' for help on a specific command.
    """
    if ctx.invoked_subcommand is None:
        if not version:
            typer.echo(ctx.get_help())
            raise typer.Exit()


def main():
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
