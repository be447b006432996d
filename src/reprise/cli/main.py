"""reprise CLI entry point."""

import typer

from reprise import __version__
from reprise.cli.clean_cmd import clean
from reprise.cli.list_cmd import list_transactions
from reprise.cli.show_cmd import show

app = typer.Typer(
    name="reprise",
    help="Record and replay HTTP transactions for tests",
    no_args_is_help=True,
)

# Register subcommands
app.command()(clean)
app.command(name="list")(list_transactions)
app.command()(show)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"reprise {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Record and replay HTTP transactions for tests."""
