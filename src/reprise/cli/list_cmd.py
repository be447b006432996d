"""reprise list -- enumerate recorded transactions.

Shows one row per transaction (oldest first) and reports any files
that could not be loaded, so a corrupt fixture is visible before it
turns into a confusing replay miss.
"""

from __future__ import annotations

from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from reprise.cli.common import open_store
from reprise.errors import FileSystemReadError


def list_transactions(
    path: Optional[str] = typer.Option(
        None, "--path", "-p", help="Recordings directory (default: from reprise.yaml)"
    ),
    strict: bool = typer.Option(
        False, "--strict", help="Exit with code 1 if any recording is unreadable"
    ),
) -> None:
    """List recorded transactions."""
    console = Console()
    store = open_store(path)

    try:
        result = store.load_all()
    except FileSystemReadError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    if not result.transactions and not result.failures:
        console.print(f"[dim]No recordings found in {store.recordings_dir}[/dim]")
        raise typer.Exit(code=0)

    table = Table(box=box.SIMPLE, padding=(0, 1))
    table.add_column("ID", style="bold")
    table.add_column("Method")
    table.add_column("URL")
    table.add_column("Status", justify="right")
    table.add_column("Recorded")

    for transaction in result.transactions:
        status = transaction.response.status
        style = "green" if status < 400 else "red"
        table.add_row(
            transaction.id,
            transaction.request.method,
            escape(transaction.request.url),
            f"[{style}]{status}[/{style}]",
            transaction.recorded_at.isoformat(timespec="seconds"),
        )

    console.print(table)
    console.print(f"[bold]{len(result.transactions)}[/bold] transaction(s) in {store.recordings_dir}")

    for failure in result.failures:
        console.print(
            f"[yellow]Warning: skipped unreadable recording {failure.path.name}: "
            f"{escape(str(failure.error))}[/yellow]"
        )

    if strict and result.failures:
        raise typer.Exit(code=1)
