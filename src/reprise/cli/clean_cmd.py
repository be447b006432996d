"""reprise clean -- delete the recordings directory.

Used before a fresh recording session so stale transactions from an
earlier run cannot shadow new ones during replay.
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from reprise.cli.common import resolve_recordings_dir
from reprise.errors import FileSystemWriteError
from reprise.storage.transaction_store import clean_recordings


def clean(
    path: Optional[str] = typer.Option(
        None, "--path", "-p", help="Recordings directory (default: from reprise.yaml)"
    ),
) -> None:
    """Remove all recorded transactions."""
    console = Console()
    recordings_dir = resolve_recordings_dir(path)

    try:
        removed = clean_recordings(recordings_dir)
    except FileSystemWriteError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    if removed:
        console.print(f"[green]Removed[/green] {recordings_dir}")
    else:
        console.print(f"[dim]Nothing to clean at {recordings_dir}[/dim]")
