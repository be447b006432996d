"""reprise show -- print a single recorded transaction."""

from __future__ import annotations

import json
from typing import Any, Optional

import typer
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from reprise.cli.common import open_store
from reprise.errors import (
    FileSystemReadError,
    InvalidTransactionIdError,
    TransactionSerializationError,
)


def _render_body(body: Any, console: Console) -> None:
    if body is None:
        console.print("[dim](empty)[/dim]")
    elif isinstance(body, bytes):
        console.print(f"[dim]({len(body)} bytes of binary data)[/dim]")
    elif isinstance(body, str):
        console.print(body, markup=False, highlight=False)
    else:
        console.print(Syntax(json.dumps(body, indent=2, ensure_ascii=False), "json"))


def _render_headers(headers: dict[str, str], console: Console) -> None:
    if not headers:
        console.print("[dim](no headers)[/dim]")
        return
    table = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    table.add_column("Header", style="bold")
    table.add_column("Value")
    for name, value in sorted(headers.items()):
        table.add_row(escape(name), escape(value))
    console.print(table)


def show(
    transaction_id: str = typer.Argument(..., help="Transaction ID to display"),
    path: Optional[str] = typer.Option(
        None, "--path", "-p", help="Recordings directory (default: from reprise.yaml)"
    ),
) -> None:
    """Show the request and response of one recorded transaction."""
    console = Console()
    store = open_store(path)

    try:
        transaction = store.read(transaction_id)
    except InvalidTransactionIdError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)
    except FileSystemReadError:
        console.print(
            f"[bold red]Error:[/bold red] No recording '{transaction_id}' "
            f"in {store.recordings_dir}"
        )
        raise typer.Exit(code=1)
    except TransactionSerializationError as exc:
        console.print(f"[bold red]Error:[/bold red] Corrupt recording: {escape(str(exc))}")
        raise typer.Exit(code=1)

    request = transaction.request
    response = transaction.response

    console.print(f"\n[bold cyan]{transaction.id}[/bold cyan]")
    console.print(f"[dim]Recorded {transaction.recorded_at.isoformat()}[/dim]\n")

    console.print(f"[bold]Request:[/bold] {request.method} {escape(request.url)}")
    _render_headers(request.headers, console)
    _render_body(request.body, console)

    console.print(f"\n[bold]Response:[/bold] {response.status}")
    _render_headers(response.headers, console)
    _render_body(response.body, console)
