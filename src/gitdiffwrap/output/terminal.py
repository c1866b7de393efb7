"""Rich terminal rendering of collected change records."""

from __future__ import annotations

from typing import Optional, Sequence

from rich.console import Console
from rich.table import Table
from rich.text import Text

from gitdiffwrap.git.models import DiffRecord
from gitdiffwrap.staging.materialize import MaterializeResult

_STATUS_STYLE = {
    "A": "bold green",
    "D": "bold red",
    "M": "bold yellow",
    "R": "bold cyan",
    "C": "bold cyan",
    "T": "bold magenta",
    "U": "bold white on red",
}


def _short(object_hash: str, width: int = 10) -> str:
    return object_hash[:width]


def render_records(records: Sequence[DiffRecord], console: Optional[Console] = None) -> None:
    """Print collected records as a table."""
    console = console or Console()

    if not records:
        console.print("[dim]No changes.[/dim]")
        return

    table = Table(show_lines=False, border_style="dim")
    table.add_column("St", justify="center", width=4)
    table.add_column("Path", style="magenta")
    table.add_column("Modes", style="dim")
    table.add_column("Hashes", style="green")

    for rec in records:
        status = Text(f"{rec.status}{rec.score or ''}", style=_STATUS_STYLE.get(rec.status, ""))
        path = rec.src_path if not rec.is_rename else f"{rec.src_path} => {rec.dst_path}"
        table.add_row(
            status,
            path,
            f"{rec.src_mode:06o} {rec.dst_mode:06o}",
            f"{_short(rec.src_hash)} {_short(rec.dst_hash)}",
        )

    console.print(table)
    console.print(f"[dim]{len(records)} changed file(s)[/dim]")


def render_summary(result: MaterializeResult, console: Console) -> None:
    console.print(f"[dim]Changed files:[/dim]  {result.total}")
    console.print(f"[dim]Staged:[/dim]         {result.placed}")
    console.print(f"[dim]Unchanged:[/dim]      {len(result.skipped)}")
    if result.failed:
        console.print(f"[yellow]Not retrieved:[/yellow]  {len(result.failed)}")
