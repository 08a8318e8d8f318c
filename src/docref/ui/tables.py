"""Table formatting components for docref UI."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from rich.markup import escape
from rich.table import Table

from docref.models import RegistrationRecord
from docref.ui.core import console

if TYPE_CHECKING:
    from docref.build import BuildResult


def print_registry_table(records: Sequence[RegistrationRecord], title: str = "Registry") -> None:
    """Print the registered identifiers.

    Example:
        >>> print_registry_table(registry.all())
        ┏━━━━━━━━━━━━┳━━━━━━━━━━━━━━━┳━━━━━━━━━┳━━━━━━━━━━━━━━━━━┓
        ┃ Identifier ┃ Path          ┃ Title   ┃ Source          ┃
        ┡━━━━━━━━━━━━╇━━━━━━━━━━━━━━━╇━━━━━━━━━╇━━━━━━━━━━━━━━━━━┩
        │ start      │ /guides/a     │ Start   │ guides/a.md     │
        └────────────┴───────────────┴─────────┴─────────────────┘
    """
    if not records:
        console.print("[dim]No global identifiers registered[/]")
        return

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Identifier", style="identifier")
    table.add_column("Path", style="path")
    table.add_column("Title")
    table.add_column("Source", style="dim", overflow="fold")

    for record in records:
        table.add_row(
            escape(record.identifier),
            escape(record.canonical_path),
            escape(record.title or "-"),
            escape(str(record.source_file)),
        )

    console.print(table)


def print_build_summary(result: BuildResult, *, wrote: bool) -> None:
    """Print a two-column summary of a build run."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="dim")
    table.add_column("Value")

    table.add_row("Files", str(len(result.files)))
    table.add_row("Links rewritten", str(result.rewritten))
    if wrote:
        table.add_row("Files written", str(len(result.written)))
    if result.failed:
        table.add_row("Unreadable files", f"[error]{len(result.failed)}[/]")
    issues = len(result.issues)
    table.add_row("Issues", f"[warning]{issues}[/]" if issues else "[success]0[/]")

    console.print(table)
