"""Error formatting components for docref UI.

These components render resolution issues and build failures.
"""

from __future__ import annotations

from collections.abc import Sequence

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from docref.exceptions import BuildAbortedError, DocrefError
from docref.models import ResolutionIssue
from docref.ui.core import err_console


def print_issue_table(issues: Sequence[ResolutionIssue], title: str = "Link issues") -> None:
    """Print a summary table of resolution issues.

    Args:
        issues: Issues collected by the error reporter
        title: Table title
    """
    if not issues:
        return

    table = Table(title=f"[error]{title}[/]", show_header=True, header_style="bold")
    table.add_column("Location", style="path", overflow="fold")
    table.add_column("Kind", style="kind")
    table.add_column("Target", style="target", overflow="fold")
    table.add_column("Message", overflow="fold")

    for issue in issues:
        table.add_row(
            escape(issue.location),
            issue.kind.value,
            escape(issue.target or "-"),
            escape(issue.message),
        )

    err_console.print(table)


def print_build_error(error: DocrefError) -> None:
    """Print a docref error with its structured details.

    Example:
        >>> print_build_error(BuildAbortedError(issue))
        ╭─ Build aborted ─────────────────────────╮
        │ ✗ guides/a.md:3:5: No document declares │
        │   • kind: missing_reference             │
        ╰─────────────────────────────────────────╯
    """
    title = "Build aborted" if isinstance(error, BuildAbortedError) else type(error).__name__

    content = Text()
    content.append("✗ ", style="error")
    content.append(str(error), style="error")
    for key, value in error.details.items():
        content.append(f"\n  • {key}: {value}", style="dim")

    if isinstance(error, BuildAbortedError):
        content.append("\n\n")
        content.append("Hint: ", style="info")
        content.append("run with --no-strict to collect every issue", style="hint")

    err_console.print(
        Panel(
            content,
            title=f"[error]{title}[/]",
            border_style="red",
            padding=(0, 2),
        )
    )
