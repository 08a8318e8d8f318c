"""Simple message printing helpers for docref UI."""

from __future__ import annotations

from rich.markup import escape

from docref.ui.core import console, err_console


def print_step(step_num: int, total_steps: int, title: str) -> None:
    """Print a step header.

    Example:
        >>> print_step(1, 3, "Registering identities")
        Step 1/3: Registering identities
    """
    console.print(f"[step]Step {step_num}/{total_steps}:[/] {escape(title)}")


def print_success(message: str) -> None:
    """Print a success message with checkmark."""
    console.print(f"  [success]✓[/] {escape(message)}")


def print_error(message: str) -> None:
    """Print an error message with X."""
    console.print(f"  [error]✗[/] {escape(message)}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"  [warning]![/] {escape(message)}")


def print_info(message: str) -> None:
    """Print an info message.

    Example:
        >>> print_info("Found 12 content files")
          → Found 12 content files
    """
    console.print(f"  [info]→[/] {escape(message)}")


def fatal_error(message: str, hint: str | None = None) -> None:
    """Print a fatal error and an optional hint.

    Example:
        >>> fatal_error("Content root not found", "Pass CONTENT_ROOT or set content_root")
    """
    err_console.print(f"\n[error]Error:[/] {escape(message)}")
    if hint:
        err_console.print(f"[dim]Hint: {escape(hint)}[/]")
