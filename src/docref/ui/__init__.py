"""docref UI - Rich console output components.

Modules:
    core: Console instances and theme
    messages: Simple print helpers (success, error, warning, info)
    tables: Registry listing and build summary tables
    errors: Issue tables and build error panels

Usage:
    from docref.ui import console, print_success
    from docref.ui.tables import print_registry_table
"""

from __future__ import annotations

from docref.ui.core import DOCREF_THEME, console, err_console
from docref.ui.errors import print_build_error, print_issue_table
from docref.ui.messages import (
    fatal_error,
    print_error,
    print_info,
    print_step,
    print_success,
    print_warning,
)
from docref.ui.tables import print_build_summary, print_registry_table

__all__ = [
    # Core
    "DOCREF_THEME",
    "console",
    "err_console",
    # Messages
    "print_step",
    "print_success",
    "print_error",
    "print_warning",
    "print_info",
    "fatal_error",
    # Tables
    "print_registry_table",
    "print_build_summary",
    # Errors
    "print_issue_table",
    "print_build_error",
]
