"""Core console configuration and theme for docref UI.

This module provides the Rich console instances and theme that the other
UI modules build upon.
"""

from __future__ import annotations

from rich.console import Console
from rich.theme import Theme

# =============================================================================
# Theme Configuration
# =============================================================================

DOCREF_THEME = Theme(
    {
        # Status colors
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "red bold",
        # Text styles
        "step": "bold cyan",
        "title": "bold white",
        "dim": "dim",
        "hint": "dim italic",
        # Additional semantic styles
        "path": "cyan",
        "identifier": "bold magenta",
        "target": "yellow",
        "kind": "yellow",
    }
)

# =============================================================================
# Console Instances
# =============================================================================

# Primary console for normal output
console = Console(theme=DOCREF_THEME, stderr=False)

# Error console for stderr output
err_console = Console(theme=DOCREF_THEME, stderr=True)
