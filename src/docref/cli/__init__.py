"""docref CLI built with Typer and Rich.

Commands:
- build: both phases, writes the rewritten content tree
- check: both phases, no writes, non-zero exit on any issue
- refs: registration phase only, lists the registry
"""

from __future__ import annotations

import sys

from docref.cli._app import BUILD_COMMANDS, INSPECT_COMMANDS, create_main_callback, make_app
from docref.cli._context import RuntimeContext, get_runtime_context
from docref.cli.commands import register_build_commands

app = make_app()
create_main_callback(app)
register_build_commands(app)


def main() -> int:
    """Main entry point for the CLI."""
    try:
        app()
        return 0
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 0


__all__ = [
    "app",
    "main",
    "RuntimeContext",
    "get_runtime_context",
    "BUILD_COMMANDS",
    "INSPECT_COMMANDS",
]

if __name__ == "__main__":
    sys.exit(main())
