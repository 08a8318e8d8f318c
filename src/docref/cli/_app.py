"""App configuration and the main callback for the docref CLI."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer

from docref.cli._context import RuntimeContext
from docref.config import DEFAULT_CONFIG_FILE
from docref.exceptions import ConfigurationError
from docref.ui import console

logger = logging.getLogger(__name__)

# =============================================================================
# Help Panel Names
# =============================================================================

BUILD_COMMANDS = "Build"
INSPECT_COMMANDS = "Inspect"


# =============================================================================
# Version Callback
# =============================================================================


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from docref import __version__

        console.print(f"[title]docref[/] {__version__}")
        raise typer.Exit()


# =============================================================================
# App Factory
# =============================================================================


MAIN_EPILOG = """
[bold cyan]Link tokens:[/]
  [green]\\[text](ref:getting-started)[/]         [dim]# page with globalReference: getting-started[/]
  [green]\\[text](ref:getting-started#install)[/] [dim]# section on that page[/]
  [green]\\[text](repo:cmd/main.go)[/]             [dim]# file in the source repository[/]

[bold cyan]Build mode:[/]
  DOCREF_ENV=production makes builds strict (first broken link fails the build).
  Override with [green]--strict/--no-strict[/] or DOCREF_STRICT.
"""


def make_app() -> typer.Typer:
    """Create and configure the main Typer application."""
    return typer.Typer(
        name="docref",
        help="Resolve cross-document reference tokens in a content-site build",
        epilog=MAIN_EPILOG,
        rich_markup_mode="rich",
        pretty_exceptions_enable=True,
        pretty_exceptions_show_locals=False,
        no_args_is_help=True,
        add_completion=False,
        context_settings={"help_option_names": ["-h", "--help"]},
    )


# =============================================================================
# Logging Setup Helper
# =============================================================================


def setup_logging(runtime: RuntimeContext, *, log: bool) -> None:
    """Configure logging based on options, environment and config."""
    from docref.env_settings import get_env_settings
    from docref.logging_setup import setup_logging as _setup_logging
    from docref.paths import default_log_file

    log_level: str | None = None
    try:
        log_level = get_env_settings().app.log_level
    except ValueError as e:
        logger.debug("Ignoring invalid LOG_LEVEL: %s", e)

    log_file: Path | None = None
    try:
        log_file = runtime.settings.log_file
    except ConfigurationError:
        pass  # Reported by the command that needs the settings
    if log and log_file is None:
        log_file = default_log_file()

    _setup_logging(verbose=runtime.verbose, log_level=log_level, log_file=log_file)


# =============================================================================
# Main Callback Factory
# =============================================================================


def create_main_callback(app: typer.Typer) -> None:
    """Register the main callback on the app."""

    @app.callback()
    def main_callback(
        ctx: typer.Context,
        version: Annotated[
            bool,
            typer.Option(
                "--version",
                "-V",
                callback=version_callback,
                is_eager=True,
                help="Show version and exit.",
            ),
        ] = False,
        verbose: Annotated[
            bool,
            typer.Option(
                "--verbose",
                "-v",
                help="Enable verbose (DEBUG) logging.",
            ),
        ] = False,
        config: Annotated[
            Path,
            typer.Option(
                "--config",
                "-c",
                help="Path to docref.yaml.",
                exists=False,  # Defaults apply when the file is missing
            ),
        ] = DEFAULT_CONFIG_FILE,
        log: Annotated[
            bool,
            typer.Option(
                "--log",
                help="Also write a DEBUG log file (log_file from config or the user log dir).",
            ),
        ] = False,
    ) -> None:
        """Resolve ref: and repo: link tokens across a documentation tree.

        [bold]Quick Start:[/]
          docref check docs/        Report broken references
          docref build docs/ -o out Rewrite links into out/
          docref refs docs/         List registered identifiers
        """
        runtime = RuntimeContext(config_path=config, verbose=verbose)
        ctx.obj = runtime
        setup_logging(runtime, log=log)
