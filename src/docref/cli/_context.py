"""Runtime context for CLI commands.

The RuntimeContext is initialized once in the main callback and is
available to all commands via ctx.obj. It carries the global flags and
loads settings lazily, so commands that fail on bad configuration report
it where the configuration is actually needed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from docref.config import Settings, load_settings

logger = logging.getLogger(__name__)


@dataclass
class RuntimeContext:
    """Typed runtime context available to all commands via ctx.obj.

    Example:
        @app.command()
        def my_command(ctx: typer.Context) -> None:
            runtime = get_runtime_context(ctx.obj)
            settings = runtime.settings_with(strict_mode=True)
    """

    config_path: Path
    verbose: bool = False
    _settings: Settings | None = field(default=None, repr=False)

    @property
    def settings(self) -> Settings:
        """Get or load settings (lazy-loaded).

        Raises:
            ConfigurationError: If docref.yaml or the environment is invalid
        """
        if self._settings is None:
            self._settings = load_settings(self.config_path)
            logger.debug("Settings loaded from %s", self.config_path)
        return self._settings

    def settings_with(self, **overrides: Any) -> Settings:
        """Settings with command-line overrides applied; None values are ignored."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self.settings, **changes) if changes else self.settings


def get_runtime_context(ctx_obj: object) -> RuntimeContext:
    """Extract RuntimeContext from typer context object.

    Raises:
        TypeError: If ctx_obj is not a RuntimeContext
    """
    if isinstance(ctx_obj, RuntimeContext):
        return ctx_obj

    raise TypeError(
        f"Expected RuntimeContext, got {type(ctx_obj).__name__}. "
        "Ensure the main callback initializes ctx.obj properly."
    )
