"""Cross-platform path handling using platformdirs.

Provides XDG-compliant paths with environment variable overrides.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal

from platformdirs import user_log_dir

logger = logging.getLogger(__name__)

APP_NAME = "docref"
APPAUTHOR: Literal[False] = False  # Avoid "CompanyName/AppName" nesting on Windows
LOG_FILENAME = "docref.log"


def _env_override(env_var: str) -> Path | None:
    """Check for environment variable override.

    Args:
        env_var: Environment variable name to check

    Returns:
        Path from environment variable if set, None otherwise
    """
    v = os.environ.get(env_var)
    return Path(v).expanduser() if v else None


def log_dir(*, ensure: bool = True) -> Path:
    """Get application log directory.

    Linux: ~/.local/state/docref/log
    macOS: ~/Library/Logs/docref
    Windows: C:\\Users\\<user>\\AppData\\Local\\docref\\Logs

    Override with DOCREF_LOG_DIR env var.

    Args:
        ensure: Create directory if it doesn't exist

    Returns:
        Path to log directory
    """
    d = _env_override("DOCREF_LOG_DIR") or Path(user_log_dir(APP_NAME, APPAUTHOR))
    if ensure:
        d.mkdir(parents=True, exist_ok=True)
    return d


def default_log_file() -> Path:
    """Log file used when --log is given without a configured log_file."""
    return log_dir() / LOG_FILENAME
