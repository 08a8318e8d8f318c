"""Logging for docref builds.

The console carries build warnings (broken references in permissive mode) and
anything louder. ``--verbose`` drops it to DEBUG. An optional log file always
records DEBUG, tagged with the worker thread that resolved each file.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "docref"

FILE_FORMAT = "%(asctime)s | %(levelname)-5s | %(threadName)-12s | [%(name)s] %(message)s"
FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def console_level(*, verbose: bool = False, log_level: str | None = None) -> int:
    """Console threshold: DEBUG when verbose, else LOG_LEVEL but never below WARNING."""
    if verbose:
        return logging.DEBUG
    requested = logging.getLevelName((log_level or "WARNING").upper())
    if not isinstance(requested, int):
        requested = logging.WARNING
    return max(requested, logging.WARNING)


def _console_handler(level: int, *, rich_console: bool) -> logging.Handler:
    handler: logging.Handler
    if rich_console:
        handler = RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_path=False,
            rich_tracebacks=True,
            markup=False,  # messages quote raw links like [text](ref:x)
        )
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    handler.setLevel(level)
    return handler


def _file_handler(log_file: Path) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATEFMT))
    return handler


def setup_logging(
    *,
    verbose: bool = False,
    log_level: str | None = None,
    log_file: Path | str | None = None,
    rich_console: bool = True,
) -> logging.Logger:
    """
    Configure the "docref" logger. Safe to call more than once.

    Args:
        verbose: Show DEBUG output on the console
        log_level: LOG_LEVEL value; can only make the console quieter than WARNING
        log_file: Optional file that receives every DEBUG record
        rich_console: Use RichHandler instead of a plain stream handler

    Returns:
        The "docref" logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    level = console_level(verbose=verbose, log_level=log_level)
    logger.addHandler(_console_handler(level, rich_console=rich_console))

    if log_file:
        logger.addHandler(_file_handler(Path(log_file)))
        level = logging.DEBUG
    logger.setLevel(level)
    return logger
