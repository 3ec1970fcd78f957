"""Diagnostic logging for the ``too`` package.

Diagnostics go to stderr through a ``RichHandler`` so stdout only ever
carries rendered results.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "too"

_LEVELS = {0: logging.WARNING, 1: logging.INFO, 2: logging.DEBUG}


def level_for(verbosity: int) -> int:
    if verbosity <= 0:
        return logging.WARNING
    return _LEVELS.get(verbosity, logging.DEBUG)


def setup_logging(verbosity: int = 0, console: Console | None = None) -> logging.Logger:
    """Install a single stderr handler on the ``too`` logger.

    Args:
        verbosity: number of ``-v`` flags; 3 or more also shows source locations
        console: console to write to (defaults to a fresh stderr console)

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, "_too_handler", False):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=verbosity >= 3,
        markup=False,
        rich_tracebacks=False,
    )
    handler._too_handler = True  # type: ignore[attr-defined]
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    logger.addHandler(handler)
    logger.setLevel(level_for(verbosity))
    logger.propagate = False
    return logger
