"""Logging setup for the command line.

Library modules only ever call ``logging.getLogger(__name__)``; handlers
are installed here, once, by the CLI.  The two diagnostic tiers are the
standard levels: verbose is ``INFO``, debug is ``DEBUG``.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

VERBOSITY_LEVELS = {1: logging.INFO, 2: logging.DEBUG}


def level_for(verbosity: int, default: str = "WARNING") -> int:
    """Map a ``-v`` count onto a logging level, else fall back to *default*."""
    if verbosity > 0:
        return VERBOSITY_LEVELS[min(verbosity, 2)]
    level = logging.getLevelName(default.upper())
    return level if isinstance(level, int) else logging.WARNING


def configure_logging(level: int, console: Console | None = None) -> None:
    """Route ``distsum.*`` loggers to a Rich handler on stderr."""
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
    )
    package_logger = logging.getLogger("distsum")
    for existing in list(package_logger.handlers):
        if isinstance(existing, RichHandler):
            package_logger.removeHandler(existing)
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
