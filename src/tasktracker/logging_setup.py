"""Logging configuration: package log records rendered to stderr by Rich."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "tasktracker"


def setup_logging(level: int = logging.WARNING) -> None:
    """Send the package's log records to stderr through Rich.

    Safe to call more than once; the handler is replaced, not duplicated.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    for h in list(logger.handlers):
        if isinstance(h, RichHandler):
            logger.removeHandler(h)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setLevel(level)
    logger.addHandler(handler)
    logger.propagate = False
