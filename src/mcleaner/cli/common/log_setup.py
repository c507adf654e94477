"""Logging configuration for the CLI."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_LOGGER_NAME = "mcleaner"


def configure_logging(explain: bool = False) -> None:
    """
    Route `mcleaner` log records to stderr through Rich.

    With `explain` the core's per-item reasoning (DEBUG) is shown;
    otherwise only warnings and errors are.
    """
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    logger = logging.getLogger(_LOGGER_NAME)
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if explain else logging.WARNING)
    logger.propagate = False
