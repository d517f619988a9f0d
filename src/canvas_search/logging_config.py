"""Logging configuration for canvas-search.

The package disables its own loguru messages on import; applications opt
in by calling configure_logging().
"""

import sys
from typing import TextIO

from loguru import logger


def configure_logging(*, verbose: bool = False, sink: TextIO | None = None) -> None:
    """Enable canvas-search logging and send it to stderr (or `sink`)."""
    logger.remove()
    logger.enable("canvas_search")
    level = "DEBUG" if verbose else "INFO"
    logger.add(sink or sys.stderr, level=level, format="{level.icon} {message}")
