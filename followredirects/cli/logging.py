"""
CLI logging setup.

The library only creates module loggers under `followredirects`; the CLI is
the one place that attaches a handler to them.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass

from rich.console import Console
from rich.logging import RichHandler

_LOGGER_NAME = "followredirects"


@dataclass(frozen=True, slots=True)
class LoggingState:
    level: int
    handlers: list[logging.Handler]
    propagate: bool


def _level_for(verbosity: int, quiet: bool) -> int:
    if quiet:
        return logging.ERROR
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def configure_logging(*, verbosity: int, quiet: bool = False) -> LoggingState:
    """Route package logs to stderr and return what was there before."""
    logger = logging.getLogger(_LOGGER_NAME)
    previous = LoggingState(
        level=logger.level,
        handlers=list(logger.handlers),
        propagate=logger.propagate,
    )
    handler = RichHandler(
        console=Console(file=sys.stderr, force_terminal=False),
        show_path=False,
        show_time=verbosity >= 2,
        markup=False,
    )
    logger.handlers = [handler]
    logger.setLevel(_level_for(verbosity, quiet))
    logger.propagate = False
    return previous


def restore_logging(state: LoggingState) -> None:
    logger = logging.getLogger(_LOGGER_NAME)
    for handler in logger.handlers:
        if handler not in state.handlers:
            handler.close()
    logger.handlers = state.handlers
    logger.setLevel(state.level)
    logger.propagate = state.propagate
