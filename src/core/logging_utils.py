"""Logging configuration for the CLI."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_LOGGER_NAMES = ("cli", "core", "adapters")


def _close_handlers(logger: logging.Logger) -> None:
    """Detach and close all handlers currently bound to the logger."""

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def configure_logging(*, debug: bool, console: Console | None = None) -> RichHandler:
    """Route package loggers to stderr through Rich.

    Warnings and errors are always shown; `debug` lowers the threshold to
    DEBUG and adds httpx request logs. Calling it again replaces the handler.
    """

    level = logging.DEBUG if debug else logging.WARNING
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=debug,
        show_path=False,
        markup=False,
    )
    handler.setLevel(level)

    for name in _LOGGER_NAMES:
        logger = logging.getLogger(name)
        _close_handlers(logger)
        logger.setLevel(level)
        logger.propagate = False
        logger.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)
    return handler
