"""Logging setup for the pkg-exports command line."""

from __future__ import annotations

import logging

_LOGGER_NAME = "pkgexports"


def configure_logging(*, verbose: bool = False) -> logging.Logger:
    """Send package log records to stderr; DEBUG when ``verbose``."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)

    # Reset handlers to avoid duplicate output when the CLI runs repeatedly in-process.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[pkg-exports] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)
    return logger
