"""Logging configuration for Jobboard.

Board commands print their results (JSON) on stdout, so every log line
goes to a single stderr handler on the ``jobboard`` logger and never
reaches the root logger once configured.
"""

import logging
import sys
from typing import TextIO

LOGGER_NAME = "jobboard"

# Name of the handler installed by configure_logging
HANDLER_NAME = "jobboard-console"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _resolve_level(level: str | int | None) -> int:
    if level is None:
        return logging.INFO
    if isinstance(level, int):
        return level
    return LEVELS.get(level.upper(), logging.INFO)


def _console_handler(logger: logging.Logger) -> logging.Handler | None:
    for handler in logger.handlers:
        if handler.get_name() == HANDLER_NAME:
            return handler
    return None


def configure_logging(
    level: str | int | None = None,
    stream: TextIO | None = None,
    format_string: str = LOG_FORMAT,
    date_format: str = DATE_FORMAT,
) -> logging.Logger:
    """Configure and return the ``jobboard`` logger.

    Calling it again only changes the level (and the stream, when one is
    given); it never stacks a second handler.

    Args:
        level: Level name or number. Unknown names and None mean INFO.
        stream: Where log lines go; defaults to stderr.
        format_string: Format string for log messages.
        date_format: Format string for timestamps.

    Returns:
        The application logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    log_level = _resolve_level(level)
    logger.setLevel(log_level)

    handler = _console_handler(logger)
    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(format_string, datefmt=date_format))
        logger.addHandler(handler)
        logger.propagate = False
    elif stream is not None and isinstance(handler, logging.StreamHandler):
        handler.setStream(stream)

    handler.setLevel(log_level)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a child logger such as ``jobboard.board.columns``.

    Names that already carry the ``jobboard.`` prefix are used as is.
    """
    if name == LOGGER_NAME or name.startswith(f"{LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def reset_logging() -> None:
    """Undo configure_logging (used between tests)."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
