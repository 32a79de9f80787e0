"""Logging setup: one shared set of handlers for every named logger.

Screen output is colored by level unless NO_COLOR is set or stderr is not
a terminal (FORCE_COLOR overrides both). Debug mode comes from the DEBUG
environment variable or from `--debug LOGFILE`.
"""

import logging
import os
import sys
from typing import TextIO

__all__ = [
    "LogObjects",
    "get_logger",
    "init_logger",
    "is_debug",
    "make_style",
    "set_debug",
    "should_colorize",
]

RESET = "\x1b[0m"

# (foreground, attribute) per level
LEVEL_STYLES = {
    logging.WARNING: ("33", "2"),
    logging.ERROR: ("31", "2"),
    logging.CRITICAL: ("31", "1"),
}


class LogObjects:
    """Handlers shared by every logger, and the debug switch."""

    handlers: list[logging.Handler] = []
    debug: bool = bool(os.environ.get("DEBUG"))


def is_debug() -> bool:
    """Tell if debug mode is on."""
    return LogObjects.debug


def set_debug(value: bool) -> None:
    """Set the debug state (affects loggers created afterwards)."""
    LogObjects.debug = value


def should_colorize(stream: TextIO | None = None) -> bool:
    """Tell if ANSI colors should be written to `stream` (stderr by default)."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True
    if stream is None:
        stream = sys.stderr
    return hasattr(stream, "isatty") and stream.isatty()


def make_style(*codes: str) -> tuple[str, str]:
    """Return the (prefix, suffix) pair wrapping text in the given SGR codes."""
    if not codes:
        return ("", RESET)
    return (f"\x1b[{';'.join(codes)}m", RESET)


class ScreenLogFormatter(logging.Formatter):
    """Colors warnings and errors; verbose format in debug mode."""

    def __init__(self, colored: bool) -> None:
        super().__init__()
        fmt = r"%(name)12s - %(message)s // %(filename)s:%(lineno)d" if is_debug() else r"%(message)s"
        self._formatters = {}
        for level in (logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL):
            prefix, suffix = make_style(*LEVEL_STYLES[level]) if colored and level in LEVEL_STYLES else ("", "")
            self._formatters[level] = logging.Formatter(prefix + fmt + suffix)

    def format(self, record: logging.LogRecord) -> str:
        return self._formatters.get(record.levelno, self._formatters[logging.INFO]).format(record)


def init_logger(filename: str | None = None, force_debug: bool = False) -> None:
    """(Re)build the shared handlers: colored stderr, plus `filename` if given.

    `force_debug` switches debug mode on (as `--debug` does).
    """
    if force_debug:
        set_debug(True)

    LogObjects.handlers.clear()
    if filename:
        file_handler = logging.FileHandler(filename)
        file_handler.setFormatter(logging.Formatter(fmt=r"%(asctime)s [%(levelname)s] %(name)s :: %(message)s :: %(filename)s:%(lineno)d"))
        LogObjects.handlers.append(file_handler)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(ScreenLogFormatter(should_colorize()))
    LogObjects.handlers.append(stream_handler)


def get_logger(name: str = "staccato", level: int | None = None) -> logging.Logger:
    """Return the logger `name`, attached to the shared handlers.

    The level is DEBUG in debug mode, WARNING otherwise, unless `level` is given.
    """
    logger = logging.getLogger(name)
    if level is None:
        logger.setLevel(logging.DEBUG if is_debug() else logging.WARNING)
    else:
        logger.setLevel(level)
    logger.propagate = False
    for handler in LogObjects.handlers:
        if handler not in logger.handlers:
            logger.addHandler(handler)
    logger.debug('Logger "%s" initialized', name)
    return logger
