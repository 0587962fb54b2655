"""Logging setup."""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# Chatty third-party loggers
_QUIET_LOGGERS = ("httpx", "httpcore")


class _ScorelineHandler(logging.StreamHandler):
    """Console handler installed by setup_logging."""


def setup_logging(level: str | int = "INFO") -> None:
    """Configure root logging with a single console handler.

    Safe to call more than once; handlers installed by an earlier call
    are replaced, handlers installed by others are left alone.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    for existing in list(root.handlers):
        if isinstance(existing, _ScorelineHandler):
            root.removeHandler(existing)

    handler = _ScorelineHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
