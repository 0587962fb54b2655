"""Utilities - logging and datetime helpers."""

from scoreline.utilities.logging import setup_logging
from scoreline.utilities.tz import format_date, now_utc, parse_event_date

__all__ = [
    "format_date",
    "now_utc",
    "parse_event_date",
    "setup_logging",
]
