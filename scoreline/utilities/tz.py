"""Timezone utilities.

Single source of truth for datetime parsing and formatting.
All datetimes handled by Scoreline are timezone-aware UTC.
"""

from datetime import UTC, datetime

__all__ = [
    "now_utc",
    "to_utc",
    "parse_event_date",
    "format_date",
]


def now_utc() -> datetime:
    """Get current time in UTC."""
    return datetime.now(UTC)


def to_utc(dt: datetime) -> datetime:
    """Convert any datetime to UTC.

    Naive datetimes are assumed to already be UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def parse_event_date(value) -> datetime | None:
    """Parse an ESPN date string (e.g. '2026-10-18T14:00Z').

    Returns:
        Aware UTC datetime, or None if missing or unparseable
    """
    if isinstance(value, datetime):
        return to_utc(value)
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    return to_utc(parsed)


def format_date(dt: datetime) -> str:
    """Format date for display (e.g., 'Oct 18, 2026')."""
    dt = to_utc(dt)
    return f"{dt:%b} {dt.day}, {dt.year}"
