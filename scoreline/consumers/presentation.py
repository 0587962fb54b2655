"""Presentation filtering and ordering.

Applied last, over the built hierarchy:
- keep events dated within [now - past, now + ahead], inclusive
- drop groupings and tournaments left empty
- tournaments with a live competition first, stable otherwise
"""

from dataclasses import replace
from datetime import datetime, timedelta

from scoreline.core import GroupingNode, TournamentNode
from scoreline.utilities.tz import now_utc, to_utc

DEFAULT_DAYS_PAST = 4
DEFAULT_DAYS_AHEAD = 8


def in_window(
    when: datetime | None,
    now: datetime | None = None,
    days_past: int = DEFAULT_DAYS_PAST,
    days_ahead: int = DEFAULT_DAYS_AHEAD,
) -> bool:
    """Whether a date falls inside the display window. None is outside."""
    if when is None:
        return False
    now = to_utc(now) if now is not None else now_utc()
    when = to_utc(when)
    return now - timedelta(days=days_past) <= when <= now + timedelta(days=days_ahead)


def filter_window(
    tournaments: list[TournamentNode],
    now: datetime | None = None,
    days_past: int = DEFAULT_DAYS_PAST,
    days_ahead: int = DEFAULT_DAYS_AHEAD,
) -> list[TournamentNode]:
    """Return a filtered copy of the hierarchy; input is not modified."""
    now = now or now_utc()
    result = []
    for tournament in tournaments:
        groupings = []
        for grouping in tournament.groupings:
            items = [
                item
                for item in grouping.items
                if in_window(item.event.date, now, days_past, days_ahead)
            ]
            if items:
                groupings.append(GroupingNode(key=grouping.key, display_name=grouping.display_name, items=items))
        if groupings:
            result.append(replace(tournament, groupings=groupings))
    return result


def sort_live_first(tournaments: list[TournamentNode]) -> list[TournamentNode]:
    """Tournaments with an in-progress competition first.

    sorted() is stable, so relative order is kept within each group.
    """
    return sorted(tournaments, key=lambda t: not t.has_live)


def present(
    tournaments: list[TournamentNode],
    now: datetime | None = None,
    days_past: int = DEFAULT_DAYS_PAST,
    days_ahead: int = DEFAULT_DAYS_AHEAD,
) -> list[TournamentNode]:
    """Window filter, then live-first ordering."""
    return sort_live_first(filter_window(tournaments, now, days_past, days_ahead))
