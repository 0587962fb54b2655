"""Tournament/grouping hierarchy builder.

Places every flattened competition under

    TournamentNode (league or tournament name)
      -> GroupingNode (session, court, matchday)
        -> [(event, competition), ...]

Keys are pure functions of the tournament and grouping names, so
rebuilding from the same events yields identical keys and order.
"""

import logging
from collections.abc import Iterable, Mapping

from scoreline.core import (
    CompetitionRecord,
    EventRecord,
    GroupingItem,
    GroupingNode,
    LeagueDescriptor,
    TournamentNode,
)
from scoreline.utilities.tz import format_date

logger = logging.getLogger(__name__)

# ASCII unit separator; never appears in upstream names
KEY_SEPARATOR = "\x1f"

DEFAULT_TOURNAMENT_NAME = "Tournament"
DEFAULT_GROUPING_NAME = "Matches"


def _explicit_tournament_name(event: EventRecord) -> str | None:
    for field_name in ("tournament", "league"):
        value = event.raw.get(field_name)
        if isinstance(value, dict):
            value = value.get("name") or value.get("displayName")
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def tournament_name(event: EventRecord, league: LeagueDescriptor | None = None) -> str:
    """Tournament key for an event.

    Preference: explicit tournament/league name, event short name or
    name, formatted date, then "Tournament".
    """
    explicit = _explicit_tournament_name(event)
    if explicit:
        return explicit
    if league is not None and league.name:
        return league.name
    if event.short_name:
        return event.short_name
    if event.name:
        return event.name
    if event.date is not None:
        return format_date(event.date)
    return DEFAULT_TOURNAMENT_NAME


def grouping_name(event: EventRecord, competition: CompetitionRecord, qualify: bool = False) -> str:
    """Display name for the grouping a competition belongs to.

    With qualify, an explicit grouping name is prefixed with the event
    name so sessions of different events under one league stay apart.
    """
    if competition.grouping_name:
        label = event.short_name or event.name
        if qualify and label and label != competition.grouping_name:
            return f"{label} - {competition.grouping_name}"
        return competition.grouping_name
    return event.name or DEFAULT_GROUPING_NAME


def grouping_key(tournament: str, grouping: str) -> str:
    return f"{tournament}{KEY_SEPARATOR}{grouping}"


class GroupingBuilder:
    """Builds the two-level hierarchy from normalized events.

    Insertion order is preserved at every level: tournaments and
    groupings appear in order of first sighting, items in flattening
    order. Nothing is re-sorted here.
    """

    def __init__(self, leagues: Mapping[str, LeagueDescriptor] | None = None):
        """
        Args:
            leagues: League descriptors by slug. When given, events are
                grouped under their league's name.
        """
        self._leagues = dict(leagues or {})

    def build(self, events: Iterable[EventRecord]) -> list[TournamentNode]:
        tournaments: dict[str, TournamentNode] = {}
        groupings: dict[str, GroupingNode] = {}
        placed: dict[str, set[str]] = {}

        for event in events:
            league = self._leagues.get(event.league_slug)
            t_name = tournament_name(event, league)
            # League name stands in for the event's own tournament name
            qualify = league is not None and bool(league.name) and _explicit_tournament_name(event) is None
            tournament = tournaments.get(t_name)
            if tournament is None:
                tournament = TournamentNode(name=t_name, league=league)
                tournaments[t_name] = tournament

            for competition in event.competitions:
                g_name = grouping_name(event, competition, qualify)
                key = grouping_key(t_name, g_name)

                node = groupings.get(key)
                if node is None:
                    node = GroupingNode(key=key, display_name=g_name)
                    groupings[key] = node
                    placed[key] = set()
                    tournament.groupings.append(node)

                if competition.id in placed[key]:
                    logger.debug("[GROUPING] Competition %s already under %r", competition.id, key)
                    continue
                placed[key].add(competition.id)
                node.items.append(GroupingItem(event=event, competition=competition))

        return [t for t in tournaments.values() if t.groupings]
