"""Competition flattening for ESPN scoreboard events.

ESPN events come in three shapes that co-exist across sports:

    GROUPED  tennis-style, matches organized by session/court:
             event.groupings[].competitions[]
    FLAT     team-sport style: event.competitions[]
    BARE     no competitions at all; the event itself is the match

The shape is detected once per event and exactly one flattener runs,
so an event is never counted under two rules.
"""

import logging
import math
from collections.abc import Callable
from enum import Enum

from scoreline.core import (
    CompetitionRecord,
    CompetitionStatus,
    CompetitorRecord,
    PeriodScore,
    SchemaMismatch,
)
from scoreline.utilities.tz import parse_event_date

logger = logging.getLogger(__name__)

VALID_STATES = {"pre", "in", "post"}


class EventShape(Enum):
    GROUPED = "grouped"
    FLAT = "flat"
    BARE = "bare"


def _non_empty_list(value) -> bool:
    return isinstance(value, list) and len(value) > 0


def detect_shape(event: dict) -> EventShape:
    """Pick the flattening rule for an event (groupings > competitions > bare)."""
    if _non_empty_list(event.get("groupings")):
        return EventShape.GROUPED
    if _non_empty_list(event.get("competitions")):
        return EventShape.FLAT
    return EventShape.BARE


# =============================================================================
# Field parsers
# =============================================================================


def parse_status(data: dict | None) -> CompetitionStatus:
    """Parse an ESPN status block ({type: {state, shortDetail, detail}})."""
    if not isinstance(data, dict):
        return CompetitionStatus(state="pre")
    type_data = data.get("type") or {}
    state = type_data.get("state", "pre")
    if state not in VALID_STATES:
        state = "pre"
    label = type_data.get("shortDetail") or type_data.get("detail") or type_data.get("description")
    return CompetitionStatus(state=state, label=label or "Scheduled")


def _to_float(value) -> float | None:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _parse_score(value) -> str | None:
    """Scores arrive as '6', 6 or {'value': 6.0, 'displayValue': '6'}."""
    if value is None or value == "":
        return None
    if isinstance(value, dict):
        display = value.get("displayValue")
        if display is not None:
            return str(display)
        value = value.get("value")
        if value is None:
            return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def _display_name(data: dict) -> str:
    """Player, doubles roster or team display name."""
    for key in ("athlete", "roster", "team"):
        nested = data.get(key)
        if isinstance(nested, dict) and nested.get("displayName"):
            return nested["displayName"]
    return data.get("displayName") or data.get("name") or "Unknown"


def _headshot(data: dict) -> str | None:
    athlete = data.get("athlete")
    if not isinstance(athlete, dict):
        return None
    headshot = athlete.get("headshot")
    if isinstance(headshot, dict):
        return headshot.get("href")
    return headshot or None


def parse_competitor(data: dict, position: int = 0) -> CompetitorRecord:
    """Parse one competitor.

    is_home is true only for homeAway == "home"; everything else is away.
    """
    if not isinstance(data, dict):
        raise SchemaMismatch(f"competitor is {type(data).__name__}, expected dict")

    competitor_id = data.get("id")
    if competitor_id in (None, ""):
        nested = data.get("athlete") or data.get("team") or {}
        competitor_id = nested.get("id") if isinstance(nested, dict) else None
    if competitor_id in (None, ""):
        competitor_id = f"competitor-{position}"

    period_scores = []
    for line in data.get("linescores") or []:
        if isinstance(line, dict):
            period_scores.append(
                PeriodScore(value=_to_float(line.get("value")), is_winner=bool(line.get("winner")))
            )

    return CompetitorRecord(
        id=str(competitor_id),
        display_name=_display_name(data),
        is_home=data.get("homeAway") == "home",
        score=_parse_score(data.get("score")),
        is_winner=bool(data.get("winner")),
        period_scores=period_scores,
        headshot=_headshot(data),
    )


def parse_broadcasts(broadcasts) -> list[str]:
    """Flatten ESPN broadcast formats to unique network names.

    Handles:
    - String: "ESPN"
    - Scoreboard format: {"market": "national", "names": ["ESPN", "ESPN+"]}
    - Schedule format: {"media": {"shortName": "ESPN"}}
    """
    names: list[str] = []
    if not isinstance(broadcasts, list):
        return names
    for broadcast in broadcasts:
        if isinstance(broadcast, str):
            candidates = [broadcast]
        elif isinstance(broadcast, dict):
            candidates = list(broadcast.get("names") or [])
            media = broadcast.get("media")
            if isinstance(media, dict) and media.get("shortName"):
                candidates.append(media["shortName"])
        else:
            continue
        for name in candidates:
            if isinstance(name, str) and name and name not in names:
                names.append(name)
    return names


def _round_label(data: dict) -> str | None:
    round_data = data.get("round")
    if isinstance(round_data, dict):
        return round_data.get("displayName") or round_data.get("name")
    return None


def _odds_list(data: dict) -> list:
    odds = data.get("odds")
    return odds if isinstance(odds, list) else []


# =============================================================================
# Competition builders
# =============================================================================


class _IdAllocator:
    """Deterministic ids for competitions missing one upstream.

    The first synthesized competition takes the event id, later ones
    get a positional suffix so ids stay unique within the cycle.
    """

    def __init__(self, event_id: str):
        self._event_id = event_id
        self._count = 0

    def next(self) -> str:
        self._count += 1
        if self._count == 1:
            return self._event_id
        return f"{self._event_id}-{self._count}"


def _parse_competitors(items) -> list[CompetitorRecord]:
    if not isinstance(items, list):
        return []
    competitors = []
    for position, item in enumerate(items):
        if not isinstance(item, dict):
            logger.debug("[ESPN_FLATTEN] Skipping competitor of type %s", type(item).__name__)
            continue
        competitors.append(parse_competitor(item, position))
    return competitors


def build_competition(
    data: dict,
    event: dict,
    ids: _IdAllocator,
    grouping_name: str | None = None,
) -> CompetitionRecord:
    """Normalize an upstream competition dict.

    Missing fields default to the owning event's values.
    """
    if not isinstance(data, dict):
        raise SchemaMismatch(f"competition is {type(data).__name__}, expected dict")

    competition_id = data.get("id")
    competition_id = str(competition_id) if competition_id not in (None, "") else ids.next()

    start = parse_event_date(data.get("startDate") or data.get("date") or event.get("date"))
    status = parse_status(data.get("status") or event.get("status"))
    broadcasts = parse_broadcasts(data.get("broadcasts")) or parse_broadcasts(data.get("geoBroadcasts"))

    return CompetitionRecord(
        id=competition_id,
        start_time=start,
        status=status,
        competitors=_parse_competitors(data.get("competitors")),
        broadcasts=broadcasts,
        round_label=_round_label(data),
        grouping_name=grouping_name,
        odds_payload=_odds_list(data),
    )


def synthesize_competition(
    event: dict,
    ids: _IdAllocator,
    broadcasts: list[str] | None = None,
    grouping_name: str | None = None,
) -> CompetitionRecord:
    """Build the single competition of an event that has none upstream."""
    return CompetitionRecord(
        id=ids.next(),
        start_time=parse_event_date(event.get("date")),
        status=parse_status(event.get("status")),
        competitors=_parse_competitors(event.get("competitors")),
        broadcasts=broadcasts if broadcasts is not None else parse_broadcasts(event.get("broadcasts")),
        round_label=_round_label(event),
        grouping_name=grouping_name,
        odds_payload=_odds_list(event),
    )


def grouping_display_name(grouping: dict) -> str | None:
    """Name of a grouping ({grouping: {displayName}} or flat displayName)."""
    nested = grouping.get("grouping")
    if isinstance(nested, dict) and nested.get("displayName"):
        return nested["displayName"]
    return grouping.get("displayName") or None


def _grouping_broadcasts(grouping: dict) -> list[str]:
    names = parse_broadcasts(grouping.get("broadcasts"))
    nested = grouping.get("grouping")
    if not names and isinstance(nested, dict):
        names = parse_broadcasts(nested.get("broadcasts"))
    return names


def _build_each(
    items: list,
    event: dict,
    ids: _IdAllocator,
    grouping_name: str | None = None,
) -> list[CompetitionRecord]:
    """Build competitions one by one; a malformed entry drops only itself."""
    competitions = []
    for item in items:
        try:
            competitions.append(build_competition(item, event, ids, grouping_name=grouping_name))
        except (SchemaMismatch, KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("[ESPN_FLATTEN] Skipping competition in event %s: %s", event.get("id"), e)
    return competitions


def _flatten_grouped(event: dict, ids: _IdAllocator) -> list[CompetitionRecord]:
    competitions = []
    for grouping in event["groupings"]:
        if not isinstance(grouping, dict):
            continue
        name = grouping_display_name(grouping)
        items = grouping.get("competitions")
        if isinstance(items, list) and items:
            competitions.extend(_build_each(items, event, ids, grouping_name=name))
        else:
            competitions.append(
                synthesize_competition(
                    event,
                    ids,
                    broadcasts=_grouping_broadcasts(grouping) or None,
                    grouping_name=name,
                )
            )
    return competitions


def _flatten_flat(event: dict, ids: _IdAllocator) -> list[CompetitionRecord]:
    return _build_each(event["competitions"], event, ids)


def _flatten_bare(event: dict, ids: _IdAllocator) -> list[CompetitionRecord]:
    return [synthesize_competition(event, ids)]


FLATTENERS: dict[EventShape, Callable[[dict, _IdAllocator], list[CompetitionRecord]]] = {
    EventShape.GROUPED: _flatten_grouped,
    EventShape.FLAT: _flatten_flat,
    EventShape.BARE: _flatten_bare,
}


def flatten_event(event: dict) -> list[CompetitionRecord]:
    """Expand one raw event into its competitions.

    Raises:
        SchemaMismatch: if the event has no id; callers drop the event.
            Malformed competitions are skipped individually.
    """
    event_id = event.get("id")
    if event_id in (None, ""):
        raise SchemaMismatch("event has no id")

    shape = detect_shape(event)
    competitions = FLATTENERS[shape](event, _IdAllocator(str(event_id)))

    # Upstream occasionally repeats a match across groupings
    unique: list[CompetitionRecord] = []
    seen: set[str] = set()
    for competition in competitions:
        if competition.id in seen:
            logger.debug("[ESPN_FLATTEN] Duplicate competition %s in event %s", competition.id, event_id)
            continue
        seen.add(competition.id)
        unique.append(competition)
    return unique
