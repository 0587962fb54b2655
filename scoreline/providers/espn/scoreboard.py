"""Scoreboard normalization for ESPN provider.

Scoreboard responses are {"events": [...]} for most sports, a bare list
for some, and an error for others. Every shape collapses to an ordered
list of EventRecords; a failure only ever empties its own league.
"""

import logging
from collections.abc import Callable

from scoreline.core import EventRecord, JsonGateway, LeagueDescriptor, SchemaMismatch
from scoreline.providers.espn.competitions import flatten_event, parse_status
from scoreline.utilities.tz import parse_event_date

logger = logging.getLogger(__name__)


def extract_events(payload) -> list:
    """Pull the raw event list out of a scoreboard payload.

    A list is used as-is; a dict yields its "events" list; anything
    else (None, scalars, non-list events) yields [].
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        events = payload.get("events")
        if isinstance(events, list):
            return events
    return []


def build_event_record(data: dict, league_slug: str) -> EventRecord:
    """Normalize one raw event and flatten its competitions.

    Raises:
        SchemaMismatch: if the event cannot be normalized
    """
    if not isinstance(data, dict):
        raise SchemaMismatch(f"event is {type(data).__name__}, expected dict")

    competitions = flatten_event(data)
    name = data.get("name") or ""
    return EventRecord(
        id=str(data["id"]),
        league_slug=league_slug,
        date=parse_event_date(data.get("date")),
        name=name,
        short_name=data.get("shortName") or name,
        status=parse_status(data.get("status")),
        competitions=competitions,
        raw=data,
    )


def normalize_events(payload, league_slug: str) -> list[EventRecord]:
    """Normalize a scoreboard payload, preserving upstream order.

    Events that fail to parse are skipped individually.
    """
    records = []
    for data in extract_events(payload):
        try:
            records.append(build_event_record(data, league_slug))
        except (SchemaMismatch, KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("[ESPN_SCOREBOARD] Skipping event in %s: %s", league_slug, e)
    return records


class ScoreboardNormalizer:
    """Fetches and normalizes one league's scoreboard."""

    def __init__(self, gateway: JsonGateway, url_for: Callable[[str], str]):
        """
        Args:
            gateway: Upstream gateway
            url_for: Maps a league slug to its scoreboard URL
        """
        self._gateway = gateway
        self._url_for = url_for

    async def fetch(self, league: LeagueDescriptor | str, dates: str | None = None) -> list[EventRecord]:
        """Get events for a league. Never raises; failures yield []."""
        slug = league.slug if isinstance(league, LeagueDescriptor) else league
        try:
            params = {"dates": dates} if dates else None
            result = await self._gateway.fetch_json(self._url_for(slug), params)
            if not result.ok:
                logger.warning("[ESPN_SCOREBOARD] No scoreboard for %s: %s", slug, result.error)
                return []
            events = normalize_events(result.data, slug)
            logger.debug("[ESPN_SCOREBOARD] %s: %d events", slug, len(events))
            return events
        except Exception:
            logger.exception("[ESPN_SCOREBOARD] Unexpected error for %s", slug)
            return []
