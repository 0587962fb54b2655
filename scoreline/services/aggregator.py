"""Scoreboard aggregation service layer.

Runs one aggregation cycle: league directory -> scoreboards ->
hierarchy -> presentation filter -> odds. Consumers (the API, scripts)
call this service - never resolvers directly.

Every upstream failure is absorbed at the smallest entity (league,
event, competition); callers always get a structurally valid result.
"""

import asyncio
import logging
from datetime import datetime

from scoreline.config import Settings, get_settings
from scoreline.consumers import GroupingBuilder, present
from scoreline.core import AggregatedView, EventRecord, JsonGateway, LeagueDescriptor, OddsPair
from scoreline.providers.espn import (
    ESPNClient,
    LeagueDirectoryResolver,
    OddsResolver,
    ScoreboardNormalizer,
)
from scoreline.utilities.tz import now_utc

logger = logging.getLogger(__name__)


def create_default_service(settings: Settings | None = None) -> "ScoreboardService":
    """Create ScoreboardService with an ESPN client built from settings."""
    settings = settings or get_settings()
    return ScoreboardService(client=ESPNClient.from_settings(settings), settings=settings)


class ScoreboardService:
    """Unified access to leagues, scoreboards and odds for one sport.

    The client supplies endpoint URLs; the gateway performs fetches and
    defaults to the client itself. Tests substitute the gateway.
    """

    def __init__(
        self,
        client: ESPNClient,
        settings: Settings | None = None,
        gateway: JsonGateway | None = None,
    ):
        self._client = client
        self._settings = settings or get_settings()
        self._gateway = gateway or client

        self._directory = LeagueDirectoryResolver(
            self._gateway,
            client.directory_url(),
            limit=self._settings.league_directory_limit,
        )
        self._scoreboards = ScoreboardNormalizer(self._gateway, client.scoreboard_url)
        self._odds = OddsResolver(
            self._gateway,
            client.odds_url,
            market_index=self._settings.odds_market_index,
            fallback_scan=self._settings.odds_market_fallback_scan,
            max_concurrent=self._settings.max_concurrent_requests,
            timeout=self._settings.request_timeout * self._settings.retry_count,
        )

    # Internal aggregation API

    async def list_leagues(self) -> list[LeagueDescriptor]:
        """Resolve the league directory. Order is not guaranteed."""
        return await self._directory.resolve()

    async def get_scoreboard(self, league_slug: str, dates: str | None = None) -> list[EventRecord]:
        """Get normalized events for one league ([] on any failure)."""
        return await self._scoreboards.fetch(league_slug, dates)

    async def get_odds(
        self, league_slug: str, competition_id: str, event_id: str | None = None
    ) -> OddsPair | None:
        """Odds-endpoint moneyline for one competition, or None."""
        try:
            return await self._odds.fetch_endpoint_pair(league_slug, event_id or competition_id, competition_id)
        except Exception:
            logger.exception("[AGGREGATOR] Odds lookup failed for %s/%s", league_slug, competition_id)
            return None

    # Full cycle

    async def collect_scoreboards(self, leagues: list[LeagueDescriptor]) -> dict[str, list[EventRecord]]:
        """Fetch every league's scoreboard concurrently, keyed by slug.

        A league whose fetch fails maps to [] without touching siblings.
        """
        results = await asyncio.gather(
            *(self._scoreboards.fetch(league) for league in leagues),
            return_exceptions=True,
        )
        scoreboards: dict[str, list[EventRecord]] = {}
        for league, events in zip(leagues, results, strict=True):
            if isinstance(events, BaseException):
                logger.error("[AGGREGATOR] Scoreboard for %s raised: %s", league.slug, events)
                events = []
            scoreboards[league.slug] = events
        return scoreboards

    async def build_view(self, now: datetime | None = None) -> AggregatedView:
        """Run one aggregation cycle.

        Odds are resolved only for competitions that survive the
        presentation filter.
        """
        now = now or now_utc()
        leagues = await self.list_leagues()
        if not leagues:
            logger.warning("[AGGREGATOR] No leagues resolved")
            return AggregatedView(generated_at=now)

        scoreboards = await self.collect_scoreboards(leagues)
        events = [event for league in leagues for event in scoreboards.get(league.slug, [])]

        builder = GroupingBuilder({league.slug: league for league in leagues})
        tournaments = present(
            builder.build(events),
            now=now,
            days_past=self._settings.window_days_past,
            days_ahead=self._settings.window_days_ahead,
        )

        targets = [
            (item.event.league_slug, item.event, item.competition)
            for tournament in tournaments
            for grouping in tournament.groupings
            for item in grouping.items
        ]
        odds = await self._odds.resolve_all(targets)

        logger.info(
            "[AGGREGATOR] Cycle complete: %d leagues, %d events, %d tournaments shown, %d with odds",
            len(leagues),
            len(events),
            len(tournaments),
            len(odds),
        )
        return AggregatedView(tournaments=tournaments, odds=odds, leagues=leagues, generated_at=now)

    async def aclose(self) -> None:
        await self._client.aclose()
