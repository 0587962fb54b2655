"""Moneyline odds resolution for ESPN provider.

Resolution order per competition, first success wins:

1. Core API odds endpoint. The provider returns a list of market
   entries whose ordering is undocumented; the entry at
   `market_index` is used if it actually carries a moneyline.
2. Odds embedded in the scoreboard payload (odds[0].moneyline), using
   each side's opening price.
3. Unresolved -> None. This is a normal state, not an error.
"""

import asyncio
import logging
import math
from collections.abc import Callable, Iterable

from scoreline.core import CompetitionRecord, EventRecord, JsonGateway, OddsPair

logger = logging.getLogger(__name__)

DEFAULT_MARKET_INDEX = 0
DEFAULT_MAX_CONCURRENT = 10

EVEN_MONEY = {"EVEN", "EV", "PK"}


# =============================================================================
# Conversions
# =============================================================================


def parse_american(value) -> float | None:
    """Coerce an American odds value to a finite, non-zero float.

    Accepts numbers and strings like '+150', '-200' or 'EVEN'.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = value.strip().upper()
        if text in EVEN_MONEY:
            return 100.0
        value = text.lstrip("+")
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number == 0:
        return None
    return number


def american_odds_to_probability(odds) -> float | None:
    """Implied win probability (0-1) from American odds.

    150 -> 0.4, -200 -> 0.667. Zero or non-numeric input -> None.
    """
    n = parse_american(odds)
    if n is None:
        return None
    if n > 0:
        return 100 / (n + 100)
    return abs(n) / (abs(n) + 100)


def format_probability(probability: float | None) -> str | None:
    """Format a probability for display (0.4 -> '40.0%')."""
    if probability is None:
        return None
    return f"{probability * 100:.1f}%"


# =============================================================================
# Payload extraction
# =============================================================================


def _side_price(team_odds) -> float | None:
    """Read teamOdds.current.moneyLine.american, else teamOdds.moneyLine."""
    if not isinstance(team_odds, dict):
        return None
    current = team_odds.get("current")
    if isinstance(current, dict):
        money_line = current.get("moneyLine")
        if isinstance(money_line, dict):
            price = parse_american(money_line.get("american"))
            if price is not None:
                return price
    return parse_american(team_odds.get("moneyLine"))


def market_pair(entry) -> OddsPair:
    """Moneyline pair from one odds-endpoint market entry."""
    if not isinstance(entry, dict):
        return OddsPair()
    return OddsPair(
        home=_side_price(entry.get("homeTeamOdds")),
        away=_side_price(entry.get("awayTeamOdds")),
    )


def select_market(items, index: int = DEFAULT_MARKET_INDEX, fallback_scan: bool = True) -> dict | None:
    """Choose the market entry to read moneylines from.

    The preferred index is used only if it is in bounds and carries a
    moneyline. Otherwise, with fallback_scan, the first entry that does
    is used; without it, None.
    """
    if not isinstance(items, list) or not items:
        return None
    if 0 <= index < len(items) and not market_pair(items[index]).is_empty:
        return items[index]
    if fallback_scan:
        for entry in items:
            if not market_pair(entry).is_empty:
                return entry
    return None


def embedded_pair(odds_payload) -> OddsPair | None:
    """Opening moneyline from scoreboard odds (odds[0].moneyline)."""
    if not isinstance(odds_payload, list) or not odds_payload:
        return None
    first = odds_payload[0]
    if not isinstance(first, dict):
        return None
    moneyline = first.get("moneyline")
    if not isinstance(moneyline, dict):
        return None

    def opening(side: str) -> float | None:
        side_data = moneyline.get(side)
        if not isinstance(side_data, dict):
            return None
        open_data = side_data.get("open")
        if not isinstance(open_data, dict):
            return None
        return parse_american(open_data.get("odds"))

    pair = OddsPair(home=opening("home"), away=opening("away"))
    return None if pair.is_empty else pair


def _first_grouped_odds(event: EventRecord | None, competition_id: str) -> list:
    """odds of the event's first grouped competition, if that is this competition.

    A competition without an upstream id was allocated the event id.
    """
    if event is None:
        return []
    groupings = event.raw.get("groupings")
    if not isinstance(groupings, list) or not groupings or not isinstance(groupings[0], dict):
        return []
    competitions = groupings[0].get("competitions")
    if not isinstance(competitions, list) or not competitions or not isinstance(competitions[0], dict):
        return []
    first = competitions[0]
    first_id = first.get("id")
    first_id = str(first_id) if first_id not in (None, "") else event.id
    if first_id != competition_id:
        return []
    odds = first.get("odds")
    return odds if isinstance(odds, list) else []


# =============================================================================
# Resolver
# =============================================================================


class OddsResolver:
    """Resolves an OddsPair per competition through the fallback chain."""

    def __init__(
        self,
        gateway: JsonGateway,
        url_for: Callable[[str, str, str | None], str],
        market_index: int = DEFAULT_MARKET_INDEX,
        fallback_scan: bool = True,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT,
        timeout: float | None = None,
    ):
        """
        Args:
            gateway: Upstream gateway
            url_for: (league_slug, event_id, competition_id) -> odds URL
            market_index: Preferred market entry in the odds list
            fallback_scan: Scan other entries when the preferred one is unusable
            max_concurrent: Width of the resolve_all worker bound
            timeout: Per-competition deadline for the endpoint call
        """
        self._gateway = gateway
        self._url_for = url_for
        self._market_index = market_index
        self._fallback_scan = fallback_scan
        self._max_concurrent = max_concurrent
        self._timeout = timeout

    async def fetch_endpoint_pair(
        self, league_slug: str, event_id: str, competition_id: str | None = None
    ) -> OddsPair | None:
        """Step 1 only: odds endpoint. None when it has nothing usable."""
        url = self._url_for(league_slug, event_id, competition_id)
        fetch = self._gateway.fetch_json(url)
        try:
            if self._timeout:
                result = await asyncio.wait_for(fetch, self._timeout)
            else:
                result = await fetch
        except TimeoutError:
            logger.warning("[ESPN_ODDS] Timed out fetching %s", url)
            return None

        if not result.ok or not isinstance(result.data, dict):
            return None

        entry = select_market(result.data.get("items"), self._market_index, self._fallback_scan)
        if entry is None:
            logger.debug("[ESPN_ODDS] No usable market at %s", url)
            return None
        pair = market_pair(entry)
        return None if pair.is_empty else pair

    async def resolve(
        self,
        league_slug: str,
        competition: CompetitionRecord,
        event: EventRecord | None = None,
    ) -> OddsPair | None:
        """Resolve odds for one competition. Never raises."""
        event_id = event.id if event is not None else competition.id

        try:
            pair = await self.fetch_endpoint_pair(league_slug, event_id, competition.id)
            if pair is not None:
                return pair
        except Exception:
            logger.exception("[ESPN_ODDS] Odds endpoint failed for competition %s", competition.id)

        try:
            payload = competition.odds_payload or _first_grouped_odds(event, competition.id)
            pair = embedded_pair(payload)
            if pair is not None:
                logger.debug("[ESPN_ODDS] Using embedded odds for competition %s", competition.id)
            return pair
        except Exception:
            logger.exception("[ESPN_ODDS] Embedded odds unreadable for competition %s", competition.id)
            return None

    async def resolve_all(
        self,
        targets: Iterable[tuple[str, EventRecord, CompetitionRecord]],
    ) -> dict[str, OddsPair]:
        """Resolve odds for many competitions with bounded fan-out.

        Args:
            targets: (league_slug, event, competition) triples

        Returns:
            Map of competition id -> OddsPair; unresolved ids are absent
        """
        semaphore = asyncio.Semaphore(self._max_concurrent)

        async def worker(league_slug: str, event: EventRecord, competition: CompetitionRecord):
            async with semaphore:
                return competition.id, await self.resolve(league_slug, competition, event)

        results = await asyncio.gather(*(worker(*target) for target in targets))
        odds = {competition_id: pair for competition_id, pair in results if pair is not None}
        logger.info("[ESPN_ODDS] Resolved odds for %d of %d competitions", len(odds), len(results))
        return odds
