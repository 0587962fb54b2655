"""League directory resolution for ESPN provider.

The core API lists leagues as {"items": [{"$ref": url}, ...]}. Each
reference is resolved to a LeagueDescriptor in parallel. Failed
references are dropped; partial results are valid output.
"""

import asyncio
import logging

from scoreline.core import JsonGateway, LeagueDescriptor

logger = logging.getLogger(__name__)

DEFAULT_DIRECTORY_LIMIT = 25
DIRECTORY_PARAMS = {"lang": "en", "region": "us"}


def extract_logo(data: dict) -> str | None:
    """Extract logo - prefer default, fallback to first."""
    logos = data.get("logos") or []
    if not isinstance(logos, list):
        return None
    for logo in logos:
        if isinstance(logo, dict) and "default" in (logo.get("rel") or []):
            return logo.get("href")
    if logos and isinstance(logos[0], dict):
        return logos[0].get("href")
    return None


def parse_league(data) -> LeagueDescriptor | None:
    """Build a LeagueDescriptor from a resolved league payload.

    Returns None if the payload has no id or slug.
    """
    if not isinstance(data, dict):
        return None
    league_id = data.get("id")
    slug = data.get("slug")
    if league_id in (None, "") or not slug:
        return None

    name = data.get("name") or data.get("displayName") or str(slug)
    return LeagueDescriptor(
        id=str(league_id),
        name=name,
        abbreviation=data.get("abbreviation") or name,
        slug=str(slug),
        logo=extract_logo(data),
    )


class LeagueDirectoryResolver:
    """Turns the upstream league directory into LeagueDescriptors."""

    def __init__(self, gateway: JsonGateway, directory_url: str, limit: int = DEFAULT_DIRECTORY_LIMIT):
        self._gateway = gateway
        self._directory_url = directory_url
        self._limit = limit

    async def _resolve_ref(self, ref: str) -> LeagueDescriptor | None:
        try:
            result = await self._gateway.fetch_json(ref)
            if not result.ok:
                logger.debug("[ESPN_LEAGUES] Dropping %s: %s", ref, result.error)
                return None
            league = parse_league(result.data)
            if league is None:
                logger.debug("[ESPN_LEAGUES] Dropping %s: missing id/slug", ref)
            return league
        except Exception:
            logger.exception("[ESPN_LEAGUES] Unexpected error resolving %s", ref)
            return None

    async def resolve(self) -> list[LeagueDescriptor]:
        """Resolve the first `limit` directory entries.

        Never raises; an unreachable directory yields an empty list.
        Callers must not depend on output order.
        """
        result = await self._gateway.fetch_json(self._directory_url, dict(DIRECTORY_PARAMS))
        if not result.ok or not isinstance(result.data, dict):
            logger.warning("[ESPN_LEAGUES] League directory unavailable: %s", result.error)
            return []

        items = result.data.get("items") or []
        if not isinstance(items, list):
            return []

        refs = [
            item.get("$ref")
            for item in items[: self._limit]
            if isinstance(item, dict) and item.get("$ref")
        ]
        resolved = await asyncio.gather(*(self._resolve_ref(ref) for ref in refs))

        # Same league can appear under two refs
        leagues: list[LeagueDescriptor] = []
        seen: set[str] = set()
        for league in resolved:
            if league is not None and league.id not in seen:
                seen.add(league.id)
                leagues.append(league)

        logger.info("[ESPN_LEAGUES] Resolved %d of %d league refs", len(leagues), len(refs))
        return leagues
