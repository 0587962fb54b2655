"""ESPN provider.

Site API scoreboards plus core API league directory and odds.
"""

from scoreline.providers.espn.client import ESPNClient, RateLimiter
from scoreline.providers.espn.leagues import LeagueDirectoryResolver
from scoreline.providers.espn.odds import OddsResolver, american_odds_to_probability
from scoreline.providers.espn.scoreboard import ScoreboardNormalizer

__all__ = [
    "ESPNClient",
    "LeagueDirectoryResolver",
    "OddsResolver",
    "RateLimiter",
    "ScoreboardNormalizer",
    "american_odds_to_probability",
]
