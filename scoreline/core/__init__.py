"""Core types and interfaces for Scoreline.

All data structures are dataclasses with attribute access.
Resolvers depend on the JsonGateway protocol, not on httpx directly.
"""

from scoreline.core.errors import FetchError, FetchResult, SchemaMismatch, ScorelineError
from scoreline.core.interfaces import JsonGateway
from scoreline.core.types import (
    AggregatedView,
    CompetitionRecord,
    CompetitionStatus,
    CompetitorRecord,
    EventRecord,
    GroupingItem,
    GroupingNode,
    LeagueDescriptor,
    OddsPair,
    PeriodScore,
    TournamentNode,
)

__all__ = [
    # Types
    "AggregatedView",
    "CompetitionRecord",
    "CompetitionStatus",
    "CompetitorRecord",
    "EventRecord",
    "GroupingItem",
    "GroupingNode",
    "LeagueDescriptor",
    "OddsPair",
    "PeriodScore",
    "TournamentNode",
    # Errors
    "FetchError",
    "FetchResult",
    "SchemaMismatch",
    "ScorelineError",
    # Interfaces
    "JsonGateway",
]
