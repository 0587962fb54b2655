"""Core data types for Scoreline.

All data structures are dataclasses with attribute access.
Upstream payloads are normalized into these types once; nothing
downstream reads raw ESPN dicts except through EventRecord.raw.

Use attribute access: league.slug, competition.status.state, etc.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class LeagueDescriptor:
    """League identity resolved from the upstream directory."""

    id: str
    name: str
    abbreviation: str
    slug: str
    logo: str | None = None


@dataclass(frozen=True)
class CompetitionStatus:
    """Current state of a competition."""

    state: str  # "pre" | "in" | "post"
    label: str = "Scheduled"

    @property
    def is_live(self) -> bool:
        return self.state == "in"


@dataclass(frozen=True)
class PeriodScore:
    """Score for one period (set, quarter, inning)."""

    value: float | None
    is_winner: bool = False


@dataclass(frozen=True)
class CompetitorRecord:
    """One side of a competition (player, pair or team)."""

    id: str
    display_name: str
    is_home: bool
    score: str | None = None
    is_winner: bool = False
    period_scores: list[PeriodScore] = field(default_factory=list)
    headshot: str | None = None


@dataclass
class CompetitionRecord:
    """A single match/game inside an event.

    odds_payload keeps the embedded upstream odds list so the odds
    resolver can fall back to it without re-fetching.
    """

    id: str
    start_time: datetime | None
    status: CompetitionStatus
    competitors: list[CompetitorRecord] = field(default_factory=list)
    broadcasts: list[str] = field(default_factory=list)
    round_label: str | None = None
    grouping_name: str | None = None  # Set when flattened from an event grouping
    odds_payload: list = field(default_factory=list, repr=False)

    @property
    def home(self) -> CompetitorRecord | None:
        return next((c for c in self.competitors if c.is_home), None)

    @property
    def away(self) -> CompetitorRecord | None:
        return next((c for c in self.competitors if not c.is_home), None)


@dataclass
class EventRecord:
    """A scoreboard event (tournament day, fixture) for one league."""

    id: str
    league_slug: str
    date: datetime | None
    name: str
    short_name: str
    status: CompetitionStatus
    competitions: list[CompetitionRecord] = field(default_factory=list)

    # Untouched upstream payload
    raw: dict = field(default_factory=dict, repr=False)


@dataclass(frozen=True)
class OddsPair:
    """Moneyline pair in American odds. None = unresolved side."""

    home: float | None = None
    away: float | None = None

    @property
    def is_empty(self) -> bool:
        return self.home is None and self.away is None

    def for_side(self, is_home: bool) -> float | None:
        return self.home if is_home else self.away


@dataclass(frozen=True)
class GroupingItem:
    """An event/competition pair placed under a grouping."""

    event: EventRecord
    competition: CompetitionRecord


@dataclass
class GroupingNode:
    """Named subdivision of a tournament (session, court, matchday)."""

    key: str
    display_name: str
    items: list[GroupingItem] = field(default_factory=list)

    def competition_ids(self) -> list[str]:
        return [item.competition.id for item in self.items]


@dataclass
class TournamentNode:
    """Top-level display entry: a league or an ad-hoc tournament name."""

    name: str
    groupings: list[GroupingNode] = field(default_factory=list)
    league: LeagueDescriptor | None = None

    @property
    def has_live(self) -> bool:
        return any(
            item.competition.status.is_live
            for grouping in self.groupings
            for item in grouping.items
        )


@dataclass
class AggregatedView:
    """Result of one aggregation cycle, ready for presentation."""

    tournaments: list[TournamentNode] = field(default_factory=list)
    odds: dict[str, OddsPair] = field(default_factory=dict)
    leagues: list[LeagueDescriptor] = field(default_factory=list)
    generated_at: datetime | None = None
