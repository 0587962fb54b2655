"""API response models."""

from datetime import datetime

from pydantic import BaseModel

from scoreline.core import (
    AggregatedView,
    CompetitionRecord,
    CompetitorRecord,
    LeagueDescriptor,
    OddsPair,
    TournamentNode,
)
from scoreline.providers.espn.odds import american_odds_to_probability, format_probability


class LeagueModel(BaseModel):
    id: str
    name: str
    abbreviation: str
    slug: str
    logo: str | None = None

    @classmethod
    def from_league(cls, league: LeagueDescriptor) -> "LeagueModel":
        return cls(
            id=league.id,
            name=league.name,
            abbreviation=league.abbreviation,
            slug=league.slug,
            logo=league.logo,
        )


class OddsModel(BaseModel):
    home: float | None = None
    away: float | None = None

    @classmethod
    def from_pair(cls, pair: OddsPair | None) -> "OddsModel | None":
        if pair is None:
            return None
        return cls(home=pair.home, away=pair.away)


class PeriodScoreModel(BaseModel):
    value: float | None = None
    is_winner: bool = False


class CompetitorModel(BaseModel):
    id: str
    display_name: str
    is_home: bool
    score: str | None = None
    is_winner: bool = False
    period_scores: list[PeriodScoreModel] = []
    headshot: str | None = None
    odds: float | None = None
    probability: str | None = None  # "40.0%"

    @classmethod
    def from_competitor(cls, competitor: CompetitorRecord, odds: OddsPair | None) -> "CompetitorModel":
        price = odds.for_side(competitor.is_home) if odds else None
        return cls(
            id=competitor.id,
            display_name=competitor.display_name,
            is_home=competitor.is_home,
            score=competitor.score,
            is_winner=competitor.is_winner,
            period_scores=[
                PeriodScoreModel(value=p.value, is_winner=p.is_winner) for p in competitor.period_scores
            ],
            headshot=competitor.headshot,
            odds=price,
            probability=format_probability(american_odds_to_probability(price)),
        )


class CompetitionModel(BaseModel):
    id: str
    event_id: str
    event_name: str
    start_time: datetime | None = None
    state: str
    status_label: str
    round_label: str | None = None
    broadcasts: list[str] = []
    competitors: list[CompetitorModel] = []
    odds: OddsModel | None = None

    @classmethod
    def from_competition(
        cls, competition: CompetitionRecord, event_id: str, event_name: str, odds: OddsPair | None
    ) -> "CompetitionModel":
        return cls(
            id=competition.id,
            event_id=event_id,
            event_name=event_name,
            start_time=competition.start_time,
            state=competition.status.state,
            status_label=competition.status.label,
            round_label=competition.round_label,
            broadcasts=competition.broadcasts,
            competitors=[CompetitorModel.from_competitor(c, odds) for c in competition.competitors],
            odds=OddsModel.from_pair(odds),
        )


class GroupingModel(BaseModel):
    key: str
    display_name: str
    competitions: list[CompetitionModel] = []


class TournamentModel(BaseModel):
    name: str
    league: LeagueModel | None = None
    has_live: bool = False
    groupings: list[GroupingModel] = []

    @classmethod
    def from_node(cls, node: TournamentNode, odds: dict[str, OddsPair]) -> "TournamentModel":
        return cls(
            name=node.name,
            league=LeagueModel.from_league(node.league) if node.league else None,
            has_live=node.has_live,
            groupings=[
                GroupingModel(
                    key=grouping.key,
                    display_name=grouping.display_name,
                    competitions=[
                        CompetitionModel.from_competition(
                            item.competition,
                            item.event.id,
                            item.event.short_name or item.event.name,
                            odds.get(item.competition.id),
                        )
                        for item in grouping.items
                    ],
                )
                for grouping in node.groupings
            ],
        )


class ViewResponse(BaseModel):
    generated_at: datetime | None = None
    leagues_count: int = 0
    tournaments: list[TournamentModel] = []

    @classmethod
    def from_view(cls, view: AggregatedView) -> "ViewResponse":
        return cls(
            generated_at=view.generated_at,
            leagues_count=len(view.leagues),
            tournaments=[TournamentModel.from_node(t, view.odds) for t in view.tournaments],
        )
