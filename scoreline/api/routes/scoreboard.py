"""Scoreboard API endpoints.

- GET /leagues - Resolved league directory
- GET /scoreboard/{slug} - Raw events for one league ({"events": [...]})
- GET /odds/{league}/{event_id} - Moneyline pair or null
- GET /view - Full filtered, sorted hierarchy with odds

Upstream failures never surface as errors here: every endpoint
answers 200 with an empty list or null.
"""

from fastapi import APIRouter, Depends, Query, Request

from scoreline.api.models import LeagueModel, OddsModel, ViewResponse
from scoreline.services import ScoreboardService

router = APIRouter()


def get_service(request: Request) -> ScoreboardService:
    return request.app.state.service


@router.get("/leagues", response_model=list[LeagueModel])
async def list_leagues(service: ScoreboardService = Depends(get_service)):
    """List leagues from the upstream directory."""
    leagues = await service.list_leagues()
    return [LeagueModel.from_league(league) for league in leagues]


@router.get("/scoreboard/{slug}")
async def get_scoreboard(
    slug: str,
    dates: str | None = Query(None, description="YYYYMMDD or YYYYMMDD-YYYYMMDD"),
    service: ScoreboardService = Depends(get_service),
) -> dict:
    """Get a league's events as delivered upstream."""
    events = await service.get_scoreboard(slug, dates)
    return {"events": [event.raw for event in events]}


@router.get("/odds/{league}/{event_id}", response_model=OddsModel | None)
async def get_odds(
    league: str,
    event_id: str,
    competition_id: str | None = Query(None, description="Defaults to the event id"),
    service: ScoreboardService = Depends(get_service),
):
    """Get moneyline odds for a competition."""
    pair = await service.get_odds(league, competition_id or event_id, event_id)
    return OddsModel.from_pair(pair)


@router.get("/view", response_model=ViewResponse)
async def get_view(service: ScoreboardService = Depends(get_service)):
    """Run one aggregation cycle and return the display hierarchy."""
    view = await service.build_view()
    return ViewResponse.from_view(view)
