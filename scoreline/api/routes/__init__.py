"""API routes."""

from scoreline.api.routes.scoreboard import router as scoreboard_router

__all__ = ["scoreboard_router"]
