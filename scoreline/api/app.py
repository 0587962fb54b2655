"""FastAPI application factory.

    uvicorn scoreline.api.app:app
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from scoreline.api.routes import scoreboard_router
from scoreline.config import Settings, get_settings
from scoreline.services import ScoreboardService, create_default_service
from scoreline.utilities import setup_logging

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    service: ScoreboardService | None = None,
) -> FastAPI:
    """Create the API app.

    Args:
        settings: Defaults to environment settings
        service: Pre-built service (tests); otherwise created on startup
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level)
        owned = service is None
        app.state.service = service or create_default_service(settings)
        logger.info("[API] Scoreline started (sport=%s)", settings.sport)
        try:
            yield
        finally:
            if owned:
                await app.state.service.aclose()

    app = FastAPI(title="Scoreline", lifespan=lifespan)
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["GET"], allow_headers=["*"])
    app.include_router(scoreboard_router, prefix="/api")
    return app


app = create_app()
