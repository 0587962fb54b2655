"""Service layer."""

from scoreline.services.aggregator import ScoreboardService, create_default_service

__all__ = ["ScoreboardService", "create_default_service"]
