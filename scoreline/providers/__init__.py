"""Upstream data providers."""

from scoreline.providers.espn import ESPNClient

__all__ = ["ESPNClient"]
