"""Application configuration.

Settings are read from environment variables prefixed with SCORELINE_
(and an optional .env file in the working directory).

    SCORELINE_SPORT=soccer SCORELINE_ODDS_MARKET_INDEX=1 uvicorn scoreline.api.app:app
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ESPN_SITE_URL = "https://site.api.espn.com/apis/site/v2/sports"
ESPN_CORE_URL = "https://sports.core.api.espn.com/v2/sports"


class Settings(BaseSettings):
    """Aggregator settings."""

    model_config = SettingsConfigDict(
        env_prefix="SCORELINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Upstream
    sport: str = "tennis"
    site_base_url: str = ESPN_SITE_URL
    core_base_url: str = ESPN_CORE_URL

    # Directory: upstream lists are large, only the head is relevant
    league_directory_limit: int = Field(default=25, ge=0)

    # Odds market selection. Provider ordering is undocumented and has
    # moved between 0, 1 and 2, so this is configuration.
    odds_market_index: int = Field(default=0, ge=0)
    odds_market_fallback_scan: bool = True

    # Gateway
    max_concurrent_requests: int = Field(default=10, ge=1)
    request_timeout: float = Field(default=5.0, gt=0)
    retry_count: int = Field(default=2, ge=1)
    retry_delay: float = Field(default=0.5, ge=0)
    requests_per_second: float = Field(default=10.0, gt=0)
    burst_size: int = Field(default=20, ge=1)

    # Presentation window, in days around now
    window_days_past: int = Field(default=4, ge=0)
    window_days_ahead: int = Field(default=8, ge=0)

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get process-wide settings (cached)."""
    return Settings()
