"""ESPN API HTTP client.

Handles raw HTTP requests to ESPN endpoints.
No data transformation - just fetch and return parsed JSON wrapped
in a FetchResult. Transport failures never raise past this module.
"""

import asyncio
import logging
import time

import httpx

from scoreline.config import ESPN_CORE_URL, ESPN_SITE_URL, Settings
from scoreline.core import FetchResult

logger = logging.getLogger(__name__)

# Rate limiting defaults
DEFAULT_REQUESTS_PER_SECOND = 10.0  # Max sustained request rate
DEFAULT_BURST_SIZE = 20  # Allow burst of this many requests
DEFAULT_MAX_CONCURRENT = 10  # Max in-flight requests


class RateLimiter:
    """Token bucket rate limiter for API requests.

    Allows bursts up to bucket_size, then limits to rate requests/second.
    Safe for concurrent use from tasks on one event loop.
    """

    def __init__(self, rate: float = DEFAULT_REQUESTS_PER_SECOND, bucket_size: int = DEFAULT_BURST_SIZE):
        self._rate = rate
        self._bucket_size = bucket_size
        self._tokens = float(bucket_size)
        self._last_update = time.monotonic()
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Wait until a token is available."""
        async with self._lock:
            now = time.monotonic()
            # Replenish tokens based on time elapsed
            elapsed = now - self._last_update
            self._tokens = min(self._bucket_size, self._tokens + elapsed * self._rate)
            self._last_update = now

            if self._tokens >= 1.0:
                self._tokens -= 1.0
                return

            # Need to wait for token
            wait_time = (1.0 - self._tokens) / self._rate
            self._tokens = 0.0

        # Wait outside the lock
        await asyncio.sleep(wait_time)


class ESPNClient:
    """Low-level async ESPN API client with rate limiting.

    Implements the JsonGateway protocol. One instance is shared by every
    resolver in a cycle so the concurrency bound applies globally.
    """

    def __init__(
        self,
        sport: str = "tennis",
        site_base_url: str = ESPN_SITE_URL,
        core_base_url: str = ESPN_CORE_URL,
        timeout: float = 5.0,
        retry_count: int = 2,
        retry_delay: float = 0.5,
        requests_per_second: float = DEFAULT_REQUESTS_PER_SECOND,
        burst_size: int = DEFAULT_BURST_SIZE,
        max_concurrent_requests: int = DEFAULT_MAX_CONCURRENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.sport = sport
        self._site_base_url = site_base_url.rstrip("/")
        self._core_base_url = core_base_url.rstrip("/")
        self._timeout = timeout
        self._retry_count = max(1, retry_count)
        self._retry_delay = retry_delay
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._rate_limiter = RateLimiter(rate=requests_per_second, bucket_size=burst_size)
        self._semaphore = asyncio.Semaphore(max_concurrent_requests)
        self._max_concurrent = max_concurrent_requests
        self.request_count = 0

    @classmethod
    def from_settings(cls, settings: Settings, **overrides) -> "ESPNClient":
        """Build a client from application settings."""
        kwargs = {
            "sport": settings.sport,
            "site_base_url": settings.site_base_url,
            "core_base_url": settings.core_base_url,
            "timeout": settings.request_timeout,
            "retry_count": settings.retry_count,
            "retry_delay": settings.retry_delay,
            "requests_per_second": settings.requests_per_second,
            "burst_size": settings.burst_size,
            "max_concurrent_requests": settings.max_concurrent_requests,
        }
        kwargs.update(overrides)
        return cls(**kwargs)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                limits=httpx.Limits(
                    max_connections=self._max_concurrent,
                    max_keepalive_connections=self._max_concurrent,
                ),
                headers={"Accept": "application/json"},
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    @staticmethod
    def _should_retry(error: httpx.HTTPStatusError) -> bool:
        """Retry server errors and throttling, not other client errors."""
        code = error.response.status_code
        return code >= 500 or code == 429

    async def fetch_json(self, url: str, params: dict | None = None) -> FetchResult:
        """Make HTTP request with retry logic and rate limiting.

        Returns:
            FetchResult with parsed JSON, or with error set on any failure
        """
        last_error: BaseException | None = None

        for attempt in range(self._retry_count):
            try:
                async with self._semaphore:
                    # Apply rate limiting before each request
                    await self._rate_limiter.acquire()
                    self.request_count += 1
                    response = await self._get_client().get(url, params=params)
                    response.raise_for_status()
                    return FetchResult.success(url, response.json())
            except httpx.HTTPStatusError as e:
                logger.warning("[ESPN] HTTP %s for %s", e.response.status_code, url)
                last_error = e
                if not self._should_retry(e):
                    break
            except httpx.InvalidURL as e:
                logger.warning("[ESPN] Invalid URL %s: %s", url, e)
                last_error = e
                break
            except ValueError as e:
                # Malformed body; a retry returns the same bytes
                logger.warning("[ESPN] Invalid JSON from %s: %s", url, e)
                last_error = e
                break
            except (httpx.RequestError, RuntimeError, OSError) as e:
                # RuntimeError: "Cannot send a request, as the client has been closed"
                # OSError: stale connections
                logger.warning("[ESPN] Request failed for %s: %s", url, e)
                last_error = e

            if attempt < self._retry_count - 1:
                await asyncio.sleep(self._retry_delay * (attempt + 1))

        return FetchResult.failure(url, last_error)

    # URL builders

    def directory_url(self) -> str:
        """League directory endpoint ({items: [{$ref}]})."""
        return f"{self._core_base_url}/{self.sport}/leagues"

    def scoreboard_url(self, league_slug: str) -> str:
        """Scoreboard endpoint for one league."""
        return f"{self._site_base_url}/{self.sport}/{league_slug}/scoreboard"

    def odds_url(self, league_slug: str, event_id: str, competition_id: str | None = None) -> str:
        """Odds endpoint for one competition.

        Single-competition events reuse the event id as competition id.
        """
        competition_id = competition_id or event_id
        return (
            f"{self._core_base_url}/{self.sport}/leagues/{league_slug}"
            f"/events/{event_id}/competitions/{competition_id}/odds"
        )

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ESPNClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
