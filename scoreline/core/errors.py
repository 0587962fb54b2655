"""Error taxonomy for upstream access.

None of these escape an entity boundary: the gateway returns FetchError
inside a FetchResult, and resolvers convert everything to empty/None.
"""

from dataclasses import dataclass
from typing import Any


class ScorelineError(Exception):
    """Base class for Scoreline errors."""


class FetchError(ScorelineError):
    """Network, HTTP status, timeout or body-decoding failure."""

    def __init__(self, url: str, cause: BaseException | str | None = None):
        self.url = url
        self.cause = cause
        super().__init__(f"Fetch failed for {url}: {cause}")

    @property
    def status_code(self) -> int | None:
        response = getattr(self.cause, "response", None)
        return getattr(response, "status_code", None)


class SchemaMismatch(ScorelineError):
    """Payload present but missing fields we need.

    Raised only inside parsing helpers and caught at the competition or
    event boundary.
    """


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one gateway call: parsed JSON or a FetchError."""

    url: str
    data: Any = None
    error: FetchError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, url: str, data: Any) -> "FetchResult":
        return cls(url=url, data=data)

    @classmethod
    def failure(cls, url: str, cause: BaseException | str | None) -> "FetchResult":
        return cls(url=url, error=FetchError(url, cause))
