"""Interfaces implemented by upstream gateways."""

from typing import Protocol, runtime_checkable

from scoreline.core.errors import FetchResult


@runtime_checkable
class JsonGateway(Protocol):
    """Fetch-and-parse contract for any upstream feed.

    Implementations must never raise for transport failures; they
    return a FetchResult whose error is set instead.
    """

    async def fetch_json(self, url: str, params: dict | None = None) -> FetchResult: ...
