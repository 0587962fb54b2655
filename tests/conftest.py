"""Shared test fixtures: an in-memory gateway and ESPN payload builders."""

import asyncio

import pytest

from scoreline.core import FetchResult

FAIL = object()


class FakeGateway:
    """In-memory JsonGateway.

    Unknown URLs and URLs mapped to FAIL return a FetchError result,
    exactly like the real client does for HTTP failures.
    """

    def __init__(self, routes: dict | None = None, delay: float = 0.0):
        self.routes = dict(routes or {})
        self.calls: list[tuple[str, dict | None]] = []
        self.delay = delay
        self.in_flight = 0
        self.max_in_flight = 0

    def add(self, url: str, data) -> None:
        self.routes[url] = data

    def fail(self, url: str) -> None:
        self.routes[url] = FAIL

    def urls_called(self) -> list[str]:
        return [url for url, _ in self.calls]

    async def fetch_json(self, url: str, params: dict | None = None) -> FetchResult:
        self.calls.append((url, params))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            data = self.routes.get(url, FAIL)
            if data is FAIL:
                return FetchResult.failure(url, "HTTP 404")
            return FetchResult.success(url, data)
        finally:
            self.in_flight -= 1


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


def make_competitor(cid: str, name: str, home_away: str = "home", **extra) -> dict:
    data = {"id": cid, "homeAway": home_away, "athlete": {"displayName": name}}
    data.update(extra)
    return data


def make_competition(cid: str, home: str = "Sinner", away: str = "Alcaraz", state: str = "pre", **extra) -> dict:
    data = {
        "id": cid,
        "date": "2026-10-18T12:00Z",
        "status": {"type": {"state": state, "shortDetail": "Scheduled" if state == "pre" else state}},
        "competitors": [
            make_competitor(f"{cid}-h", home, "home"),
            make_competitor(f"{cid}-a", away, "away"),
        ],
    }
    data.update(extra)
    return data


def make_event(eid: str, name: str = "Shanghai Masters", date: str = "2026-10-18T10:00Z", **extra) -> dict:
    data = {
        "id": eid,
        "name": name,
        "shortName": name,
        "date": date,
        "status": {"type": {"state": "pre", "shortDetail": "Scheduled"}},
    }
    data.update(extra)
    return data


def make_market(home, away) -> dict:
    return {
        "provider": {"name": "ESPN BET"},
        "homeTeamOdds": {"current": {"moneyLine": {"american": home}}},
        "awayTeamOdds": {"current": {"moneyLine": {"american": away}}},
    }


def make_embedded_odds(home, away) -> list:
    return [{"moneyline": {"home": {"open": {"odds": home}}, "away": {"open": {"odds": away}}}}]
