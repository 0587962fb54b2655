"""Tests for odds conversion, market selection and the fallback chain."""

import asyncio
import math

import pytest
from conftest import make_competition, make_embedded_odds, make_event, make_market

from scoreline.core import OddsPair
from scoreline.providers.espn.odds import (
    OddsResolver,
    american_odds_to_probability,
    embedded_pair,
    format_probability,
    market_pair,
    parse_american,
    select_market,
)
from scoreline.providers.espn.scoreboard import normalize_events


def _url(league: str, event_id: str, competition_id: str | None = None) -> str:
    return f"http://core.test/leagues/{league}/events/{event_id}/competitions/{competition_id or event_id}/odds"


def _event(competition: dict, eid: str = "e1"):
    (event,) = normalize_events([make_event(eid, competitions=[competition])], "atp")
    return event, event.competitions[0]


class TestProbability:
    def test_underdog(self):
        assert american_odds_to_probability(150) == pytest.approx(0.4)
        assert format_probability(american_odds_to_probability(150)) == "40.0%"

    def test_favorite(self):
        assert american_odds_to_probability(-200) == pytest.approx(2 / 3)
        assert format_probability(american_odds_to_probability(-200)) == "66.7%"

    @pytest.mark.parametrize("value", [0, None, "abc", float("nan"), True])
    def test_no_probability(self, value):
        assert american_odds_to_probability(value) is None

    def test_string_odds(self):
        assert american_odds_to_probability("+100") == pytest.approx(0.5)
        assert american_odds_to_probability("EVEN") == pytest.approx(0.5)

    def test_format_none(self):
        assert format_probability(None) is None


class TestParseAmerican:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(150, 150.0), ("-110", -110.0), ("+250", 250.0), ("EV", 100.0), (0, None), ("0", None), (float("inf"), None), ({}, None)],
    )
    def test_values(self, value, expected):
        assert parse_american(value) == expected


class TestSelectMarket:
    def test_preferred_index(self):
        items = [make_market(-150, 130), make_market(-140, 120)]
        assert select_market(items, 1, fallback_scan=False) is items[1]

    def test_out_of_bounds_without_scan(self):
        assert select_market([make_market(-150, 130)], 2, fallback_scan=False) is None

    def test_out_of_bounds_with_scan(self):
        items = [make_market(-150, 130)]
        assert select_market(items, 2, fallback_scan=True) is items[0]

    def test_entry_without_moneyline_is_skipped(self):
        items = [{"provider": {"name": "spread only"}}, make_market(-120, 100)]
        assert select_market(items, 0, fallback_scan=True) is items[1]
        assert select_market(items, 0, fallback_scan=False) is None

    @pytest.mark.parametrize("items", [None, [], {"0": 1}])
    def test_nothing_to_select(self, items):
        assert select_market(items, 0) is None


class TestPayloadExtraction:
    def test_market_pair(self):
        assert market_pair(make_market(-200, "+150")) == OddsPair(home=-200.0, away=150.0)

    def test_market_pair_top_level_moneyline(self):
        entry = {"homeTeamOdds": {"moneyLine": -300}, "awayTeamOdds": {"moneyLine": 240}}
        assert market_pair(entry) == OddsPair(home=-300.0, away=240.0)

    def test_market_pair_garbage(self):
        assert market_pair("nope").is_empty

    def test_embedded_pair(self):
        assert embedded_pair(make_embedded_odds("-175", "+145")) == OddsPair(home=-175.0, away=145.0)

    def test_embedded_pair_missing(self):
        assert embedded_pair([]) is None
        assert embedded_pair([{"details": "no moneyline"}]) is None
        assert embedded_pair(make_embedded_odds(None, None)) is None


class TestOddsResolver:
    def test_endpoint_first(self, gateway):
        event, competition = _event(make_competition("c1", odds=make_embedded_odds(-110, -110)))
        gateway.add(_url("atp", "e1", "c1"), {"items": [make_market(-200, 150)]})

        pair = asyncio.run(OddsResolver(gateway, _url).resolve("atp", competition, event))

        assert pair == OddsPair(home=-200.0, away=150.0)

    def test_configured_market_index(self, gateway):
        event, competition = _event(make_competition("c1"))
        gateway.add(_url("atp", "e1", "c1"), {"items": [make_market(-200, 150), make_market(-180, 140), make_market(-160, 130)]})

        pair = asyncio.run(OddsResolver(gateway, _url, market_index=2).resolve("atp", competition, event))

        assert pair == OddsPair(home=-160.0, away=130.0)

    def test_endpoint_failure_falls_back_to_embedded(self, gateway):
        event, competition = _event(make_competition("c1", odds=make_embedded_odds("-175", "+145")))
        gateway.fail(_url("atp", "e1", "c1"))

        pair = asyncio.run(OddsResolver(gateway, _url).resolve("atp", competition, event))

        assert pair == OddsPair(home=-175.0, away=145.0)

    def test_all_null_endpoint_falls_back_to_embedded(self, gateway):
        event, competition = _event(make_competition("c1", odds=make_embedded_odds(120, -140)))
        gateway.add(_url("atp", "e1", "c1"), {"items": [make_market(None, None)]})

        pair = asyncio.run(OddsResolver(gateway, _url).resolve("atp", competition, event))

        assert pair == OddsPair(home=120.0, away=-140.0)

    def test_out_of_bounds_index_falls_through(self, gateway):
        event, competition = _event(make_competition("c1", odds=make_embedded_odds(110, -130)))
        gateway.add(_url("atp", "e1", "c1"), {"items": [make_market(-200, 150)]})

        resolver = OddsResolver(gateway, _url, market_index=2, fallback_scan=False)
        pair = asyncio.run(resolver.resolve("atp", competition, event))

        assert pair == OddsPair(home=110.0, away=-130.0)

    def test_grouped_event_fallback(self, gateway):
        raw = make_event(
            "e1",
            groupings=[{"competitions": [make_competition("g1", odds=make_embedded_odds(-250, 190))]}],
        )
        (event,) = normalize_events([raw], "atp")
        competition = event.competitions[0]
        competition.odds_payload = []

        pair = asyncio.run(OddsResolver(gateway, _url).resolve("atp", competition, event))

        assert pair == OddsPair(home=-250.0, away=190.0)

    def test_grouped_fallback_never_borrows_another_match(self, gateway):
        raw = make_event(
            "e1",
            groupings=[
                {
                    "grouping": {"displayName": "Court 1"},
                    "competitions": [make_competition("m1", odds=make_embedded_odds(-250, 190))],
                },
                {"grouping": {"displayName": "Court 2"}, "competitions": [make_competition("m2")]},
            ],
        )
        (event,) = normalize_events([raw], "atp")
        m2 = event.competitions[1]
        gateway.fail(_url("atp", "e1", "m2"))

        assert asyncio.run(OddsResolver(gateway, _url).resolve("atp", m2, event)) is None

    def test_unresolvable_is_none(self, gateway):
        event, competition = _event(make_competition("c1"))
        assert asyncio.run(OddsResolver(gateway, _url).resolve("atp", competition, event)) is None

    def test_never_raises_on_gateway_exception(self, gateway):
        event, competition = _event(make_competition("c1", odds=make_embedded_odds(100, -120)))

        async def boom(url, params=None):
            raise RuntimeError("gateway bug")

        gateway.fetch_json = boom
        pair = asyncio.run(OddsResolver(gateway, _url).resolve("atp", competition, event))

        assert pair == OddsPair(home=100.0, away=-120.0)

    def test_timeout_degrades_to_fallback(self, gateway):
        gateway.delay = 0.5
        event, competition = _event(make_competition("c1", odds=make_embedded_odds(105, -125)))
        gateway.add(_url("atp", "e1", "c1"), {"items": [make_market(-200, 150)]})

        pair = asyncio.run(OddsResolver(gateway, _url, timeout=0.01).resolve("atp", competition, event))

        assert pair == OddsPair(home=105.0, away=-125.0)

    @pytest.mark.parametrize(
        "items",
        [
            [make_market(-200, 150)],
            [make_market("abc", None)],
            [make_market(float("nan"), "+120"), make_market(0, 0)],
            [{"homeTeamOdds": None}],
        ],
    )
    def test_fields_are_finite_or_none(self, gateway, items):
        event, competition = _event(make_competition("c1"))
        gateway.add(_url("atp", "e1", "c1"), {"items": items})

        pair = asyncio.run(OddsResolver(gateway, _url).resolve("atp", competition, event))

        if pair is not None:
            for value in (pair.home, pair.away):
                assert value is None or math.isfinite(value)


class TestResolveAll:
    def test_keys_by_competition_and_omits_unresolved(self, gateway):
        events = normalize_events(
            [make_event("e1", competitions=[make_competition("c1"), make_competition("c2")])], "atp"
        )
        event = events[0]
        gateway.add(_url("atp", "e1", "c1"), {"items": [make_market(-200, 150)]})

        targets = [("atp", event, c) for c in event.competitions]
        odds = asyncio.run(OddsResolver(gateway, _url).resolve_all(targets))

        assert odds == {"c1": OddsPair(home=-200.0, away=150.0)}

    def test_fan_out_is_bounded(self, gateway):
        gateway.delay = 0.01
        competitions = [make_competition(f"c{i}") for i in range(12)]
        (event,) = normalize_events([make_event("e1", competitions=competitions)], "atp")
        for competition in event.competitions:
            gateway.add(_url("atp", "e1", competition.id), {"items": [make_market(-110, -110)]})

        targets = [("atp", event, c) for c in event.competitions]
        odds = asyncio.run(OddsResolver(gateway, _url, max_concurrent=3).resolve_all(targets))

        assert len(odds) == 12
        assert gateway.max_in_flight <= 3
