from __future__ import annotations

import asyncio

import httpx
import pytest

from conftest import FakeClock, fixture_text, make_fetcher
from crystal_peak.cache import TTLCache
from crystal_peak.http_client import SourceError
from crystal_peak.models import PassCondition
from crystal_peak.sources import lifts, pass_report, snow


def test_snow_report_parsing():
    report = snow.parse_snow_report(fixture_text("snow_report.html"))

    assert report.new24h == 6
    assert report.new48h == 11
    assert report.base == 74
    assert report.season == 212
    assert report.surface == "Packed Powder"
    assert report.updated == "Jan 15, 2025"


def test_snow_report_absent_when_page_has_no_depths():
    assert snow.parse_snow_report("<html><body><p>Come ski with us</p></body></html>") is None


def test_lift_board_parsing():
    board = lifts.parse_lift_board(fixture_text("lifts.html"))

    assert [lift.name for lift in board.lifts] == ["Mt. Rainier Gondola", "Rainier Express", "Northway"]
    gondola, express, northway = board.lifts
    assert gondola.id == "mt-rainier-gondola"
    assert gondola.status == "open"
    assert gondola.vertical == 2472
    assert gondola.to_dict()["topElev"] == 6872
    assert express.status == "hold"
    assert northway.status == "closed"

    lucky, bowl = board.runs
    assert lucky.groomed is True
    assert lucky.difficulty == "blue"
    assert lucky.zone == "Front Side"
    assert bowl.groomed is False
    assert bowl.difficulty == "double-black"
    assert bowl.status == "closed"


def test_lift_board_skipped_without_url(config):
    def handler(_: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    board = asyncio.run(lifts.fetch_lift_board(make_fetcher(handler, config), config))

    assert board.lifts == []
    assert board.runs == []


def test_pass_report_parsing():
    report = pass_report.parse_pass_report(
        fixture_text("pass_report.html"),
        pass_id="13",
        url="https://wsdot.com/travel/real-time/mountainpasses/white-pass",
    )

    assert report.name == "White Pass US 12"
    assert report.temperature == "28 °F"
    assert report.weather == "Light snow"
    assert report.conditions == "Compact snow and ice on roadway"
    assert report.eastbound == "Traction tires advised"
    assert report.updated == "1/15/2025 6:42 AM"


def test_pass_report_cached_for_its_own_ttl(config):
    calls = {"count": 0}
    html = fixture_text("pass_report.html")

    def handler(_: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        return httpx.Response(200, text=html)

    clock = FakeClock()
    cache = TTLCache(600, clock=clock)
    fetcher = make_fetcher(handler, config)
    white = PassCondition(
        id="13",
        name="White Pass US 12",
        link="https://wsdot.com/travel/real-time/mountainpasses/white-pass",
    )

    first = asyncio.run(pass_report.fetch_pass_report(fetcher, white, cache=cache))
    clock.advance(300)
    second = asyncio.run(pass_report.fetch_pass_report(fetcher, white, cache=cache))
    clock.advance(300)
    third = asyncio.run(pass_report.fetch_pass_report(fetcher, white, cache=cache))

    assert second is first
    assert third is not first
    assert calls["count"] == 2


def test_failed_pass_report_not_rescraped_within_ttl(config):
    calls = {"count": 0}

    def handler(_: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        return httpx.Response(503)

    clock = FakeClock()
    cache = TTLCache(600, clock=clock)
    fetcher = make_fetcher(handler, config)
    white = PassCondition(
        id="13",
        name="White Pass US 12",
        link="https://wsdot.com/travel/real-time/mountainpasses/white-pass",
    )

    with pytest.raises(SourceError):
        asyncio.run(pass_report.fetch_pass_report(fetcher, white, cache=cache))
    clock.advance(300)
    with pytest.raises(SourceError) as cached:
        asyncio.run(pass_report.fetch_pass_report(fetcher, white, cache=cache))
    assert calls["count"] == 1
    assert cached.value.source == pass_report.SOURCE

    clock.advance(300)
    with pytest.raises(SourceError):
        asyncio.run(pass_report.fetch_pass_report(fetcher, white, cache=cache))
    assert calls["count"] == 2
