from __future__ import annotations

import asyncio
import math

import httpx

from conftest import make_fetcher, route
from crystal_peak.sources import freezing, nws


def _period(name, temperature, short="Mostly Cloudy", start="2025-01-15T06:00:00-08:00"):
    return {
        "name": name,
        "temperature": temperature,
        "shortForecast": short,
        "detailedForecast": f"{short}, with a high near {temperature}.",
        "startTime": start,
        "windSpeed": "10 mph",
        "icon": "https://api.weather.gov/icons/land/day/sct",
    }


def test_pairing_groups_day_and_night_periods():
    periods = [
        _period("Wednesday", 31, "Snow Showers"),
        _period("Wednesday Night", 22),
        _period("Thursday", 34, "Sunny"),
        _period("Thursday Night", 20),
        _period("Friday", 36, "Chance Flurries"),
    ]

    daily = nws.pair_daily_periods(periods)

    assert len(daily) == math.ceil(len(periods) / 2)
    assert [d.day for d in daily] == ["Wed", "Thu", "Fri"]
    assert [(d.hi, d.lo) for d in daily] == [(31, 22), (34, 20), (36, None)]
    assert [d.snow for d in daily] == [1, 0, 1]
    assert daily[0].text == "Snow Showers"


def test_hourly_mapping_reads_local_hour_and_snow_flag():
    hourly = nws.map_hourly(
        [
            _period("", 28, "Light Snow", start="2025-01-15T13:00:00-08:00"),
            _period("", 30, "Cloudy", start="not-a-date"),
        ]
    )

    assert hourly[0].time == 13
    assert hourly[0].snow == 0.2
    assert hourly[0].wind == "10 mph"
    assert hourly[1].time is None
    assert hourly[1].snow == 0


def test_map_forecast_tolerates_malformed_payloads():
    forecast = nws.map_forecast({"properties": None}, ["unexpected"])

    assert forecast.daily == []
    assert forecast.hourly == []


def test_fetch_forecast_follows_points_lookup(config):
    seen = []

    def points(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "properties": {
                    "forecast": "https://api.weather.gov/gridpoints/SEW/145,31/forecast",
                    "forecastHourly": "https://api.weather.gov/gridpoints/SEW/145,31/forecast/hourly",
                }
            },
        )

    def hourly(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"properties": {"periods": [_period("", 25)] * 60}})

    def daily(_: httpx.Request) -> httpx.Response:
        periods = [_period(f"Day {i}", 30 + i) for i in range(16)]
        return httpx.Response(200, json={"properties": {"periods": periods}})

    fetcher = make_fetcher(
        route({"/points/": points, "/forecast/hourly": hourly, "/forecast": daily}),
        config,
    )

    forecast = asyncio.run(nws.fetch_forecast(fetcher, config))

    assert str(seen[0].url).endswith("/points/46.9325,-121.4807")
    assert seen[0].headers["User-Agent"] == config.http.user_agent
    assert len(forecast.daily) == 7
    assert len(forecast.hourly) == 48


def test_freezing_levels_grouped_by_day():
    payload = {
        "hourly": {
            "time": ["2025-01-15T00:00", "2025-01-15T12:00", "2025-01-16T00:00", "2025-01-16T01:00"],
            "freezing_level_height": [1200.0, 1850.0, 900.0, None],
        }
    }

    days = freezing.map_freezing_levels(payload)

    assert [d.to_dict() for d in days] == [
        {"day": "Wed", "date": "2025-01-15", "min_m": 1200.0, "max_m": 1850.0},
        {"day": "Thu", "date": "2025-01-16", "min_m": 900.0, "max_m": 900.0},
    ]


def test_freezing_levels_absent_without_hours():
    assert freezing.map_freezing_levels({"hourly": {"time": [], "freezing_level_height": []}}) is None
    assert freezing.map_freezing_levels({"error": True, "reason": "bad"}) is None
