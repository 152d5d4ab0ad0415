from __future__ import annotations

import asyncio

import httpx

from conftest import make_fetcher, route
from crystal_peak.sources import avalanche

MAP_LAYER = {
    "type": "FeatureCollection",
    "features": [
        {
            "id": 1653,
            "properties": {
                "name": "West Slopes South",
                "danger_level": 3,
                "danger": "considerable",
                "travel_advice": "<p>Dangerous avalanche conditions.&nbsp;Careful snowpack evaluation essential.</p>",
                "link": "https://nwac.us/avalanche-forecast/#/west-slopes-south",
                "start_date": "2025-01-15T02:00:00",
            },
        },
        {"id": 1654, "properties": {"name": "Stevens Pass", "danger_level": -1}},
    ],
}


def test_zone_mapping():
    forecast = avalanche.map_zone(avalanche.find_zone(MAP_LAYER, "west slopes south"))

    assert forecast.level == 3
    assert forecast.danger == "Considerable"
    assert forecast.summary == "Dangerous avalanche conditions. Careful snowpack evaluation essential."
    assert forecast.link.endswith("west-slopes-south")


def test_no_rating_zone():
    forecast = avalanche.map_zone(avalanche.find_zone(MAP_LAYER, "Stevens Pass"))

    assert forecast.level is None
    assert forecast.danger == "No Rating"


def test_fetch_adds_problems_from_product(config):
    def product(request: httpx.Request) -> httpx.Response:
        assert request.url.params["zone_id"] == "1653"
        return httpx.Response(
            200,
            json={"forecast_avalanche_problems": [{"name": "Wind Slab"}, {"name": "Persistent Slab"}, {}]},
        )

    fetcher = make_fetcher(
        route({"map-layer": lambda _: httpx.Response(200, json=MAP_LAYER), "/product": product}),
        config,
    )

    forecast = asyncio.run(avalanche.fetch_avalanche(fetcher, config))

    assert forecast.problems == ["Wind Slab", "Persistent Slab"]
    assert forecast.to_dict()["level"] == 3


def test_fetch_keeps_rating_when_product_fails(config):
    fetcher = make_fetcher(
        route({"map-layer": lambda _: httpx.Response(200, json=MAP_LAYER), "/product": lambda _: httpx.Response(503)}),
        config,
    )

    forecast = asyncio.run(avalanche.fetch_avalanche(fetcher, config))

    assert forecast.level == 3
    assert forecast.problems == []


def test_unknown_zone_yields_none(config):
    config.avalanche_zone = "Olympics"
    fetcher = make_fetcher(lambda _: httpx.Response(200, json=MAP_LAYER), config)

    assert asyncio.run(avalanche.fetch_avalanche(fetcher, config)) is None
