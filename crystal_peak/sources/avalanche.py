"""NWAC avalanche danger for the configured forecast zone (via avalanche.org)."""
from __future__ import annotations

import re
from typing import Any, List, Mapping, Optional

from ..config import AppConfig
from ..http_client import HttpFetcher, SourceError
from ..logging import get_logger
from ..models import AvalancheForecast
from .base import to_text

logger = get_logger(__name__)

SOURCE = "avalanche"
MAP_LAYER_URL = "https://api.avalanche.org/v2/public/products/map-layer/NWAC"
PRODUCT_URL = "https://api.avalanche.org/v2/public/product"

DANGER_NAMES = {
    1: "Low",
    2: "Moderate",
    3: "Considerable",
    4: "High",
    5: "Extreme",
}

_TAGS = re.compile(r"<[^>]+>")


def _features(payload: Any) -> List[Mapping[str, Any]]:
    if not isinstance(payload, Mapping):
        return []
    return [feature for feature in payload.get("features") or [] if isinstance(feature, Mapping)]


def find_zone(payload: Any, zone: str) -> Optional[Mapping[str, Any]]:
    wanted = zone.strip().lower()
    for feature in _features(payload):
        properties = feature.get("properties") or {}
        if str(properties.get("name", "")).strip().lower() == wanted:
            return feature
    return None


def _level(value: Any) -> Optional[int]:
    try:
        level = int(value)
    except (TypeError, ValueError):
        return None
    return level if 1 <= level <= 5 else None


def _plain(value: Any) -> Optional[str]:
    text = to_text(value)
    if text is None:
        return None
    return to_text(" ".join(_TAGS.sub(" ", text).replace("&nbsp;", " ").split()))


def map_zone(feature: Mapping[str, Any]) -> AvalancheForecast:
    properties = feature.get("properties") or {}
    level = _level(properties.get("danger_level"))
    return AvalancheForecast(
        zone=to_text(properties.get("name")) or "Unknown zone",
        level=level,
        danger=DANGER_NAMES.get(level, "No Rating"),
        summary=_plain(properties.get("travel_advice")),
        link=to_text(properties.get("link")),
        updated=to_text(properties.get("start_date")),
    )


def map_problems(product: Any) -> List[str]:
    if not isinstance(product, Mapping):
        return []
    problems = product.get("forecast_avalanche_problems") or []
    names = [to_text(problem.get("name")) for problem in problems if isinstance(problem, Mapping)]
    return [name for name in names if name]


async def fetch_avalanche(
    fetcher: HttpFetcher, config: AppConfig, *, trace_id: str | None = None
) -> Optional[AvalancheForecast]:
    payload = await fetcher.get_json(config.source(SOURCE).url or MAP_LAYER_URL, source=SOURCE, trace_id=trace_id)
    feature = find_zone(payload, config.avalanche_zone)
    if feature is None:
        logger.warning("avalanche.zone_missing", zone=config.avalanche_zone, trace_id=trace_id)
        return None

    forecast = map_zone(feature)
    zone_id = feature.get("id")
    if zone_id is None or forecast.level is None:
        return forecast

    # Problems live on the full product; the rating stands without them.
    try:
        product = await fetcher.get_json(
            PRODUCT_URL,
            params={"type": "forecast", "center_id": "NWAC", "zone_id": zone_id},
            source=SOURCE,
            trace_id=trace_id,
        )
    except SourceError as exc:
        logger.warning("avalanche.problems_unavailable", error=str(exc), trace_id=trace_id)
        return forecast
    forecast.problems = map_problems(product)
    if not forecast.summary and isinstance(product, Mapping):
        forecast.summary = _plain(product.get("bottom_line"))
    return forecast
