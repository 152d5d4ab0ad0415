"""WSDOT mountain pass conditions near the resort."""
from __future__ import annotations

import re
from typing import Any, List, Mapping, Optional, Tuple

from ..config import AppConfig
from ..geo import to_coordinate, within_radius
from ..http_client import HttpFetcher
from ..logging import get_logger
from ..models import PassCondition
from .base import iso_or_none, parse_wcf_date, slugify, to_float, to_text

logger = get_logger(__name__)

SOURCE = "passes"
REPORT_SOURCE = "pass_report"
DEFAULT_REPORT_URL = "https://wsdot.com/travel/real-time/mountainpasses/{slug}"

_ROUTE_SUFFIX = re.compile(r"\s+(?:I|US|SR)[- ]?\d+.*$", re.IGNORECASE)
_NO_RESTRICTION = "no restrictions"


def report_slug(name: str) -> str:
    """``"White Pass US 12"`` -> ``"white-pass"``."""
    return slugify(_ROUTE_SUFFIX.sub("", name))


def report_url(config: AppConfig, name: str) -> str:
    template = config.source(REPORT_SOURCE).url or DEFAULT_REPORT_URL
    return template.format(slug=report_slug(name))


def _restriction(raw: Any) -> Tuple[Optional[str], Optional[str]]:
    if not isinstance(raw, Mapping):
        return None, None
    return to_text(raw.get("TravelDirection")), to_text(raw.get("RestrictionText"))


def _travel_by_direction(raw: Mapping[str, Any]) -> Tuple[Optional[str], Optional[str]]:
    eastbound: Optional[str] = None
    westbound: Optional[str] = None
    for key in ("RestrictionOne", "RestrictionTwo"):
        direction, text = _restriction(raw.get(key))
        if not text or not direction:
            continue
        if direction.lower().startswith("east"):
            eastbound = text
        elif direction.lower().startswith("west"):
            westbound = text
    return eastbound, westbound


def pass_status(raw: Mapping[str, Any]) -> str:
    """Summarize a pass as ``closed``, ``advisory`` or its road condition."""
    for key in ("RestrictionOne", "RestrictionTwo"):
        _, text = _restriction(raw.get(key))
        if text and "closed" in text.lower():
            return "closed"
    if raw.get("TravelAdvisoryActive") is True:
        return "advisory"
    return to_text(raw.get("RoadCondition")) or "open"


def _pass_coords(raw: Mapping[str, Any]) -> Tuple[Optional[float], Optional[float]]:
    return to_coordinate(raw.get("Latitude")), to_coordinate(raw.get("Longitude"))


def map_passes(payload: Any, config: AppConfig) -> List[PassCondition]:
    if not isinstance(payload, list):
        return []
    location = config.location
    candidates = [raw for raw in payload if isinstance(raw, Mapping) and raw.get("MountainPassId") is not None]
    passes: List[PassCondition] = []
    for distance, raw in within_radius(
        candidates,
        _pass_coords,
        latitude=location.latitude,
        longitude=location.longitude,
        radius_miles=location.radius_miles,
    ):
        name = to_text(raw.get("MountainPassName")) or f"Pass {raw.get('MountainPassId')}"
        eastbound, westbound = _travel_by_direction(raw)
        restriction = next(
            (text for text in (eastbound, westbound) if text and text.lower() != _NO_RESTRICTION),
            None,
        )
        passes.append(
            PassCondition(
                id=str(raw.get("MountainPassId")),
                name=name,
                status=pass_status(raw),
                restriction=restriction,
                travel_eastbound=eastbound,
                travel_westbound=westbound,
                conditions=to_text(raw.get("RoadCondition")),
                weather=to_text(raw.get("WeatherCondition")),
                temp=to_float(raw.get("TemperatureInFahrenheit")),
                elevation_ft=to_float(raw.get("ElevationInFeet")),
                updated=iso_or_none(parse_wcf_date(raw.get("DateUpdated"))),
                link=report_url(config, name),
                distance_miles=round(distance, 1),
            )
        )
    return passes


async def fetch_passes(fetcher: HttpFetcher, config: AppConfig, *, trace_id: str | None = None) -> List[PassCondition]:
    if not config.wsdot_access_code:
        logger.debug("source.skipped", source=SOURCE, reason="no access code", trace_id=trace_id)
        return []

    payload = await fetcher.get_json(
        config.source(SOURCE).url,
        params={"AccessCode": config.wsdot_access_code},
        source=SOURCE,
        trace_id=trace_id,
    )
    return map_passes(payload, config)
