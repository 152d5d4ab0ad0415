"""WSDOT road weather stations near the resort."""
from __future__ import annotations

from typing import Any, List, Mapping, Optional, Tuple

from ..config import AppConfig
from ..geo import to_coordinate, within_radius
from ..http_client import HttpFetcher
from ..logging import get_logger
from ..models import StationReading
from .base import iso_or_none, parse_wcf_date, to_float, to_text

logger = get_logger(__name__)

SOURCE = "stations"


def _station_coords(raw: Mapping[str, Any]) -> Tuple[Optional[float], Optional[float]]:
    return to_coordinate(raw.get("Latitude")), to_coordinate(raw.get("Longitude"))


def map_stations(
    payload: Any, *, latitude: float, longitude: float, radius_miles: float
) -> List[StationReading]:
    if not isinstance(payload, list):
        return []
    candidates = [raw for raw in payload if isinstance(raw, Mapping)]
    readings: List[StationReading] = []
    for distance, raw in within_radius(
        candidates, _station_coords, latitude=latitude, longitude=longitude, radius_miles=radius_miles
    ):
        station_id = raw.get("StationID")
        readings.append(
            StationReading(
                id=str(station_id) if station_id is not None else to_text(raw.get("StationName")) or "station",
                name=to_text(raw.get("StationName")) or "Weather station",
                temp=to_float(raw.get("TemperatureInFahrenheit")),
                wind=to_float(raw.get("WindSpeedInMPH")),
                gust=to_float(raw.get("WindGustSpeedInMPH")),
                dir=to_text(raw.get("WindDirectionCardinal")),
                humidity=to_float(raw.get("RelativeHumidity")),
                elev=to_float(raw.get("ElevationInFeet")),
                updated=iso_or_none(parse_wcf_date(raw.get("ReadingTime"))),
                distance_miles=round(distance, 1),
            )
        )
    return readings


async def fetch_stations(
    fetcher: HttpFetcher, config: AppConfig, *, trace_id: str | None = None
) -> List[StationReading]:
    if not config.wsdot_access_code:
        logger.debug("source.skipped", source=SOURCE, reason="no access code", trace_id=trace_id)
        return []

    payload = await fetcher.get_json(
        config.source(SOURCE).url,
        params={"AccessCode": config.wsdot_access_code},
        source=SOURCE,
        trace_id=trace_id,
    )
    location = config.location
    return map_stations(
        payload,
        latitude=location.latitude,
        longitude=location.longitude,
        radius_miles=location.radius_miles,
    )
