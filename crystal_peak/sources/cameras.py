"""Curated resort cameras plus nearby WSDOT highway cameras."""
from __future__ import annotations

from typing import Any, List, Mapping, Optional, Tuple

from ..config import AppConfig, CamSettings
from ..geo import to_coordinate, within_radius
from ..http_client import HttpFetcher
from ..logging import get_logger
from ..models import Camera
from .base import to_text

logger = get_logger(__name__)

SOURCE = "cameras"


def curated_cams(settings: List[CamSettings]) -> List[Camera]:
    return [
        Camera(
            id=cam.id,
            name=cam.name,
            type=cam.type,
            category=cam.category,
            link=cam.link,
            src=cam.src,
            desc=cam.desc,
        )
        for cam in settings
    ]


def _camera_coords(raw: Mapping[str, Any]) -> Tuple[Optional[float], Optional[float]]:
    location = raw.get("CameraLocation")
    if not isinstance(location, Mapping):
        return None, None
    return to_coordinate(location.get("Latitude")), to_coordinate(location.get("Longitude"))


def map_highway_cameras(
    payload: Any, *, latitude: float, longitude: float, radius_miles: float
) -> List[Camera]:
    if not isinstance(payload, list):
        return []
    candidates = [
        raw
        for raw in payload
        if isinstance(raw, Mapping) and raw.get("IsActive", True) and raw.get("ImageURL")
    ]
    cams: List[Camera] = []
    for distance, raw in within_radius(
        candidates, _camera_coords, latitude=latitude, longitude=longitude, radius_miles=radius_miles
    ):
        location = raw.get("CameraLocation") or {}
        image = to_text(raw.get("ImageURL"))
        cams.append(
            Camera(
                id=f"wsdot-{raw.get('CameraID')}",
                name=to_text(raw.get("Title")) or "WSDOT camera",
                type="image",
                category="road",
                link=image,
                src=image,
                desc=to_text(location.get("Description")) or to_text(raw.get("Description")),
                distance_miles=round(distance, 1),
            )
        )
    return cams


async def fetch_cameras(fetcher: HttpFetcher, config: AppConfig, *, trace_id: str | None = None) -> List[Camera]:
    cams = curated_cams(config.cams)
    if not config.wsdot_access_code:
        logger.debug("source.skipped", source=SOURCE, reason="no access code", trace_id=trace_id)
        return cams

    payload = await fetcher.get_json(
        config.source(SOURCE).url,
        params={"AccessCode": config.wsdot_access_code},
        source=SOURCE,
        trace_id=trace_id,
    )
    location = config.location
    return cams + map_highway_cameras(
        payload,
        latitude=location.latitude,
        longitude=location.longitude,
        radius_miles=location.radius_miles,
    )
