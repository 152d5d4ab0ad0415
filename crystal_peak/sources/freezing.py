"""Freezing-level height from Open-Meteo, summarized per day."""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from ..config import AppConfig
from ..http_client import HttpFetcher
from ..models import FreezingLevelDay
from .base import to_float

SOURCE = "freezing"
OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"
FORECAST_DAYS = 7


def map_freezing_levels(payload: Any) -> Optional[List[FreezingLevelDay]]:
    """Collapse hourly heights (meters ASL) into daily min/max.

    Returns ``None`` when the payload carries no usable hours.
    """
    hourly = payload.get("hourly") if isinstance(payload, Mapping) else None
    if not isinstance(hourly, Mapping):
        return None
    times = hourly.get("time") or []
    heights = hourly.get("freezing_level_height") or []

    by_day: Dict[str, List[float]] = {}
    for stamp, height in zip(times, heights):
        value = to_float(height)
        if not isinstance(stamp, str) or value is None:
            continue
        by_day.setdefault(stamp[:10], []).append(value)

    days: List[FreezingLevelDay] = []
    for day_key, values in by_day.items():
        try:
            label = date.fromisoformat(day_key).strftime("%a")
        except ValueError:
            continue
        days.append(FreezingLevelDay(day=label, date=day_key, min_m=min(values), max_m=max(values)))
    return days or None


async def fetch_freezing_levels(
    fetcher: HttpFetcher, config: AppConfig, *, trace_id: str | None = None
) -> Optional[List[FreezingLevelDay]]:
    params = {
        "latitude": config.location.latitude,
        "longitude": config.location.longitude,
        "hourly": "freezing_level_height",
        "forecast_days": FORECAST_DAYS,
        "timezone": "auto",
    }
    payload = await fetcher.get_json(
        config.source(SOURCE).url or OPEN_METEO_URL,
        params=params,
        source=SOURCE,
        trace_id=trace_id,
    )
    return map_freezing_levels(payload)
