"""National Weather Service point forecast (daily + hourly).

A points lookup resolves the gridpoint forecast URLs for the reference
coordinates; both forecasts are then fetched together.
"""
from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from ..config import AppConfig
from ..http_client import HttpFetcher, SourceError
from ..models import DailyForecast, Forecast, HourlyForecast
from .base import is_snowy, to_float, to_text

SOURCE = "nws"
DEFAULT_BASE_URL = "https://api.weather.gov"
DAILY_PERIODS = 14
HOURLY_PERIODS = 48

_GEO_JSON = {"Accept": "application/geo+json"}


def _periods(payload: Any) -> List[Mapping[str, Any]]:
    if not isinstance(payload, Mapping):
        return []
    periods = (payload.get("properties") or {}).get("periods") or []
    return [period for period in periods if isinstance(period, Mapping)]


def pair_daily_periods(periods: Sequence[Mapping[str, Any]]) -> List[DailyForecast]:
    """Group alternating day/night periods into one entry per day.

    Even-indexed periods supply the high and text; the following odd period,
    when present, supplies the low.
    """
    daily: List[DailyForecast] = []
    for index in range(0, len(periods), 2):
        day = periods[index]
        night = periods[index + 1] if index + 1 < len(periods) else None
        text = to_text(day.get("shortForecast")) or ""
        name = to_text(day.get("name"))
        daily.append(
            DailyForecast(
                day=name[:3] if name else "Day",
                hi=to_float(day.get("temperature")),
                lo=to_float(night.get("temperature")) if night else None,
                snow=1 if is_snowy(text) else 0,
                text=text,
                icon=to_text(day.get("icon")),
                desc=to_text(day.get("detailedForecast")),
            )
        )
    return daily


def _hour_of(value: Any) -> Optional[int]:
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value).hour
    except ValueError:
        return None


def map_hourly(periods: Sequence[Mapping[str, Any]]) -> List[HourlyForecast]:
    hourly: List[HourlyForecast] = []
    for period in periods:
        text = to_text(period.get("shortForecast"))
        hourly.append(
            HourlyForecast(
                time=_hour_of(period.get("startTime")),
                temp=to_float(period.get("temperature")),
                snow=0.2 if is_snowy(text) else 0,
                wind=to_text(period.get("windSpeed")),
            )
        )
    return hourly


def map_forecast(daily_payload: Any, hourly_payload: Any) -> Forecast:
    return Forecast(
        daily=pair_daily_periods(_periods(daily_payload)[:DAILY_PERIODS]),
        hourly=map_hourly(_periods(hourly_payload)[:HOURLY_PERIODS]),
    )


def _forecast_urls(point: Any) -> Tuple[str, str]:
    properties = point.get("properties") if isinstance(point, Mapping) else None
    if not isinstance(properties, Mapping):
        raise SourceError("points payload has no properties", source=SOURCE)
    daily_url = properties.get("forecast")
    hourly_url = properties.get("forecastHourly")
    if not isinstance(daily_url, str) or not isinstance(hourly_url, str):
        raise SourceError("points payload has no forecast URLs", source=SOURCE)
    return daily_url, hourly_url


async def fetch_forecast(fetcher: HttpFetcher, config: AppConfig, *, trace_id: str | None = None) -> Forecast:
    base_url = (config.source(SOURCE).url or DEFAULT_BASE_URL).rstrip("/")
    location = config.location
    point = await fetcher.get_json(
        f"{base_url}/points/{location.latitude:.4f},{location.longitude:.4f}",
        extra_headers=_GEO_JSON,
        source=SOURCE,
        trace_id=trace_id,
    )
    daily_url, hourly_url = _forecast_urls(point)

    daily, hourly = await asyncio.gather(
        fetcher.get_json(daily_url, extra_headers=_GEO_JSON, source=SOURCE, trace_id=trace_id),
        fetcher.get_json(hourly_url, extra_headers=_GEO_JSON, source=SOURCE, trace_id=trace_id),
    )
    return map_forecast(daily, hourly)
