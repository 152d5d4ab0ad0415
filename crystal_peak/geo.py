"""Great-circle distance helpers for filtering nearby stations, cameras and passes."""
from __future__ import annotations

from math import asin, cos, radians, sin, sqrt
from typing import Any, Callable, Iterable, List, Optional, Tuple, TypeVar

EARTH_RADIUS_MILES = 3958.8

T = TypeVar("T")


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate the great circle distance in miles between two points."""
    lat1, lon1, lat2, lon2 = map(radians, [lat1, lon1, lat2, lon2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_MILES * asin(sqrt(a))


def to_coordinate(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    # WSDOT reports 0,0 for stations with no fix
    return number if number != 0 else None


def within_radius(
    items: Iterable[T],
    coords: Callable[[T], Tuple[Optional[float], Optional[float]]],
    *,
    latitude: float,
    longitude: float,
    radius_miles: float,
) -> List[Tuple[float, T]]:
    """Return ``(distance, item)`` pairs inside the radius, nearest first.

    Items without usable coordinates are dropped.
    """
    matches: List[Tuple[float, T]] = []
    for item in items:
        lat, lon = coords(item)
        if lat is None or lon is None:
            continue
        distance = haversine_miles(latitude, longitude, lat, lon)
        if distance <= radius_miles:
            matches.append((distance, item))
    matches.sort(key=lambda pair: pair[0])
    return matches
