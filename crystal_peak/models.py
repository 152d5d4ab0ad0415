from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


class Record:
    """Flat record of optional scalar fields serialized with camelCase keys."""

    def to_dict(self) -> Dict[str, Any]:
        return {_camel(f.name): getattr(self, f.name) for f in fields(self)}


@dataclass
class DailyForecast(Record):
    day: str
    hi: Optional[float] = None
    lo: Optional[float] = None
    snow: int = 0
    text: str = ""
    icon: Optional[str] = None
    desc: Optional[str] = None


@dataclass
class HourlyForecast(Record):
    time: Optional[int] = None
    temp: Optional[float] = None
    snow: float = 0
    wind: Optional[str] = None


@dataclass
class FreezingLevelDay(Record):
    day: str
    date: str
    min_m: Optional[float] = None
    max_m: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        # the dashboard charts min_m / max_m verbatim
        return {"day": self.day, "date": self.date, "min_m": self.min_m, "max_m": self.max_m}


@dataclass
class Camera(Record):
    id: str
    name: str
    type: str = "external"
    category: str = "mountain"
    link: Optional[str] = None
    src: Optional[str] = None
    desc: Optional[str] = None
    distance_miles: Optional[float] = None


@dataclass
class StationReading(Record):
    id: str
    name: str
    temp: Optional[float] = None
    wind: Optional[float] = None
    gust: Optional[float] = None
    dir: Optional[str] = None
    humidity: Optional[float] = None
    elev: Optional[float] = None
    updated: Optional[str] = None
    distance_miles: Optional[float] = None


@dataclass
class PassCondition(Record):
    id: str
    name: str
    status: str = "unknown"
    restriction: Optional[str] = None
    travel_eastbound: Optional[str] = None
    travel_westbound: Optional[str] = None
    conditions: Optional[str] = None
    weather: Optional[str] = None
    temp: Optional[float] = None
    elevation_ft: Optional[float] = None
    updated: Optional[str] = None
    link: Optional[str] = None
    distance_miles: Optional[float] = None


@dataclass
class PassReport(Record):
    id: str
    name: Optional[str] = None
    url: Optional[str] = None
    conditions: Optional[str] = None
    weather: Optional[str] = None
    temperature: Optional[str] = None
    eastbound: Optional[str] = None
    westbound: Optional[str] = None
    updated: Optional[str] = None
    fetched_at: Optional[str] = None


@dataclass
class AvalancheForecast(Record):
    zone: str
    level: Optional[int] = None
    danger: str = "No Rating"
    problems: List[str] = field(default_factory=list)
    summary: Optional[str] = None
    link: Optional[str] = None
    updated: Optional[str] = None


@dataclass
class SnowReport(Record):
    new24h: Optional[float] = None
    new48h: Optional[float] = None
    base: Optional[float] = None
    season: Optional[float] = None
    surface: Optional[str] = None
    updated: Optional[str] = None

    def is_empty(self) -> bool:
        return all(value is None for value in (self.new24h, self.new48h, self.base, self.season))


@dataclass
class LiftStatus(Record):
    id: str
    name: str
    status: str = "closed"
    type: Optional[str] = None
    top_elev: Optional[float] = None
    bottom_elev: Optional[float] = None
    vertical: Optional[float] = None
    area: Optional[str] = None
    last_change: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class RunStatus(Record):
    id: str
    name: str
    status: str = "closed"
    difficulty: Optional[str] = None
    groomed: bool = False
    zone: Optional[str] = None
    message: Optional[str] = None


@dataclass
class Forecast:
    daily: List[DailyForecast] = field(default_factory=list)
    hourly: List[HourlyForecast] = field(default_factory=list)
    freezing: Optional[List[FreezingLevelDay]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "daily": [entry.to_dict() for entry in self.daily],
            "hourly": [entry.to_dict() for entry in self.hourly],
            "freezing": (
                {"daily": [entry.to_dict() for entry in self.freezing]} if self.freezing else None
            ),
        }


@dataclass
class Roads:
    passes: List[PassCondition] = field(default_factory=list)
    report: Optional[PassReport] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passes": [entry.to_dict() for entry in self.passes],
            "report": self.report.to_dict() if self.report else None,
        }


@dataclass
class LiftBoard:
    lifts: List[LiftStatus] = field(default_factory=list)
    runs: List[RunStatus] = field(default_factory=list)


@dataclass
class Snapshot:
    """The aggregated dashboard state.

    List fields default to empty lists and object fields to ``None`` so the
    serialized shape is the same whether or not any upstream answered.
    """

    generated_at: datetime
    forecast: Forecast = field(default_factory=Forecast)
    cams: List[Camera] = field(default_factory=list)
    weather: List[StationReading] = field(default_factory=list)
    roads: Roads = field(default_factory=Roads)
    aval: Optional[AvalancheForecast] = None
    snow: Optional[SnowReport] = None
    lifts: List[LiftStatus] = field(default_factory=list)
    runs: List[RunStatus] = field(default_factory=list)

    @staticmethod
    def now(**kwargs: Any) -> "Snapshot":
        return Snapshot(generated_at=datetime.now(timezone.utc), **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generatedAt": self.generated_at.isoformat().replace("+00:00", "Z"),
            "FORECAST": self.forecast.to_dict(),
            "CAMS": [cam.to_dict() for cam in self.cams],
            "WEATHER": [reading.to_dict() for reading in self.weather],
            "ROADS": self.roads.to_dict(),
            "AVAL": self.aval.to_dict() if self.aval else None,
            "SNOW": self.snow.to_dict() if self.snow else None,
            "LIFTS": [lift.to_dict() for lift in self.lifts],
            "RUNS": [run.to_dict() for run in self.runs],
        }
