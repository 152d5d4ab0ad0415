from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional

import yaml
from dotenv import load_dotenv

_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "config" / "defaults.yaml"
load_dotenv()


def _bool_from_env(value: str | None) -> Optional[bool]:
    if value is None:
        return None
    value = value.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return None


def _number_from_env(value: str | None, cast: Callable[[str], float] = float) -> Optional[float]:
    if value is None or not value.strip():
        return None
    try:
        return cast(value.strip())
    except ValueError:
        return None


def _merge_dicts(base: Dict, overrides: Mapping) -> Dict:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), Mapping):
            merged[key] = _merge_dicts(base[key], value)
        else:
            merged[key] = value
    return merged


def _load_yaml(path: Path) -> Dict:
    if not path.exists():
        return {}
    return yaml.safe_load(path.read_text()) or {}


@dataclass
class LocationConfig:
    name: str = "Crystal Mountain"
    latitude: float = 46.932517
    longitude: float = -121.48067
    radius_miles: float = 40.0


@dataclass
class CacheConfig:
    state_ttl_seconds: float = 60.0
    pass_report_ttl_seconds: float = 600.0


@dataclass
class HttpConfig:
    timeout_seconds: float = 8.0
    user_agent: str = "CrystalPeak/1.0 (contact@example.com)"


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 3000
    static_dir: str = "dist"


@dataclass
class LoggingConfig:
    level: str = "INFO"
    json: bool = True


@dataclass
class SourceSettings:
    url: str = ""
    selectors: Dict[str, str] = field(default_factory=dict)


@dataclass
class CamSettings:
    id: str
    name: str
    category: str = "mountain"
    link: Optional[str] = None
    desc: Optional[str] = None
    src: Optional[str] = None
    type: str = "external"


@dataclass
class AppConfig:
    location: LocationConfig = field(default_factory=LocationConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    sources: Dict[str, SourceSettings] = field(default_factory=dict)
    cams: List[CamSettings] = field(default_factory=list)
    avalanche_zone: str = "West Slopes South"
    wsdot_access_code: Optional[str] = None

    def source(self, name: str) -> SourceSettings:
        return self.sources.get(name) or SourceSettings()


def _apply_overrides(section: Dict, env: Mapping[str, str], names: Mapping[str, tuple]) -> Dict:
    for env_name, (key, cast) in names.items():
        value = env.get(env_name)
        if cast is bool:
            parsed = _bool_from_env(value)
        elif cast is str:
            parsed = value.strip() if value and value.strip() else None
        else:
            parsed = _number_from_env(value, cast)
        if parsed is not None:
            section[key] = parsed
    return section


def load_config(*, config_path: str | None = None, env: Mapping[str, str] | None = None) -> AppConfig:
    env = dict(os.environ if env is None else env)
    data = _load_yaml(_DEFAULT_CONFIG_PATH)

    explicit_path = config_path or env.get("CRYSTAL_CONFIG_PATH")
    if explicit_path:
        data = _merge_dicts(data, _load_yaml(Path(explicit_path)))

    location_data = _apply_overrides(
        dict(data.get("location", {})),
        env,
        {
            "CRYSTAL_LAT": ("latitude", float),
            "CRYSTAL_LON": ("longitude", float),
            "CRYSTAL_RADIUS_MILES": ("radius_miles", float),
        },
    )
    cache_data = _apply_overrides(
        dict(data.get("cache", {})),
        env,
        {
            "CRYSTAL_STATE_TTL": ("state_ttl_seconds", float),
            "CRYSTAL_PASS_REPORT_TTL": ("pass_report_ttl_seconds", float),
        },
    )
    http_data = _apply_overrides(
        dict(data.get("http", {})),
        env,
        {
            "CRYSTAL_HTTP_TIMEOUT": ("timeout_seconds", float),
            "NWS_USER_AGENT": ("user_agent", str),
        },
    )
    server_data = _apply_overrides(
        dict(data.get("server", {})),
        env,
        {
            "HOST": ("host", str),
            "PORT": ("port", int),
            "CRYSTAL_STATIC_DIR": ("static_dir", str),
        },
    )
    logging_data = _apply_overrides(
        dict(data.get("logging", {})),
        env,
        {
            "CRYSTAL_LOG_LEVEL": ("level", str),
            "CRYSTAL_LOG_JSON": ("json", bool),
        },
    )

    sources = {
        key: SourceSettings(**(details or {})) for key, details in data.get("sources", {}).items()
    }
    url_overrides = {
        "lifts": env.get("CRYSTAL_LIFTS_URL"),
        "snow": env.get("CRYSTAL_SNOW_REPORT_URL"),
    }
    for key, url in url_overrides.items():
        if url is None:
            continue
        current = sources.get(key) or SourceSettings()
        sources[key] = SourceSettings(url=url.strip(), selectors=dict(current.selectors))

    access_code = (env.get("WSDOT_ACCESS_CODE") or data.get("wsdot_access_code") or "").strip()

    return AppConfig(
        location=LocationConfig(**location_data),
        cache=CacheConfig(**cache_data),
        http=HttpConfig(**http_data),
        server=ServerConfig(**server_data),
        logging=LoggingConfig(**logging_data),
        sources=sources,
        cams=[CamSettings(**cam) for cam in data.get("cams", [])],
        avalanche_zone=env.get("NWAC_ZONE") or data.get("avalanche_zone") or AppConfig.avalanche_zone,
        wsdot_access_code=access_code or None,
    )


app_config = load_config()
