"""structlog setup for the aggregator.

Events are dotted names (``http.fetch``, ``source.failure``, ``state.refresh.complete``)
with the source and trace id as fields, rendered as JSON lines or, for local
runs, with the console renderer.
"""
from __future__ import annotations

import logging as py_logging
from typing import Any, MutableMapping, Optional

import structlog

from crystal_peak.config import LoggingConfig, app_config

SERVICE = "crystal_peak"

_configured = False


def add_service(_logger: Any, _method: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    event_dict.setdefault("service", SERVICE)
    return event_dict


def renderer_for(config: LoggingConfig):
    if config.json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def setup_logging(config: Optional[LoggingConfig] = None, *, force: bool = False) -> None:
    """Configure structlog and the stdlib root logger once per process.

    ``force`` reapplies the configuration, e.g. after the level changed.
    """
    global _configured
    if _configured and not force:
        return

    config = config or app_config.logging
    level = getattr(py_logging, str(config.level).upper(), py_logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_service,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer_for(config),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    py_logging.basicConfig(level=level)
    py_logging.getLogger().setLevel(level)
    # httpx logs every request at INFO; http.fetch events already cover that
    py_logging.getLogger("httpx").setLevel(max(level, py_logging.WARNING))
    _configured = True


def get_logger(name: str = __name__):
    if not _configured:
        setup_logging()
    return structlog.get_logger(name)
