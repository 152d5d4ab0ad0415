from __future__ import annotations

import logging

import structlog

from crystal_peak.config import LoggingConfig
from crystal_peak.logging import SERVICE, add_service, renderer_for, setup_logging


def test_events_are_tagged_with_service():
    event = add_service(None, "info", {"event": "state.refresh.start"})

    assert event == {"event": "state.refresh.start", "service": SERVICE}
    assert add_service(None, "info", {"event": "x", "service": "other"})["service"] == "other"


def test_renderer_follows_json_flag():
    assert isinstance(renderer_for(LoggingConfig(json=True)), structlog.processors.JSONRenderer)
    assert isinstance(renderer_for(LoggingConfig(json=False)), structlog.dev.ConsoleRenderer)


def test_forced_setup_applies_level_and_quiets_httpx():
    try:
        setup_logging(LoggingConfig(level="debug", json=True), force=True)

        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING

        setup_logging(LoggingConfig(level="error", json=True), force=True)

        assert logging.getLogger("httpx").level == logging.ERROR
    finally:
        setup_logging(LoggingConfig(), force=True)
