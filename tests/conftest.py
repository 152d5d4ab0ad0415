from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict

import httpx
import pytest

from crystal_peak.config import AppConfig, load_config
from crystal_peak.http_client import HttpFetcher

FIXTURES = Path(__file__).parent / "fixtures"

Handler = Callable[[httpx.Request], httpx.Response]


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def fixture_text(name: str) -> str:
    return (FIXTURES / name).read_text()


def make_fetcher(handler: Handler, config: AppConfig | None = None) -> HttpFetcher:
    config = config or load_config(env={})
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpFetcher(client=client, config=config.http)


@pytest.fixture
def config() -> AppConfig:
    return load_config(env={})


@pytest.fixture
def wsdot_config() -> AppConfig:
    return load_config(env={"WSDOT_ACCESS_CODE": "test-code"})


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def route(routes: Dict[str, Handler], default_status: int = 404) -> Handler:
    """Dispatch on the first route key contained in the request URL."""

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        for fragment, target in routes.items():
            if fragment in url:
                return target(request)
        return httpx.Response(default_status)

    return handler
