from __future__ import annotations

import httpx
from fastapi.testclient import TestClient

from conftest import FakeClock, make_fetcher
from crystal_peak.api import create_app
from crystal_peak.cache import SnapshotCache
from crystal_peak.state import StateAggregator


def _client(config, handler) -> TestClient:
    aggregator = StateAggregator(
        config,
        fetcher=make_fetcher(handler, config),
        cache=SnapshotCache(60, clock=FakeClock()),
    )
    return TestClient(create_app(aggregator=aggregator))


def test_health_without_credentials(config):
    client = _client(config, lambda _: httpx.Response(500))

    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["time"]


def test_state_is_200_when_every_upstream_fails(config):
    client = _client(config, lambda _: httpx.Response(502))

    response = client.get("/api/state")

    assert response.status_code == 200
    body = response.json()
    assert body["ROADS"]["passes"] == []
    assert body["WEATHER"] == []
    assert body["AVAL"] is None
    assert body["SNOW"] is None
    assert set(body) == {"generatedAt", "FORECAST", "CAMS", "WEATHER", "ROADS", "AVAL", "SNOW", "LIFTS", "RUNS"}


def test_state_cached_between_polls(config):
    client = _client(config, lambda _: httpx.Response(500))

    first = client.get("/api/state").json()
    second = client.get("/api/state").json()

    assert first["generatedAt"] == second["generatedAt"]


def test_state_assembly_error_is_500(config):
    class Broken(StateAggregator):
        async def get_state(self):
            raise RuntimeError("token=abc123 rejected by upstream")

    client = TestClient(create_app(aggregator=Broken(config, fetcher=make_fetcher(lambda _: httpx.Response(500), config))))

    response = client.get("/api/state")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to build state"}
    assert "abc123" not in response.text


def test_unknown_pass_report_is_404(config):
    client = _client(config, lambda _: httpx.Response(500))

    response = client.get("/api/pass-report/999")

    assert response.status_code == 404
    assert response.json() == {"error": "Unknown pass"}


def test_unknown_api_path_is_404(config):
    client = _client(config, lambda _: httpx.Response(500))

    assert client.get("/api/nope").status_code == 404


def test_spa_fallback_serves_index(tmp_path, config):
    (tmp_path / "index.html").write_text("<html>dashboard</html>")
    (tmp_path / "app.js").write_text("console.log('hi')")
    config.server.static_dir = str(tmp_path)
    client = _client(config, lambda _: httpx.Response(500))

    assert client.get("/app.js").text == "console.log('hi')"
    assert "dashboard" in client.get("/lifts").text
    assert client.get("/api/health").json()["ok"] is True
