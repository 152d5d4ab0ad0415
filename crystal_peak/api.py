from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel

from crystal_peak.config import AppConfig, app_config
from crystal_peak.http_client import SourceError
from crystal_peak.logging import get_logger, setup_logging
from crystal_peak.state import StateAggregator, UnknownPassError, build_aggregator

setup_logging(app_config.logging)
logger = get_logger(__name__)


class HealthResponse(BaseModel):
    ok: bool
    time: datetime


class ErrorResponse(BaseModel):
    error: str


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


def get_aggregator(request: Request) -> StateAggregator:
    return request.app.state.aggregator


def _static_file(static_dir: Path, requested: str) -> Optional[Path]:
    root = static_dir.resolve()
    candidate = (root / requested).resolve()
    if candidate != root and root not in candidate.parents:
        return None
    if candidate.is_file():
        return candidate
    index = root / "index.html"
    return index if index.is_file() else None


def create_app(
    aggregator: Optional[StateAggregator] = None,
    config: Optional[AppConfig] = None,
) -> FastAPI:
    config = config or (aggregator.config if aggregator else app_config)
    app = FastAPI(title="Crystal Peak API")
    app.state.aggregator = aggregator or build_aggregator(config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("shutdown")
    async def _close_aggregator() -> None:
        await app.state.aggregator.aclose()

    @app.get("/api/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(ok=True, time=datetime.now(timezone.utc))

    @app.get("/api/state")
    async def state(aggregator: StateAggregator = Depends(get_aggregator)) -> JSONResponse:
        try:
            snapshot = await aggregator.get_state()
            return JSONResponse(snapshot.to_dict())
        except Exception as exc:
            logger.error("state.error", error=str(exc), exc_info=True)
            return _error(500, "Failed to build state")

    @app.get("/api/pass-report/{pass_id}")
    async def pass_report(pass_id: str, aggregator: StateAggregator = Depends(get_aggregator)) -> JSONResponse:
        try:
            report = await aggregator.get_pass_report(pass_id)
        except UnknownPassError:
            return _error(404, "Unknown pass")
        except (SourceError, ValueError) as exc:
            logger.warning("pass_report.error", pass_id=pass_id, error=str(exc))
            return _error(502, str(exc))
        return JSONResponse(report.to_dict())

    @app.get("/api/{path:path}", include_in_schema=False)
    async def unknown_api(path: str) -> JSONResponse:
        return _error(404, "Not found")

    static_dir = Path(config.server.static_dir)
    if static_dir.is_dir():
        logger.info("static.enabled", static_dir=str(static_dir))

        @app.get("/{path:path}", include_in_schema=False)
        async def spa(path: str):
            target = _static_file(static_dir, path)
            if target is None:
                return _error(404, "Not found")
            return FileResponse(target)

    return app


app = create_app()
