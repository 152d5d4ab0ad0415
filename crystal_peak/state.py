from __future__ import annotations

import asyncio
import uuid
from typing import Awaitable, List, Optional, TypeVar

from .cache import SnapshotCache, TTLCache
from .config import AppConfig
from .http_client import HttpFetcher
from .logging import get_logger
from .models import Forecast, LiftBoard, PassCondition, PassReport, Roads, Snapshot
from .sources import avalanche, cameras, freezing, lifts, nws, pass_report, passes, snow, stations

logger = get_logger(__name__)

T = TypeVar("T")


class UnknownPassError(KeyError):
    """No pass with the requested id is in the current snapshot."""


class StateAggregator:
    """Builds the dashboard :class:`Snapshot` and serves it from a TTL cache.

    Every source runs concurrently under its own deadline. A source that
    fails or times out contributes its default value instead of aborting the
    pass.
    """

    def __init__(
        self,
        config: AppConfig,
        *,
        fetcher: Optional[HttpFetcher] = None,
        cache: Optional[SnapshotCache] = None,
        report_cache: Optional[pass_report.ReportCache] = None,
        deadline_seconds: Optional[float] = None,
    ) -> None:
        self.config = config
        self.fetcher = fetcher or HttpFetcher(config=config.http)
        self.cache = cache or SnapshotCache(config.cache.state_ttl_seconds)
        self.report_cache: pass_report.ReportCache = report_cache or TTLCache(config.cache.pass_report_ttl_seconds)
        # sources chain at most two requests
        self.deadline_seconds = (
            config.http.timeout_seconds * 2 + 1 if deadline_seconds is None else deadline_seconds
        )

    async def aclose(self) -> None:
        await self.fetcher.aclose()

    async def get_state(self) -> Snapshot:
        cached = self.cache.get()
        if cached is not None:
            logger.debug("state.cache_hit", generated_at=cached.generated_at.isoformat())
            return cached

        snapshot = await self.build_snapshot()
        self.cache.set(snapshot)
        return snapshot

    async def build_snapshot(self) -> Snapshot:
        trace_id = uuid.uuid4().hex
        logger.info("state.refresh.start", trace_id=trace_id)
        config, fetcher = self.config, self.fetcher

        async with asyncio.TaskGroup() as group:
            forecast_task = group.create_task(
                self._guarded(nws.SOURCE, nws.fetch_forecast(fetcher, config, trace_id=trace_id), Forecast(), trace_id)
            )
            freezing_task = group.create_task(
                self._guarded(
                    freezing.SOURCE,
                    freezing.fetch_freezing_levels(fetcher, config, trace_id=trace_id),
                    None,
                    trace_id,
                )
            )
            cams_task = group.create_task(
                self._guarded(
                    cameras.SOURCE,
                    cameras.fetch_cameras(fetcher, config, trace_id=trace_id),
                    cameras.curated_cams(config.cams),
                    trace_id,
                )
            )
            weather_task = group.create_task(
                self._guarded(stations.SOURCE, stations.fetch_stations(fetcher, config, trace_id=trace_id), [], trace_id)
            )
            passes_task = group.create_task(
                self._guarded(passes.SOURCE, passes.fetch_passes(fetcher, config, trace_id=trace_id), [], trace_id)
            )
            report_task = group.create_task(self._nearest_report(passes_task, trace_id))
            aval_task = group.create_task(
                self._guarded(avalanche.SOURCE, avalanche.fetch_avalanche(fetcher, config, trace_id=trace_id), None, trace_id)
            )
            snow_task = group.create_task(
                self._guarded(snow.SOURCE, snow.fetch_snow_report(fetcher, config, trace_id=trace_id), None, trace_id)
            )
            lifts_task = group.create_task(
                self._guarded(lifts.SOURCE, lifts.fetch_lift_board(fetcher, config, trace_id=trace_id), LiftBoard(), trace_id)
            )

        forecast: Forecast = forecast_task.result()
        forecast.freezing = freezing_task.result()
        board: LiftBoard = lifts_task.result()

        snapshot = Snapshot.now(
            forecast=forecast,
            cams=cams_task.result(),
            weather=weather_task.result(),
            roads=Roads(passes=passes_task.result(), report=report_task.result()),
            aval=aval_task.result(),
            snow=snow_task.result(),
            lifts=board.lifts,
            runs=board.runs,
        )
        logger.info(
            "state.refresh.complete",
            trace_id=trace_id,
            daily=len(snapshot.forecast.daily),
            cams=len(snapshot.cams),
            stations=len(snapshot.weather),
            passes=len(snapshot.roads.passes),
            avalanche=snapshot.aval is not None,
            lifts=len(snapshot.lifts),
        )
        return snapshot

    async def get_pass_report(self, pass_id: str) -> PassReport:
        """Return the scraped report for a pass listed in the current snapshot."""
        state = await self.get_state()
        mountain_pass = next((item for item in state.roads.passes if item.id == str(pass_id)), None)
        if mountain_pass is None:
            raise UnknownPassError(pass_id)
        return await pass_report.fetch_pass_report(self.fetcher, mountain_pass, cache=self.report_cache)

    async def _nearest_report(
        self, passes_task: "asyncio.Task[List[PassCondition]]", trace_id: str
    ) -> Optional[PassReport]:
        """Scrape the report for the nearest pass under its own deadline.

        Runs beside the passes fetch so a slow report page only leaves
        ``report`` empty.
        """
        pass_list = await passes_task
        if not pass_list:
            return None
        # passes are sorted nearest first
        return await self._guarded(
            pass_report.SOURCE,
            pass_report.fetch_pass_report(self.fetcher, pass_list[0], cache=self.report_cache, trace_id=trace_id),
            None,
            trace_id,
        )

    async def _guarded(self, source: str, work: Awaitable[T], default: T, trace_id: str) -> T:
        try:
            async with asyncio.timeout(self.deadline_seconds):
                return await work
        except Exception as exc:
            logger.warning(
                "source.failure",
                source=source,
                error=str(exc) or type(exc).__name__,
                trace_id=trace_id,
            )
            return default


def build_aggregator(config: AppConfig) -> StateAggregator:
    return StateAggregator(config)
