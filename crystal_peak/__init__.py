"""Aggregated weather, road and avalanche conditions for a single ski area."""

from .cache import SnapshotCache, TTLCache
from .models import Snapshot
from .state import StateAggregator, build_aggregator

__all__ = [
    "Snapshot",
    "SnapshotCache",
    "StateAggregator",
    "TTLCache",
    "build_aggregator",
]
