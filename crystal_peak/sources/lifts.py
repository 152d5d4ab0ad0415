"""Lift and run status scraped from a configurable status page.

Rows and fields are located with the CSS selectors from the ``lifts`` source
settings, so a markup change only needs a config update.
"""
from __future__ import annotations

from typing import Dict, List, Mapping, Optional

from bs4 import Tag

from ..config import AppConfig
from ..http_client import HttpFetcher
from ..logging import get_logger
from ..models import LiftBoard, LiftStatus, RunStatus
from .base import create_soup, normalize_status, slugify, to_float, to_text

logger = get_logger(__name__)

SOURCE = "lifts"

DEFAULT_SELECTORS: Dict[str, str] = {
    "lift_row": "[data-lift]",
    "run_row": "[data-run]",
    "name": ".name",
    "status": ".status",
    "type": ".type",
    "area": ".area",
    "difficulty": ".difficulty",
    "groomed": ".groomed",
    "top_elev": ".top-elev",
    "bottom_elev": ".bottom-elev",
    "last_change": ".updated",
    "notes": ".notes",
}

_GROOMED_FALSE = {"", "no", "false", "0", "not groomed"}


def _field(row: Tag, selectors: Mapping[str, str], key: str) -> Optional[str]:
    selector = selectors.get(key)
    if selector:
        element = row.select_one(selector)
        if element is not None:
            return to_text(element.get_text(" ", strip=True))
    attribute = row.get(f"data-{key.replace('_', '-')}")
    return to_text(attribute) if isinstance(attribute, str) else None


def _groomed(row: Tag, selectors: Mapping[str, str]) -> bool:
    selector = selectors.get("groomed")
    marker = row.select_one(selector) if selector else None
    if marker is not None:
        # an empty marker element (an icon) means groomed
        text = marker.get_text(" ", strip=True).lower()
        return not text or text not in _GROOMED_FALSE
    value = row.get("data-groomed")
    return isinstance(value, str) and value.strip().lower() not in _GROOMED_FALSE


def parse_lift_board(html: str, selectors: Optional[Mapping[str, str]] = None) -> LiftBoard:
    selectors = {**DEFAULT_SELECTORS, **(selectors or {})}
    soup = create_soup(html)

    lifts: List[LiftStatus] = []
    for row in soup.select(selectors["lift_row"]):
        name = _field(row, selectors, "name")
        if not name:
            continue
        top = to_float(_field(row, selectors, "top_elev"))
        bottom = to_float(_field(row, selectors, "bottom_elev"))
        lifts.append(
            LiftStatus(
                id=slugify(name),
                name=name,
                status=normalize_status(_field(row, selectors, "status")),
                type=_field(row, selectors, "type"),
                top_elev=top,
                bottom_elev=bottom,
                vertical=top - bottom if top is not None and bottom is not None else None,
                area=_field(row, selectors, "area"),
                last_change=_field(row, selectors, "last_change"),
                notes=_field(row, selectors, "notes"),
            )
        )

    runs: List[RunStatus] = []
    for row in soup.select(selectors["run_row"]):
        name = _field(row, selectors, "name")
        if not name:
            continue
        runs.append(
            RunStatus(
                id=slugify(name),
                name=name,
                status=normalize_status(_field(row, selectors, "status")),
                difficulty=(_field(row, selectors, "difficulty") or "").lower().replace(" ", "-") or None,
                groomed=_groomed(row, selectors),
                zone=_field(row, selectors, "area"),
                message=_field(row, selectors, "notes"),
            )
        )
    return LiftBoard(lifts=lifts, runs=runs)


async def fetch_lift_board(fetcher: HttpFetcher, config: AppConfig, *, trace_id: str | None = None) -> LiftBoard:
    settings = config.source(SOURCE)
    if not settings.url:
        logger.debug("source.skipped", source=SOURCE, reason="no status url", trace_id=trace_id)
        return LiftBoard()
    html = await fetcher.get_text(settings.url, extra_headers={"Accept": "text/html"}, source=SOURCE, trace_id=trace_id)
    return parse_lift_board(html, settings.selectors)
