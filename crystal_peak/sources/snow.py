"""Snow report scraped from the resort's OnTheSnow page.

Source: https://www.onthesnow.com/washington/crystal-mountain-wa/skireport
"""
from __future__ import annotations

import re
from typing import Optional

from ..config import AppConfig
from ..http_client import HttpFetcher
from ..logging import get_logger
from ..models import SnowReport
from .base import create_soup, find_surface_condition

logger = get_logger(__name__)

SOURCE = "snow"

_INCHES = r'(\d+(?:\.\d+)?)\s*["\u2033]'


def _inches(pattern: str, text: str) -> Optional[float]:
    match = re.search(pattern, text, re.IGNORECASE)
    return float(match.group(1)) if match else None


def parse_snow_report(html: str) -> Optional[SnowReport]:
    """Parse an OnTheSnow ski report into a :class:`SnowReport`.

    Returns ``None`` when the page carries none of the snow depths.
    """
    soup = create_soup(html)
    text = soup.get_text(" ", strip=True)

    surface_match = re.search(rf"Base\s*{_INCHES}\s*([A-Za-z]+(?:\s+[A-Za-z]+)?)\s*Conditions", text)
    surface = surface_match.group(2).strip() if surface_match else find_surface_condition(text)

    updated_match = re.search(r"Updated\s*:?\s*([A-Z][a-z]{2,8}\.?\s+\d{1,2}(?:,\s*\d{4})?)", text)

    report = SnowReport(
        new24h=_inches(rf"24h\s*{_INCHES}", text),
        new48h=_inches(rf"48h\s*{_INCHES}", text),
        base=_inches(rf"Base\s*{_INCHES}", text),
        season=_inches(rf"Season\s+(?:Total|Snowfall)\s*:?\s*{_INCHES}", text),
        surface=surface,
        updated=updated_match.group(1) if updated_match else None,
    )
    if report.is_empty():
        return None
    return report


async def fetch_snow_report(
    fetcher: HttpFetcher, config: AppConfig, *, trace_id: str | None = None
) -> Optional[SnowReport]:
    url = config.source(SOURCE).url
    if not url:
        logger.debug("source.skipped", source=SOURCE, reason="no report url", trace_id=trace_id)
        return None
    html = await fetcher.get_text(url, extra_headers={"Accept": "text/html"}, source=SOURCE, trace_id=trace_id)
    return parse_snow_report(html)
