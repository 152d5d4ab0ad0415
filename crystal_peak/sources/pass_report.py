"""Scraped WSDOT pass report page.

The page is meant for people, not polling, so parsed reports and failed
scrapes are kept in a :class:`~crystal_peak.cache.TTLCache` with a longer
lifetime than the snapshot.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Union

from ..cache import TTLCache
from ..http_client import HttpFetcher, SourceError
from ..logging import get_logger
from ..models import PassCondition, PassReport
from .base import create_soup, find_text_by_label, to_text

logger = get_logger(__name__)

SOURCE = "pass_report"


@dataclass
class ScrapeFailure:
    """A failed scrape, cached so the page is not hit again until it expires."""

    message: str


ReportCache = TTLCache[Union[PassReport, ScrapeFailure]]

_LABELS = {
    "conditions": r"^\s*(Road\s+)?Conditions?\s*:?\s*$",
    "weather": r"^\s*Weather\s*:?\s*$",
    "temperature": r"^\s*Temperature\s*:?\s*$",
    "eastbound": r"^\s*(Travel\s+)?Eastbound\s*:?\s*$",
    "westbound": r"^\s*(Travel\s+)?Westbound\s*:?\s*$",
    "updated": r"^\s*(Last\s+)?Updated\s*:?\s*$",
}


def parse_pass_report(html: str, *, pass_id: str, name: str | None = None, url: str | None = None) -> PassReport:
    """Parse a pass report page into a :class:`PassReport`.

    Each value is read from the element following its label; labels that are
    not on the page leave the field empty.
    """
    soup = create_soup(html)
    values = {field: find_text_by_label(soup, pattern) for field, pattern in _LABELS.items()}
    heading = soup.find(["h1", "h2"])
    return PassReport(
        id=pass_id,
        name=name or (to_text(heading.get_text(" ", strip=True)) if heading else None),
        url=url,
        conditions=to_text(values["conditions"]),
        weather=to_text(values["weather"]),
        temperature=to_text(values["temperature"]),
        eastbound=to_text(values["eastbound"]),
        westbound=to_text(values["westbound"]),
        updated=to_text(values["updated"]),
        fetched_at=datetime.now(timezone.utc).isoformat(),
    )


async def fetch_pass_report(
    fetcher: HttpFetcher,
    mountain_pass: PassCondition,
    *,
    cache: ReportCache,
    trace_id: str | None = None,
) -> PassReport:
    """Return the report for ``mountain_pass``, scraping only on cache miss.

    Failed scrapes are cached too; until the entry expires the cached error is
    raised again without a request.
    """
    cached = cache.get(mountain_pass.id)
    if isinstance(cached, ScrapeFailure):
        logger.debug("pass_report.failure_cached", pass_id=mountain_pass.id, trace_id=trace_id)
        raise SourceError(cached.message, source=SOURCE, url=mountain_pass.link)
    if cached is not None:
        logger.debug("pass_report.cache_hit", pass_id=mountain_pass.id, trace_id=trace_id)
        return cached

    if not mountain_pass.link:
        raise ValueError(f"pass {mountain_pass.id} has no report URL")
    try:
        html = await fetcher.get_text(
            mountain_pass.link,
            extra_headers={"Accept": "text/html"},
            source=SOURCE,
            trace_id=trace_id,
        )
    except SourceError as exc:
        cache.set(mountain_pass.id, ScrapeFailure(str(exc)))
        raise
    report = parse_pass_report(html, pass_id=mountain_pass.id, name=mountain_pass.name, url=mountain_pass.link)
    cache.set(mountain_pass.id, report)
    logger.info("pass_report.scraped", pass_id=mountain_pass.id, url=mountain_pass.link, trace_id=trace_id)
    return report
