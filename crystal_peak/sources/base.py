"""Parsing helpers shared by the upstream source mappers."""
from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from bs4 import BeautifulSoup, Tag

SNOW_PATTERN = re.compile(r"snow|flurr", re.IGNORECASE)

# WCF JSON dates: /Date(1700000000000-0800)/
_WCF_DATE = re.compile(r"/Date\((-?\d+)([+-]\d{4})?\)/")


def create_soup(html: str) -> BeautifulSoup:
    """Create a BeautifulSoup parser from HTML content."""
    return BeautifulSoup(html, "lxml")


def extract_numeric(text: Any) -> Optional[float]:
    """Extract first numeric value from text."""
    if text is None:
        return None
    match = re.search(r"(-?\d+(?:\.\d+)?)", str(text).replace(",", ""))
    return float(match.group(1)) if match else None


def to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return extract_numeric(value)


def to_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def is_snowy(text: Optional[str]) -> bool:
    return bool(text and SNOW_PATTERN.search(text))


def parse_wcf_date(value: Any) -> Optional[datetime]:
    """Parse a ``/Date(ms±hhmm)/`` timestamp into an aware datetime.

    The millisecond count is UTC; the optional offset only says which local
    time zone the reading was taken in, and is kept on the result.
    """
    if not isinstance(value, str):
        return None
    match = _WCF_DATE.search(value)
    if not match:
        return None
    millis = int(match.group(1))
    tz = timezone.utc
    try:
        if match.group(2):
            offset = match.group(2)
            sign = -1 if offset[0] == "-" else 1
            tz = timezone(sign * timedelta(hours=int(offset[1:3]), minutes=int(offset[3:5])))
        return datetime.fromtimestamp(millis / 1000, tz=timezone.utc).astimezone(tz)
    except (ValueError, OverflowError, OSError):
        # out of range timestamp or offset
        return None


def iso_or_none(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def find_text_by_label(soup: BeautifulSoup, label: str, search_scope: Tag = None) -> Optional[str]:
    """Find text value associated with a label.

    Searches for elements containing the label text and returns the
    value in an adjacent element.
    """
    search_in = search_scope or soup

    for element in search_in.find_all(string=re.compile(label, re.IGNORECASE)):
        parent = element.find_parent()
        if parent:
            next_sib = parent.find_next_sibling()
            if next_sib:
                return next_sib.get_text(" ", strip=True)
            parent_next = parent.parent.find_next_sibling() if parent.parent else None
            if parent_next:
                return parent_next.get_text(" ", strip=True)

    return None


def find_surface_condition(text: str) -> Optional[str]:
    """Find snow surface condition from page text."""
    surface_patterns = [
        "Machine Groomed",
        "Packed Powder",
        "Loose Granular",
        "Powder",
        "Hardpack",
        "Frozen Granular",
        "Variable",
        "Spring Conditions",
        "Ice",
    ]
    lowered = text.lower()
    for pattern in surface_patterns:
        if pattern.lower() in lowered:
            return pattern
    return None


def normalize_status(text: Optional[str]) -> str:
    """Map free-form lift/run status text onto open, hold, closed or partial."""
    if not text:
        return "closed"
    lowered = text.strip().lower()
    if "hold" in lowered or "delay" in lowered or "wind" in lowered:
        return "hold"
    if "partial" in lowered or "limited" in lowered:
        return "partial"
    if "clos" in lowered:
        return "closed"
    if "open" in lowered or "running" in lowered or "scheduled" in lowered:
        return "open"
    return "closed"


def slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
