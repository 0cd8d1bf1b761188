"""Keyword filtering and publish date parsing."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from .models import CategoryRule, FeedItem, GlobalSettings

logger = logging.getLogger(__name__)

# (strptime format, trailing zone name) tried in order; first match wins.
PUB_DATE_LAYOUTS = [
    ("%a, %d %b %Y %H:%M:%S %z", False),  # RFC 1123, numeric offset
    ("%a, %d %b %Y %H:%M:%S", True),  # RFC 1123, zone name
    ("%d %b %y %H:%M %z", False),  # RFC 822, numeric offset
    ("%d %b %y %H:%M", True),  # RFC 822, zone name
    ("%Y-%m-%dT%H:%M:%S%z", False),  # RFC 3339
    ("%a, %d %b %Y %H:%M:%S", False),
    ("%Y-%m-%d %H:%M:%S", False),
    ("%d %b %Y %H:%M:%S", False),
    ("%Y-%m-%d", False),
]

# Offsets in hours for the zone names defined by RFC 822.
ZONE_OFFSETS = {
    "UT": 0,
    "UTC": 0,
    "GMT": 0,
    "Z": 0,
    "EST": -5,
    "EDT": -4,
    "CST": -6,
    "CDT": -5,
    "MST": -7,
    "MDT": -6,
    "PST": -8,
    "PDT": -7,
}

OLDEST = datetime.min.replace(tzinfo=timezone.utc)

_ZONE_NAME = re.compile(r"^(?P<rest>.*\S)\s+(?P<zone>[A-Za-z]+)$")
_FRACTION = re.compile(r"(T\d{2}:\d{2}:\d{2})\.\d+")


def passes_filters(item: FeedItem, rule: CategoryRule) -> bool:
    """Return True when the item satisfies the include and exclude keywords."""
    text = ((item.title or "") + (item.description or "")).lower()

    if rule.include_keywords and not any(
        word.lower() in text for word in rule.include_keywords
    ):
        return False

    for word in rule.exclude_keywords:
        if word.lower() in text:
            return False

    return True


def domain_requires_delay(url: str, settings: GlobalSettings) -> bool:
    return any(domain in url for domain in settings.delayed_domains)


def _parse_with_zone_name(value: str, fmt: str) -> datetime:
    match = _ZONE_NAME.match(value)
    if match is None:
        raise ValueError(f"No zone name in {value!r}")
    parsed = datetime.strptime(match.group("rest"), fmt)
    hours = ZONE_OFFSETS.get(match.group("zone").upper(), 0)
    return parsed.replace(tzinfo=timezone(timedelta(hours=hours)))


def parse_pub_date(raw: Optional[str]) -> Optional[datetime]:
    """Parse a feed publish date into an aware datetime.

    Naive layouts are read as UTC. Returns ``None`` when no layout matches
    so callers can tell a failed parse apart from a real timestamp.
    """
    value = (raw or "").strip()
    if value:
        # strptime's %z handles "Z" and "+09:00"; only fractional seconds need trimming.
        rfc3339 = _FRACTION.sub(r"\1", value)
        for fmt, zone_name in PUB_DATE_LAYOUTS:
            try:
                if zone_name:
                    return _parse_with_zone_name(value, fmt)
                candidate = rfc3339 if "T" in fmt else value
                parsed = datetime.strptime(candidate, fmt)
            except ValueError:
                continue
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed

    logger.warning("Failed to parse publish date: %r", raw)
    return None


def sort_key(raw: Optional[str]) -> Tuple[bool, datetime]:
    """Ordering key; unparseable dates sort below every parsed date."""
    parsed = parse_pub_date(raw)
    return (parsed is not None, parsed if parsed is not None else OLDEST)
