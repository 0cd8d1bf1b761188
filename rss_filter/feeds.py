"""Feed download and parsing helpers."""

from __future__ import annotations

import logging
from typing import Any, List

import feedparser
import requests

from .models import FeedItem, FetchedFeed, RawItem

logger = logging.getLogger(__name__)


class FeedFetchError(RuntimeError):
    """Raised when a feed cannot be downloaded or parsed."""

    def __init__(self, url: str, reason: Any):
        super().__init__(f"Failed to fetch feed {url}: {reason}")
        self.url = url
        self.reason = reason


def _text(entry: Any, *names: str) -> str:
    for name in names:
        value = entry.get(name)
        if value:
            return str(value)
    return ""


def fetch_feed(url: str, timeout: float = 10.0) -> FetchedFeed:
    """Download and parse a single RSS or Atom feed."""
    logger.info("Fetching feed %s", url)
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        content = response.content
    except requests.RequestException as exc:
        raise FeedFetchError(url, exc) from exc

    parsed = feedparser.parse(content)
    # feedparser leaves "version" empty when it cannot detect RSS or Atom.
    if not parsed.entries and not parsed.get("version"):
        reason = parsed.get("bozo_exception") or "not an RSS or Atom feed"
        raise FeedFetchError(url, reason)

    items: List[FeedItem] = []
    for entry in parsed.entries:
        items.append(
            RawItem(
                title=_text(entry, "title"),
                link=_text(entry, "link"),
                description=_text(entry, "summary", "description"),
                published=_text(entry, "published", "updated"),
            )
        )

    title = _text(parsed.feed, "title")
    logger.debug("Parsed %d entries from feed '%s' (%s)", len(items), title, url)
    return FetchedFeed(url=url, title=title, items=items)
