"""Aggregation of filtered feeds into a single RSS document."""

from __future__ import annotations

import concurrent.futures
import logging
from typing import Callable, List, Sequence, Tuple

from .feeds import fetch_feed
from .filters import domain_requires_delay, passes_filters, sort_key
from .models import CategoryRule, FeedItem, FetchedFeed, GlobalSettings, OutputItem
from .rss import build_rss_document

logger = logging.getLogger(__name__)

PLACEHOLDER_LINK = "https://example.com"

Fetcher = Callable[[str], FetchedFeed]


def apply_delay(items: Sequence[FeedItem]) -> List[Tuple[FeedItem, str]]:
    """Drop the first item and give every other item its predecessor's date.

    Returns ``(item, pub_date)`` pairs. Dates are taken from the original
    items, so the shift never compounds.
    """
    return [
        (item, items[index - 1].published)
        for index, item in enumerate(items)
        if index > 0
    ]


def build_output_items(
    feed: FetchedFeed, rule: CategoryRule, settings: GlobalSettings
) -> List[OutputItem]:
    """Filter one feed and convert the surviving entries into output items."""
    kept = [item for item in feed.items if passes_filters(item, rule)]

    if domain_requires_delay(feed.url, settings):
        emitted = apply_delay(kept)
        logger.debug("Delaying feed %s; dropped its newest entry", feed.url)
    else:
        emitted = [(item, item.published) for item in kept]

    logger.info(
        "Feed '%s' (%s): kept %d of %d entries, emitting %d",
        feed.title,
        feed.url,
        len(kept),
        len(feed.items),
        len(emitted),
    )
    return [
        OutputItem(
            title=f"[{feed.title}] {item.title}",
            link=item.link,
            description=item.description,
            pub_date=pub_date,
        )
        for item, pub_date in emitted
    ]


def collect_items(
    rule: CategoryRule,
    settings: GlobalSettings,
    fetcher: Fetcher = fetch_feed,
    concurrency: int = 1,
) -> List[OutputItem]:
    """Fetch every URL of the rule and return the merged, sorted items."""

    def process_url(url: str) -> List[OutputItem]:
        try:
            feed = fetcher(url)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Skipping feed %s: %s", url, exc)
            return []
        return build_output_items(feed, rule, settings)

    if concurrency > 1 and len(rule.urls) > 1:
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=concurrency
        ) as executor:
            per_feed = list(executor.map(process_url, rule.urls))
    else:
        per_feed = [process_url(url) for url in rule.urls]

    items = [item for feed_items in per_feed for item in feed_items]

    # sorted() is stable with reverse=True, so ties keep feed-then-item order.
    ordered = sorted(items, key=lambda item: sort_key(item.pub_date), reverse=True)
    logger.info(
        "Collected %d items for category '%s' from %d feeds",
        len(ordered),
        rule.category,
        len(rule.urls),
    )
    return ordered


def generate_feed(
    rule: CategoryRule,
    settings: GlobalSettings,
    fetcher: Fetcher = fetch_feed,
    concurrency: int = 1,
    link: str = PLACEHOLDER_LINK,
) -> str:
    """Build the filtered RSS document for one category.

    Feed failures are logged and skipped; only ``RenderError`` escapes.
    """
    items = collect_items(rule, settings, fetcher=fetcher, concurrency=concurrency)
    return build_rss_document(
        title=rule.description,
        description=rule.description,
        link=link,
        items=items,
    )
