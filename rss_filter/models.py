"""Shared data models for rss_filter."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Protocol, Tuple


class FeedItem(Protocol):
    """Minimal shape of a feed entry consumed by the filters and aggregator."""

    title: str
    link: str
    description: str
    published: str


@dataclass(frozen=True)
class CategoryRule:
    """Filtering profile for a single category."""

    category: str
    description: str
    include_keywords: Tuple[str, ...] = ()
    exclude_keywords: Tuple[str, ...] = ()
    urls: Tuple[str, ...] = ()


@dataclass(frozen=True)
class GlobalSettings:
    """Settings shared by every category."""

    global_exclude_keywords: Tuple[str, ...] = ()
    delayed_domains: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FilterConfig:
    """Decoded configuration document."""

    settings: GlobalSettings
    categories: Tuple[CategoryRule, ...] = ()


@dataclass
class RawItem:
    """Feed entry as returned by the fetcher; ``published`` is left unparsed."""

    title: str = ""
    link: str = ""
    description: str = ""
    published: str = ""


@dataclass
class FetchedFeed:
    url: str
    title: str
    items: List[FeedItem] = field(default_factory=list)


@dataclass
class OutputItem:
    """Item written to the generated RSS document."""

    title: str
    link: str
    description: str
    pub_date: str
