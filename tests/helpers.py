from rss_filter.models import FetchedFeed, RawItem


def make_item(title, description="", published="", link=None):
    return RawItem(
        title=title,
        link=link or f"https://example.com/{title.lower().replace(' ', '-')}",
        description=description,
        published=published,
    )


class FakeFetcher:
    """Serves canned feeds keyed by URL and records the order of requests."""

    def __init__(self, feeds=None, failures=None):
        self.feeds = dict(feeds or {})
        self.failures = dict(failures or {})
        self.calls = []

    def __call__(self, url):
        self.calls.append(url)
        if url in self.failures:
            raise self.failures[url]
        title, items = self.feeds[url]
        return FetchedFeed(url=url, title=title, items=list(items))
