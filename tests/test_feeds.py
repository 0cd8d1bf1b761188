import types

import pytest
import requests

from rss_filter import feeds

RSS_BODY = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Example Site</title>
    <link>https://example.com</link>
    <description>Example feed</description>
    <item>
      <title>First post</title>
      <link>https://example.com/1</link>
      <description>Hello world</description>
      <pubDate>Tue, 02 Jan 2024 10:00:00 +0900</pubDate>
    </item>
    <item>
      <title>Undated post</title>
      <link>https://example.com/2</link>
    </item>
  </channel>
</rss>
"""

ATOM_BODY = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Atom Site</title>
  <entry>
    <title>Atom entry</title>
    <link href="https://example.com/atom/1"/>
    <summary>Short summary</summary>
    <updated>2024-01-03T12:00:00Z</updated>
  </entry>
</feed>
"""


def _stub_get(monkeypatch, content=b"", error=None):
    calls = []

    def raise_for_status():
        if error is not None:
            raise error

    def fake_get(url, timeout=None):
        calls.append((url, timeout))
        return types.SimpleNamespace(content=content, raise_for_status=raise_for_status)

    monkeypatch.setattr(feeds.requests, "get", fake_get)
    return calls


def test_fetch_feed_parses_rss_items(monkeypatch):
    calls = _stub_get(monkeypatch, RSS_BODY)

    feed = feeds.fetch_feed("https://example.com/rss", timeout=5.0)

    assert calls == [("https://example.com/rss", 5.0)]
    assert feed.url == "https://example.com/rss"
    assert feed.title == "Example Site"
    assert [item.title for item in feed.items] == ["First post", "Undated post"]
    first, second = feed.items
    assert first.link == "https://example.com/1"
    assert first.description == "Hello world"
    assert first.published == "Tue, 02 Jan 2024 10:00:00 +0900"
    assert second.description == ""
    assert second.published == ""


def test_fetch_feed_reads_atom_updated_as_published(monkeypatch):
    _stub_get(monkeypatch, ATOM_BODY)

    feed = feeds.fetch_feed("https://example.com/atom")

    (entry,) = feed.items
    assert feed.title == "Atom Site"
    assert entry.link == "https://example.com/atom/1"
    assert entry.description == "Short summary"
    assert entry.published == "2024-01-03T12:00:00Z"


def test_fetch_feed_wraps_http_errors(monkeypatch):
    _stub_get(monkeypatch, error=requests.HTTPError("503 Server Error"))

    with pytest.raises(feeds.FeedFetchError) as excinfo:
        feeds.fetch_feed("https://down.example.com/rss")

    assert excinfo.value.url == "https://down.example.com/rss"
    assert "503" in str(excinfo.value)


def test_fetch_feed_wraps_connection_errors(monkeypatch):
    def fake_get(url, timeout=None):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(feeds.requests, "get", fake_get)

    with pytest.raises(feeds.FeedFetchError):
        feeds.fetch_feed("https://unreachable.example.com/rss")


@pytest.mark.parametrize(
    "body",
    [b"", b"<html><body>oops</body></html>"],
    ids=["empty", "html-page"],
)
def test_fetch_feed_rejects_non_feed_documents(monkeypatch, body):
    _stub_get(monkeypatch, body)

    with pytest.raises(feeds.FeedFetchError, match="https://example.com/broken"):
        feeds.fetch_feed("https://example.com/broken")


def test_fetch_feed_accepts_feed_without_entries(monkeypatch):
    _stub_get(
        monkeypatch,
        b'<?xml version="1.0"?><rss version="2.0"><channel>'
        b"<title>Quiet</title></channel></rss>",
    )

    feed = feeds.fetch_feed("https://example.com/quiet")

    assert feed.title == "Quiet"
    assert feed.items == []
