import pytest

ENV_KEYS = [
    "RSS_FILTER_BUCKET",
    "RSS_FILTER_KEY",
    "RSS_FILTER_CONFIG_FILE",
    "RSS_FILTER_ACCESS_TOKEN",
    "RSS_FILTER_LOG_LEVEL",
    "RSS_FILTER_LOG_FILE",
    "RSS_FILTER_CONCURRENCY",
    "RSS_FILTER_FETCH_TIMEOUT",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Ensure rss_filter environment variables are unset for the test."""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
