"""Tests for feed fetching, caching and parsing."""

import os
import time

import httpx
import pytest

from feedchain.config import CacheConfig, FetchConfig
from feedchain.core.errors import FetchFailure
from feedchain.fetch import feed_fetcher, fetcher
from feedchain.fetch.cache import FeedCache, cache_path
from feedchain.fetch.feed_fetcher import FeedFetcher
from feedchain.fetch.fetcher import FetchResult, fetch_url
from feedchain.fetch.parser import FeedParseError, parse_feed


RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/">
  <channel>
    <title>Example</title>
    <link>https://example.com/</link>
    <description>Example feed</description>
    <item>
      <title>Cat food prices rise</title>
      <link>https://example.com/cat-food</link>
      <guid>https://example.com/cat-food</guid>
      <description>Short note about cat food</description>
      <content:encoded>Full story about cat food markets</content:encoded>
      <pubDate>Mon, 19 Oct 2026 08:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Dog toys</title>
      <link>https://example.com/dog-toys</link>
      <description>New dog toys</description>
    </item>
  </channel>
</rss>
"""

ATOM = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Atom example</title>
  <id>urn:example:feed</id>
  <updated>2026-10-19T08:00:00Z</updated>
  <entry>
    <title>Atom entry</title>
    <id>urn:example:1</id>
    <updated>2026-10-19T08:00:00Z</updated>
    <link href="https://example.com/atom-1"/>
    <summary>An atom summary</summary>
  </entry>
</feed>
"""


def test_parse_rss_maps_body_summary_and_links():
    entries = parse_feed(RSS)

    assert len(entries) == 2
    first = entries[0]
    assert first.title == "Cat food prices rise"
    assert first.body == "Full story about cat food markets"
    assert first.summary == "Short note about cat food"
    assert first.links == ("https://example.com/cat-food",)
    assert first.link == "https://example.com/cat-food"
    assert first.id == "https://example.com/cat-food"
    assert first.published == "Mon, 19 Oct 2026 08:00:00 GMT"
    assert entries[1].body is None
    assert entries[1].summary == "New dog toys"


def test_parse_atom():
    entries = parse_feed(ATOM)

    assert [e.title for e in entries] == ["Atom entry"]
    assert entries[0].summary == "An atom summary"
    assert entries[0].link == "https://example.com/atom-1"


def test_parse_rejects_non_feed_text():
    with pytest.raises(FeedParseError):
        parse_feed("this is <<< not a feed")


def test_fetcher_reads_file_url(tmp_path):
    feed = tmp_path / "feed.xml"
    feed.write_text(RSS, encoding="utf-8")
    fetch = FeedFetcher(FetchConfig())

    entries = fetch(feed.as_uri())

    assert [e.title for e in entries] == ["Cat food prices rise", "Dog toys"]
    assert fetch.stats.success == 1


def test_fetcher_resolves_relative_paths_against_base_dir(tmp_path):
    (tmp_path / "feeds").mkdir()
    (tmp_path / "feeds" / "local.xml").write_text(RSS, encoding="utf-8")
    fetch = FeedFetcher(FetchConfig(), base_dir=tmp_path)

    assert len(fetch("feeds/local.xml")) == 2


def test_missing_local_file_raises_fetch_failure(tmp_path):
    fetch = FeedFetcher(FetchConfig(), base_dir=tmp_path)

    with pytest.raises(FetchFailure) as excinfo:
        fetch("missing.xml")

    assert excinfo.value.locator == "missing.xml"
    assert fetch.stats.failed == 1


def test_unparseable_document_raises_fetch_failure(tmp_path):
    (tmp_path / "broken.xml").write_text("this is <<< not a feed", encoding="utf-8")
    fetch = FeedFetcher(FetchConfig(), base_dir=tmp_path)

    with pytest.raises(FetchFailure):
        fetch("broken.xml")


def test_remote_fetch_is_cached(tmp_path, monkeypatch):
    calls = []

    def fake_fetch_url(url, **kwargs):
        calls.append(url)
        return FetchResult(url=url, status_code=200, text=RSS, error=None)

    monkeypatch.setattr(feed_fetcher, "fetch_url", fake_fetch_url)
    cache_cfg = CacheConfig(enabled=True, dir=str(tmp_path / "cache"), ttl_minutes=None)
    url = "https://example.com/feed.xml"

    first = FeedFetcher(FetchConfig(), cache_cfg)(url)
    second_fetcher = FeedFetcher(FetchConfig(), cache_cfg)
    second = second_fetcher(url)

    assert calls == [url]
    assert first == second
    assert second_fetcher.stats.cache_hits == 1
    assert cache_path(tmp_path / "cache", url).exists()


def test_unusable_cache_dir_does_not_fail_the_fetch(tmp_path, monkeypatch):
    monkeypatch.setattr(
        feed_fetcher,
        "fetch_url",
        lambda url, **kwargs: FetchResult(url=url, status_code=200, text=RSS, error=None),
    )
    blocker = tmp_path / "cachefile"
    blocker.write_text("not a directory", encoding="utf-8")
    cache_cfg = CacheConfig(enabled=True, dir=str(blocker), ttl_minutes=None)
    fetch = FeedFetcher(FetchConfig(), cache_cfg)

    entries = fetch("https://example.com/feed.xml")

    assert [entry.title for entry in entries] == ["Cat food prices rise", "Dog toys"]
    assert fetch.stats.success == 1


def test_undecodable_cache_entry_is_refetched(tmp_path, monkeypatch):
    calls = []

    def fake_fetch_url(url, **kwargs):
        calls.append(url)
        return FetchResult(url=url, status_code=200, text=RSS, error=None)

    monkeypatch.setattr(feed_fetcher, "fetch_url", fake_fetch_url)
    url = "https://example.com/feed.xml"
    cache_dir = tmp_path / "cache"
    cache_dir.mkdir()
    cache_path(cache_dir, url).write_bytes(b"\xff\xfe\x00broken")
    fetch = FeedFetcher(FetchConfig(), CacheConfig(enabled=True, dir=str(cache_dir), ttl_minutes=None))

    entries = fetch(url)

    assert calls == [url]
    assert fetch.stats.cache_hits == 0
    assert len(entries) == 2
    assert cache_path(cache_dir, url).read_text(encoding="utf-8") == RSS


def test_http_error_raises_fetch_failure(monkeypatch):
    def fake_fetch_url(url, **kwargs):
        return FetchResult(url=url, status_code=404, text=None, error="HTTP 404")

    monkeypatch.setattr(feed_fetcher, "fetch_url", fake_fetch_url)

    with pytest.raises(FetchFailure) as excinfo:
        FeedFetcher(FetchConfig())("https://example.com/gone.xml")

    assert excinfo.value.reason == "HTTP 404"


def _mock_client(monkeypatch, handler):
    real_client = httpx.Client

    def client_factory(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(fetcher.httpx, "Client", client_factory)


def test_fetch_url_returns_text(monkeypatch):
    _mock_client(monkeypatch, lambda request: httpx.Response(200, text=RSS))

    result = fetch_url("https://example.com/feed.xml", timeout=1, retries=0, user_agent="test", trust_env=False)

    assert result.ok
    assert result.status_code == 200
    assert result.text == RSS


def test_fetch_url_treats_error_status_as_failure(monkeypatch):
    _mock_client(monkeypatch, lambda request: httpx.Response(503, text="busy"))

    result = fetch_url("https://example.com/feed.xml", timeout=1, retries=0, user_agent="test", trust_env=False)

    assert not result.ok
    assert result.status_code == 503
    assert result.error == "HTTP 503"


def test_fetch_url_reports_network_errors(monkeypatch):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    _mock_client(monkeypatch, handler)

    result = fetch_url("https://example.com/feed.xml", timeout=1, retries=0, user_agent="test", trust_env=False)

    assert result.text is None
    assert result.error.startswith("ConnectError")


def test_cache_entries_expire(tmp_path):
    cache = FeedCache(tmp_path, ttl_minutes=1)
    path = cache.write("https://example.com/feed.xml", RSS)

    assert cache.read("https://example.com/feed.xml") == RSS

    old = time.time() - 3600
    os.utime(path, (old, old))

    assert cache.read("https://example.com/feed.xml") is None
