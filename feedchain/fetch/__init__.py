"""
Feed fetching and parsing.

This package handles HTTP and local-file fetching, the on-disk feed cache,
and feed parsing. ``FeedFetcher`` is the callable the resolver uses.
"""

from .fetcher import fetch_url, FetchResult, read_local
from .cache import FeedCache, cache_path
from .parser import FeedParseError, parse_feed
from .feed_fetcher import FeedFetcher, FetchStats

__all__ = [
    "fetch_url",
    "FetchResult",
    "read_local",
    "FeedCache",
    "cache_path",
    "FeedParseError",
    "parse_feed",
    "FeedFetcher",
    "FetchStats",
]
