"""
On-disk cache for fetched feed documents.

Each locator is stored under the SHA-256 of its text, so any URL maps to a
filesystem-safe name. Freshness is judged from the file's mtime.
"""

from __future__ import annotations

from datetime import datetime
import hashlib
from pathlib import Path


def cache_path(cache_dir: Path, url: str, suffix: str = "xml") -> Path:
    """Generate a cache file path for a URL using SHA256 hashing.

    Args:
        cache_dir: The directory where cache files are stored
        url: The locator being cached
        suffix: File extension for the cache file

    Returns:
        Path of the form ``cache_dir/<sha256 hex>.<suffix>``
    """
    digest = hashlib.sha256(url.encode("utf-8")).hexdigest()
    return cache_dir / f"{digest}.{suffix}"


class FeedCache:
    """Stores raw feed text per locator with an optional time-to-live.

    Attributes:
        cache_dir: Directory holding cached documents
        ttl_minutes: Maximum age of a usable entry; None never expires
    """

    def __init__(self, cache_dir: Path, ttl_minutes: int | None = None):
        self.cache_dir = cache_dir
        self.ttl_minutes = ttl_minutes

    def read(self, url: str) -> str | None:
        path = cache_path(self.cache_dir, url)
        if not self.is_valid(path):
            return None
        return path.read_text(encoding="utf-8")

    def write(self, url: str, text: str) -> Path:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        path = cache_path(self.cache_dir, url)
        path.write_text(text, encoding="utf-8")
        return path

    def is_valid(self, path: Path) -> bool:
        """Check whether a cache file exists and is within the TTL."""
        if not path.exists():
            return False
        if self.ttl_minutes is None:
            return True
        age_seconds = max(0, (datetime.now() - datetime.fromtimestamp(path.stat().st_mtime)).total_seconds())
        return age_seconds <= self.ttl_minutes * 60
