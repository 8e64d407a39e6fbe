from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path

from ..config import CacheConfig, FetchConfig
from ..core.errors import FetchFailure
from ..core.types import Entry
from ..utils.logging import log_event
from .cache import FeedCache
from .fetcher import FetchResult, fetch_url, is_local, read_local
from .parser import FeedParseError, parse_feed


logger = logging.getLogger(__name__)


def _categorize_error(error: str | None, status_code: int | None) -> str:
    """Categorize fetch errors for logging: timeout, blocked, not_found,
    network_failed or unknown."""
    if not error:
        return "unknown"
    error_lower = error.lower()
    if "timeout" in error_lower or "timed out" in error_lower:
        return "timeout"
    if status_code in (401, 403) or "blocked" in error_lower:
        return "blocked"
    if status_code == 404 or "filenotfound" in error_lower:
        return "not_found"
    if "connect" in error_lower or "connection" in error_lower:
        return "network_failed"
    return "unknown"


@dataclass
class FetchStats:
    """Statistics collected while fetching sources.

    Attributes:
        attempts: Number of fetch calls
        cache_hits: Number served from the feed cache
        success: Successful fetches (cache hits included)
        failed: Failed fetches, parse failures included
    """
    attempts: int = 0
    cache_hits: int = 0
    success: int = 0
    failed: int = 0


class FeedFetcher:
    """Callable fetch collaborator handed to the resolver.

    Maps a locator to its parsed entries or raises FetchFailure. Local
    locators are read relative to ``base_dir``; remote ones go through the
    cache (when enabled) and httpx.
    """

    def __init__(
        self,
        fetch_cfg: FetchConfig,
        cache_cfg: CacheConfig | None = None,
        base_dir: Path | None = None,
    ):
        self._fetch_cfg = fetch_cfg
        self._base_dir = base_dir
        self._cache = None
        if cache_cfg is not None and cache_cfg.enabled:
            cache_dir = Path(cache_cfg.dir)
            if not cache_dir.is_absolute() and base_dir is not None:
                cache_dir = base_dir / cache_dir
            self._cache = FeedCache(cache_dir, cache_cfg.ttl_minutes)
        self.stats = FetchStats()

    def __call__(self, locator: str) -> list[Entry]:
        self.stats.attempts += 1
        result = self._fetch(locator)
        if not result.ok:
            self.stats.failed += 1
            log_event(
                logger,
                "Fetch error",
                level=logging.DEBUG,
                event="fetch_error",
                url=locator,
                error=result.error,
                status_code=result.status_code,
                error_category=_categorize_error(result.error, result.status_code),
            )
            raise FetchFailure(locator, result.error or "empty response")

        try:
            entries = parse_feed(result.text)
        except FeedParseError as exc:
            self.stats.failed += 1
            raise FetchFailure(locator, str(exc)) from exc

        if self._cache is not None and result.status_code is not None:
            self._write_cache(locator, result.text)
        self.stats.success += 1
        return entries

    def _fetch(self, locator: str) -> FetchResult:
        if is_local(locator):
            return read_local(locator, self._base_dir)

        if self._cache is not None:
            cached = self._read_cache(locator)
            if cached is not None:
                self.stats.cache_hits += 1
                log_event(logger, "Cache hit", level=logging.DEBUG, event="cache_hit", url=locator)
                return FetchResult(url=locator, status_code=None, text=cached, error=None)

        return fetch_url(
            locator,
            timeout=self._fetch_cfg.timeout_seconds,
            retries=self._fetch_cfg.retries,
            user_agent=self._fetch_cfg.user_agent,
            trust_env=self._fetch_cfg.trust_env,
        )

    def _read_cache(self, locator: str) -> str | None:
        try:
            return self._cache.read(locator)
        except (OSError, UnicodeDecodeError) as exc:
            log_event(
                logger,
                "Cache read failed",
                level=logging.WARNING,
                event="cache_error",
                url=locator,
                error=str(exc),
            )
            return None

    def _write_cache(self, locator: str, text: str) -> None:
        # A broken cache never fails a fetch that already succeeded.
        try:
            self._cache.write(locator, text)
        except OSError as exc:
            log_event(
                logger,
                "Cache write failed",
                level=logging.WARNING,
                event="cache_error",
                url=locator,
                error=str(exc),
            )
