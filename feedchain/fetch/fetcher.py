"""
HTTP and local-file feed fetching.

Remote locators are fetched with httpx; ``file://`` locators and plain paths
are read from disk. Both return a FetchResult and never raise.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import time
from urllib.parse import unquote, urlparse

import httpx


@dataclass
class FetchResult:
    """Result of a fetch operation.

    Either text will be populated (success) or error will be populated (failure),
    but never both. status_code is None for local files and network-level failures.

    Attributes:
        url: The locator that was fetched
        status_code: HTTP status code, or None
        text: The response body text, or None on error
        error: Error message if fetch failed, None on success
    """
    url: str
    status_code: int | None
    text: str | None
    error: str | None

    @property
    def ok(self) -> bool:
        return self.error is None and self.text is not None


def is_local(locator: str) -> bool:
    scheme = urlparse(locator).scheme
    return scheme == "file" or "://" not in locator


def local_path(locator: str, base_dir: Path | None = None) -> Path:
    """Resolve a ``file://`` URL or plain path; relative paths use base_dir."""
    parsed = urlparse(locator)
    if parsed.scheme == "file":
        path = Path(unquote(parsed.path))
    else:
        path = Path(locator).expanduser()
    if not path.is_absolute() and base_dir is not None:
        path = base_dir / path
    return path


def read_local(locator: str, base_dir: Path | None = None) -> FetchResult:
    path = local_path(locator, base_dir)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        return FetchResult(url=locator, status_code=None, text=None, error=f"{type(exc).__name__}: {exc}")
    return FetchResult(url=locator, status_code=None, text=text, error=None)


def fetch_url(
    url: str,
    timeout: float,
    retries: int,
    user_agent: str,
    trust_env: bool,
) -> FetchResult:
    """Fetch a URL using httpx with retry logic.

    Uses a synchronous HTTP client that follows redirects and respects
    system proxy settings when trust_env is enabled. HTTP error statuses
    (>= 400) count as failures.

    Args:
        url: The URL to fetch
        timeout: Request timeout in seconds
        retries: Number of retry attempts after initial failure
        user_agent: User-Agent header string
        trust_env: Whether to respect system proxy settings from environment

    Returns:
        FetchResult with text on success or error message on failure
    """
    headers = {"User-Agent": user_agent}
    last_error: str | None = None
    status_code: int | None = None

    for attempt in range(retries + 1):
        try:
            with httpx.Client(
                timeout=timeout,
                headers=headers,
                follow_redirects=True,
                trust_env=trust_env,
            ) as client:
                resp = client.get(url)
            status_code = resp.status_code
            if resp.status_code < 400:
                return FetchResult(url=url, status_code=resp.status_code, text=resp.text, error=None)
            last_error = f"HTTP {resp.status_code}"
        except Exception as exc:  # noqa: BLE001
            status_code = None
            last_error = f"{type(exc).__name__}: {exc}"
        if attempt < retries:
            # Linear backoff: 0.5s, 1.0s, 1.5s...
            time.sleep(0.5 * (attempt + 1))

    return FetchResult(url=url, status_code=status_code, text=None, error=last_error)
