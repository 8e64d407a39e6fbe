"""
Feed document parsing.

feedparser normalizes RSS 2.0, Atom and RDF into one structure; this module
maps its entries onto ``Entry``. The entry body is the first content block
(``content:encoded`` / Atom ``content``), the summary is the description.
"""

from __future__ import annotations

from typing import Any

import feedparser

from ..core.types import Entry


class FeedParseError(ValueError):
    """The document is not a feed feedparser can read."""


def parse_feed(text: str) -> list[Entry]:
    """Parse a feed document into entries, in feed order.

    Args:
        text: Raw feed XML

    Returns:
        Parsed entries (possibly empty for a well-formed feed without items)

    Raises:
        FeedParseError: The document is malformed and yielded no entries
    """
    parsed = feedparser.parse(text)
    if parsed.get("bozo") and not parsed.entries:
        reason = parsed.get("bozo_exception")
        raise FeedParseError(f"Unparseable feed: {reason}")
    return [_to_entry(item) for item in parsed.entries]


def _to_entry(item: Any) -> Entry:
    return Entry(
        id=item.get("id"),
        title=item.get("title"),
        body=_first_content(item),
        summary=item.get("summary"),
        links=_links(item),
        published=item.get("published"),
    )


def _first_content(item: Any) -> str | None:
    for content in item.get("content") or []:
        value = content.get("value")
        if value:
            return value
    return None


def _links(item: Any) -> tuple[str, ...]:
    hrefs = [link.get("href") for link in item.get("links") or [] if link.get("href")]
    if not hrefs and item.get("link"):
        hrefs = [item.get("link")]
    return tuple(dict.fromkeys(hrefs))
