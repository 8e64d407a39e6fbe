"""
Entry deduplication across rendered outputs.

An entry reachable through several outputs (or through several inputs of
one filter) is shown only the first time. Entries are considered the same
when they share a link or id, or when their titles are similar enough:
1. Exact link / id matches (the same item pulled in twice)
2. Fuzzy title similarity (the same story syndicated under another URL)

Resolved sets are never modified; this only shapes what gets rendered.
"""

from __future__ import annotations

from rapidfuzz import fuzz

from .types import Entry


def dedup_outputs(
    outputs: list[tuple[str, list[Entry]]], threshold: int = 92
) -> list[tuple[str, list[Entry]]]:
    """Drop entries already shown in an earlier position.

    Args:
        outputs: (output name, entries) pairs in render order
        threshold: Similarity threshold (0-100) for fuzzy title matching

    Returns:
        New (name, entries) pairs, preserving order; sections may end up empty
    """
    seen_keys: set[str] = set()
    titles: list[str] = []
    deduped: list[tuple[str, list[Entry]]] = []

    for name, entries in outputs:
        kept: list[Entry] = []
        for entry in entries:
            keys = _identity_keys(entry)
            if keys & seen_keys:
                continue
            if entry.title and _is_similar_title(entry.title, titles, threshold):
                continue
            seen_keys.update(keys)
            if entry.title:
                titles.append(entry.title)
            kept.append(entry)
        deduped.append((name, kept))

    return deduped


def _identity_keys(entry: Entry) -> set[str]:
    keys = {f"link:{link}" for link in entry.links}
    if entry.id:
        keys.add(f"id:{entry.id}")
    return keys


def _is_similar_title(title: str, titles: list[str], threshold: int) -> bool:
    for existing in titles:
        if fuzz.ratio(title, existing) >= threshold:
            return True
    return False
