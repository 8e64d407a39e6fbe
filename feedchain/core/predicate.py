from __future__ import annotations

from dataclasses import dataclass

from .types import Entry, Predicate


def entry_contains(entry: Entry, text: str) -> bool:
    """Literal, case-sensitive substring test against body, then summary."""
    if entry.body is not None and text in entry.body:
        return True
    if entry.summary is not None and text in entry.summary:
        return True
    return False


@dataclass(frozen=True)
class Contains:
    text: str

    def matches(self, entry: Entry) -> bool:
        return entry_contains(entry, self.text)


@dataclass(frozen=True)
class AnyOf:
    """Matches when any member predicate matches.

    AND is expressed by chaining filters, so only OR is offered here.
    """
    predicates: tuple[Predicate, ...]

    def matches(self, entry: Entry) -> bool:
        return any(predicate.matches(entry) for predicate in self.predicates)
