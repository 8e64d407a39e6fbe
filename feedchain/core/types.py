"""
Core data types for feedchain.

This module defines the structures shared by every stage:
- Entry: a single feed item as it flows from a source into filters
- SourceDecl / FilterDecl / GraphDeclaration: raw declarations from config
- Node / NodeKind: validated registry records
- QueueItem / ProcessingQueue: the planned processing order
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Protocol


@dataclass(frozen=True)
class Entry:
    """A feed item.

    Entries are immutable, so sharing one instance between a source and
    every filter that consumes it behaves like passing copies.

    Attributes:
        id: Feed-provided identifier (guid), if any
        title: Entry headline
        body: Full content body, if the feed ships one
        summary: Summary/description text
        links: All hrefs attached to the entry, in feed order
        published: Published timestamp as given by the feed
    """
    id: str | None = None
    title: str | None = None
    body: str | None = None
    summary: str | None = None
    links: tuple[str, ...] = ()
    published: str | None = None

    @property
    def link(self) -> str | None:
        return self.links[0] if self.links else None


class Predicate(Protocol):
    def matches(self, entry: Entry) -> bool:
        ...


class NodeKind(str, Enum):
    SOURCE = "source"
    FILTER = "filter"


@dataclass(frozen=True)
class SourceDecl:
    name: str
    locator: str


@dataclass(frozen=True)
class FilterDecl:
    name: str
    inputs: tuple[str, ...]
    predicate: Predicate


@dataclass(frozen=True)
class GraphDeclaration:
    """Ordered declarations as read from configuration."""
    sources: tuple[SourceDecl, ...] = ()
    filters: tuple[FilterDecl, ...] = ()
    outputs: tuple[str, ...] = ()


@dataclass(frozen=True)
class Node:
    """A validated source or filter.

    Sources carry a locator and no inputs; filters carry an ordered tuple of
    input names and a predicate.
    """
    name: str
    kind: NodeKind
    locator: str | None = None
    inputs: tuple[str, ...] = ()
    predicate: Predicate | None = None

    @property
    def is_source(self) -> bool:
        return self.kind is NodeKind.SOURCE

    @property
    def is_filter(self) -> bool:
        return self.kind is NodeKind.FILTER


@dataclass(frozen=True)
class QueueItem:
    name: str
    kind: NodeKind
    is_output: bool = False


@dataclass(frozen=True)
class ProcessingQueue:
    """Ordered processing plan; each reachable name appears exactly once.

    ``output_order`` keeps the outputs in the order they were requested,
    which is the order results are reported in.
    """
    items: tuple[QueueItem, ...] = field(default_factory=tuple)
    output_order: tuple[str, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[QueueItem]:
        return iter(self.items)

    def __getitem__(self, index: int) -> QueueItem:
        return self.items[index]

    @property
    def names(self) -> list[str]:
        return [item.name for item in self.items]

    def index_of(self, name: str) -> int:
        for index, item in enumerate(self.items):
            if item.name == name:
                return index
        raise KeyError(name)

    @property
    def outputs(self) -> list[str]:
        return [item.name for item in self.items if item.is_output]
