"""
Core graph model and resolution engine.

This package contains the declaration types, the graph builder, the queue
planner, the fixpoint resolver and the entry predicates. It performs no I/O;
fetching is injected into the resolver as a callable.
"""

from .types import (
    Entry,
    FilterDecl,
    GraphDeclaration,
    Node,
    NodeKind,
    ProcessingQueue,
    QueueItem,
    SourceDecl,
)
from .errors import (
    ConfigFormatError,
    ConfigIntegrityError,
    DuplicateNameError,
    EmptySetError,
    FeedChainError,
    FetchFailure,
    UnknownReferenceError,
    UnresolvableGraphError,
)
from .predicate import AnyOf, Contains, entry_contains
from .graph import Registry, build_from_declaration, build_registry
from .planner import plan_queue
from .resolver import Resolution, RunState, resolve
from .dedup import dedup_outputs

__all__ = [
    "Entry",
    "FilterDecl",
    "GraphDeclaration",
    "Node",
    "NodeKind",
    "ProcessingQueue",
    "QueueItem",
    "SourceDecl",
    "ConfigFormatError",
    "ConfigIntegrityError",
    "DuplicateNameError",
    "EmptySetError",
    "FeedChainError",
    "FetchFailure",
    "UnknownReferenceError",
    "UnresolvableGraphError",
    "AnyOf",
    "Contains",
    "entry_contains",
    "Registry",
    "build_from_declaration",
    "build_registry",
    "plan_queue",
    "Resolution",
    "RunState",
    "resolve",
    "dedup_outputs",
]
