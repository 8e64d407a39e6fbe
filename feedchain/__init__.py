"""
feedchain - declarative feed filtering.

This package reads a graph of named feed sources and text filters chained
over them, resolves the declared outputs in dependency order and renders
the matching entries as a Markdown or HTML report.

Main entry point is the CLI via `feedchain run` command.

Example:
    $ feedchain run -c feedchain.yaml -o out/
"""

__all__ = [
    "__version__",
    "build_registry",
    "plan_queue",
    "resolve",
    "Entry",
    "Contains",
    "FeedChainError",
]
__version__ = "0.1.0"

from .core.errors import FeedChainError
from .core.graph import build_registry
from .core.planner import plan_queue
from .core.predicate import Contains
from .core.resolver import resolve
from .core.types import Entry
