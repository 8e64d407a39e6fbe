"""
Fixpoint resolver for the processing queue.

Each pass walks the queue in order and resolves every item whose inputs are
already available. Sources are fetched through an injected callable; filters
keep the entries of their inputs that satisfy their predicate. The run ends
when everything is resolved (done) or a pass resolves nothing new (stalled).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import Callable

from ..utils.logging import log_event
from .errors import FetchFailure, UnresolvableGraphError
from .graph import Registry
from .types import Entry, Node, ProcessingQueue


logger = logging.getLogger(__name__)

Fetcher = Callable[[str], list[Entry]]
ResolvedSet = dict[str, list[Entry]]


class RunState(str, Enum):
    RUNNING = "running"
    DONE = "done"
    STALLED = "stalled"


@dataclass
class Resolution:
    """Outcome of a completed run.

    Attributes:
        resolved: Every queue name mapped to its entries
        outputs_order: Output names the queue was planned for, in order
        passes: Number of passes the run took
        fetch_failures: Failed fetch attempts across all passes
    """
    resolved: ResolvedSet
    outputs_order: tuple[str, ...]
    passes: int
    fetch_failures: int = 0
    state: RunState = field(default=RunState.DONE)

    def outputs(self) -> list[tuple[str, list[Entry]]]:
        return [(name, self.resolved[name]) for name in self.outputs_order]


def resolve(
    queue: ProcessingQueue,
    registry: Registry,
    fetch: Fetcher,
) -> Resolution:
    """Resolve every item in the queue.

    Args:
        queue: Planned processing order
        registry: Registry the queue was planned from
        fetch: Callable mapping a source locator to its entries; raises
            FetchFailure when the source cannot be fetched right now

    Returns:
        Resolution with one entry list per queue name

    Raises:
        UnresolvableGraphError: A pass made no progress while items remain
    """
    resolved: ResolvedSet = {}
    previous_count = 0
    passes = 0
    fetch_failures = 0
    state = RunState.RUNNING

    while state is RunState.RUNNING:
        passes += 1
        for item in queue:
            if item.name in resolved:
                continue
            node = registry.get(item.name)
            if node.is_source:
                try:
                    entries = fetch(node.locator)
                except FetchFailure as exc:
                    fetch_failures += 1
                    log_event(
                        logger,
                        "Fetch failed",
                        level=logging.WARNING,
                        event="fetch_failed",
                        node=node.name,
                        locator=exc.locator,
                        error=exc.reason,
                        pass_number=passes,
                    )
                    continue
                resolved[node.name] = list(entries)
                log_event(
                    logger,
                    "Source resolved",
                    event="source_resolved",
                    node=node.name,
                    entries=len(resolved[node.name]),
                )
            else:
                entries = _resolve_filter(node, resolved)
                if entries is None:
                    continue
                resolved[node.name] = entries
                log_event(
                    logger,
                    "Filter resolved",
                    event="filter_resolved",
                    node=node.name,
                    entries=len(entries),
                )

        count = len(resolved)
        log_event(
            logger,
            "Pass complete",
            event="pass_complete",
            pass_number=passes,
            resolved=count,
            total=len(queue),
        )
        if count == len(queue):
            state = RunState.DONE
        elif count == previous_count:
            state = RunState.STALLED
        else:
            previous_count = count

    if state is RunState.STALLED:
        error = _stall_error(queue, registry, resolved)
        log_event(
            logger,
            "Run stalled",
            level=logging.ERROR,
            event="run_stalled",
            unresolved=error.unresolved,
            failed_sources=error.failed_sources,
            cycle=error.cycle,
        )
        raise error

    return Resolution(
        resolved=resolved,
        outputs_order=queue.output_order or tuple(queue.outputs),
        passes=passes,
        fetch_failures=fetch_failures,
        state=state,
    )


def _resolve_filter(node: Node, resolved: ResolvedSet) -> list[Entry] | None:
    """Filter the inputs' entries, or None if an input is still missing."""
    if not all(name in resolved for name in node.inputs):
        return None
    return [
        entry
        for name in node.inputs
        for entry in resolved[name]
        if node.predicate.matches(entry)
    ]


def _stall_error(
    queue: ProcessingQueue, registry: Registry, resolved: ResolvedSet
) -> UnresolvableGraphError:
    unresolved = [item.name for item in queue if item.name not in resolved]
    failed_sources = [name for name in unresolved if registry.get(name).is_source]
    pending_filters = {name for name in unresolved if registry.get(name).is_filter}
    cycle = [
        name
        for name in unresolved
        if name in pending_filters and _reaches_itself(name, registry, pending_filters)
    ]
    return UnresolvableGraphError(
        unresolved=unresolved,
        resolved_count=len(resolved),
        queue_size=len(queue),
        failed_sources=failed_sources,
        cycle=cycle,
    )


def _reaches_itself(start: str, registry: Registry, pending_filters: set[str]) -> bool:
    stack = [dep for dep in registry.get(start).inputs if dep in pending_filters]
    visited: set[str] = set()
    while stack:
        name = stack.pop()
        if name == start:
            return True
        if name in visited:
            continue
        visited.add(name)
        stack.extend(dep for dep in registry.get(name).inputs if dep in pending_filters)
    return False
