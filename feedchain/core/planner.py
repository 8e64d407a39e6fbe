"""
Queue planner: turn the declared outputs into a flat processing order.

The outputs are expanded backwards along filter inputs, breadth first, and
the discovered list is reversed so that deeper dependencies come before the
nodes that consume them. Cycles are not rejected here; they show up as a
stall in the resolver.
"""

from __future__ import annotations

import logging
from typing import Iterable

from .graph import Registry
from .types import NodeKind, ProcessingQueue, QueueItem


logger = logging.getLogger(__name__)


def plan_queue(registry: Registry, outputs: Iterable[str] | None = None) -> ProcessingQueue:
    """Compute the processing queue for the given outputs.

    Args:
        registry: Validated node registry
        outputs: Output names; defaults to the registry's declared outputs

    Returns:
        ProcessingQueue with one item per reachable name, dependencies first
        (for acyclic graphs), outputs flagged by name
    """
    output_names = list(dict.fromkeys(registry.outputs if outputs is None else outputs))

    expanded, kinds = _expand_backwards(registry, output_names)
    expanded.reverse()
    ordered = _dependencies_first(registry, expanded)

    output_set = set(output_names)
    queue = ProcessingQueue(
        items=tuple(
            QueueItem(name=name, kind=kinds[name], is_output=name in output_set)
            for name in ordered
        ),
        output_order=tuple(output_names),
    )
    logger.debug("Planned queue: %s", ", ".join(queue.names))
    return queue


def _expand_backwards(
    registry: Registry, output_names: list[str]
) -> tuple[list[str], dict[str, NodeKind]]:
    """Breadth-first walk from the outputs towards the sources.

    Only the suffix added by the previous round is scanned on each round.
    """
    process_queue = list(output_names)
    seen: set[str] = set()
    kinds: dict[str, NodeKind] = {}
    skip = 0

    while True:
        extension: list[str] = []
        for name in process_queue[skip:]:
            if name in seen:
                continue
            node = registry.get(name)
            kinds[name] = node.kind
            if node.is_filter:
                extension.extend(dep for dep in node.inputs if dep not in seen)
            seen.add(name)

        skip = len(process_queue)
        if not extension:
            break

        pending = set(seen)
        for name in extension:
            if name not in pending:
                pending.add(name)
                process_queue.append(name)

    return process_queue, kinds


def _dependencies_first(registry: Registry, names: list[str]) -> list[str]:
    """Stable depth-first repair so each node follows its in-queue inputs.

    Orders that already satisfy this come back unchanged. Breadth-first
    discovery misses it when a node is reached early through a short path
    and again later through a longer one (an output that also feeds another
    output, or a diamond). Nodes on a cycle are placed in depth-first order.
    """
    in_queue = set(names)
    placed: set[str] = set()
    visiting: set[str] = set()
    ordered: list[str] = []

    for root in names:
        if root in placed:
            continue
        visiting.add(root)
        stack = [(root, iter(registry.get(root).inputs))]
        while stack:
            name, deps = stack[-1]
            for dep in deps:
                if dep in in_queue and dep not in placed and dep not in visiting:
                    visiting.add(dep)
                    stack.append((dep, iter(registry.get(dep).inputs)))
                    break
            else:
                stack.pop()
                visiting.discard(name)
                placed.add(name)
                ordered.append(name)
    return ordered
