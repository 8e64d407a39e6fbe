"""
Graph builder: validate declarations and index them into a registry.

The registry owns every Node in a flat tuple and maps names to indexes, so
the planner and resolver only ever hold names, never references into the
configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .errors import DuplicateNameError, EmptySetError, UnknownReferenceError
from .types import FilterDecl, GraphDeclaration, Node, NodeKind, SourceDecl


OUTPUT_REFERRER = "output"


@dataclass(frozen=True)
class Registry:
    """Validated name → node index.

    Attributes:
        nodes: All sources followed by all filters, in declaration order
        outputs: Declared output names, in declaration order
    """
    nodes: tuple[Node, ...]
    outputs: tuple[str, ...]
    _index: dict[str, int] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self._index:
            self._index.update({node.name: i for i, node in enumerate(self.nodes)})

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __len__(self) -> int:
        return len(self.nodes)

    def get(self, name: str, referrer: str = OUTPUT_REFERRER) -> Node:
        try:
            return self.nodes[self._index[name]]
        except KeyError:
            raise UnknownReferenceError(referrer, name) from None

    def index_of(self, name: str) -> int:
        return self._index[name]

    @property
    def sources(self) -> list[Node]:
        return [node for node in self.nodes if node.is_source]

    @property
    def filters(self) -> list[Node]:
        return [node for node in self.nodes if node.is_filter]


def build_registry(
    sources: Iterable[SourceDecl],
    filters: Iterable[FilterDecl],
    outputs: Iterable[str],
) -> Registry:
    """Validate declarations and build the node registry.

    Args:
        sources: Ordered source declarations
        filters: Ordered filter declarations
        outputs: Ordered output names

    Returns:
        Registry holding every declared node

    Raises:
        EmptySetError: No sources, no outputs, or a filter without inputs
        DuplicateNameError: A name declared twice across sources and filters,
            or an output listed twice
        UnknownReferenceError: A filter input or output names nothing declared
    """
    sources = list(sources)
    filters = list(filters)
    outputs = list(outputs)

    if not sources:
        raise EmptySetError("sources")
    if not outputs:
        raise EmptySetError("outputs")

    nodes: list[Node] = []
    names: set[str] = set()
    for decl in sources:
        if decl.name in names:
            raise DuplicateNameError(decl.name)
        names.add(decl.name)
        nodes.append(Node(name=decl.name, kind=NodeKind.SOURCE, locator=decl.locator))
    for decl in filters:
        if decl.name in names:
            raise DuplicateNameError(decl.name)
        names.add(decl.name)
        nodes.append(
            Node(
                name=decl.name,
                kind=NodeKind.FILTER,
                inputs=tuple(decl.inputs),
                predicate=decl.predicate,
            )
        )

    for node in nodes:
        if not node.is_filter:
            continue
        if not node.inputs:
            raise EmptySetError("inputs", owner=node.name)
        for name in node.inputs:
            if name not in names:
                raise UnknownReferenceError(node.name, name)

    seen_outputs: set[str] = set()
    for name in outputs:
        if name not in names:
            raise UnknownReferenceError(OUTPUT_REFERRER, name)
        if name in seen_outputs:
            raise DuplicateNameError(name)
        seen_outputs.add(name)

    return Registry(nodes=tuple(nodes), outputs=tuple(outputs))


def build_from_declaration(declaration: GraphDeclaration) -> Registry:
    return build_registry(declaration.sources, declaration.filters, declaration.outputs)
