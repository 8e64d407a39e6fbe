"""
Graph declarations from the YAML configuration.

Expected layout:

    sources:
      orf: https://rss.orf.at/news.xml
    filters:
      markets:
        in: [orf]
        contains: market          # or a list of strings, any of which matches
    output:
      combine: [markets]

Only the shape of these sections is checked here. Whether the names form a
valid graph is decided by ``feedchain.core.graph.build_registry``.
"""

from __future__ import annotations

from typing import Any

from ..core.errors import ConfigFormatError
from ..core.predicate import AnyOf, Contains
from ..core.types import FilterDecl, GraphDeclaration, Predicate, SourceDecl


FILTER_SECTION_KEYS = ("filters", "filter")


def parse_declarations(raw: dict[str, Any]) -> GraphDeclaration:
    """Build ordered declarations from a raw configuration mapping.

    Args:
        raw: Parsed YAML document

    Returns:
        GraphDeclaration with sources, filters and outputs in file order

    Raises:
        ConfigFormatError: A section is missing or has the wrong shape
    """
    return GraphDeclaration(
        sources=tuple(_parse_sources(raw)),
        filters=tuple(_parse_filters(raw)),
        outputs=tuple(_parse_outputs(raw)),
    )


def _parse_sources(raw: dict[str, Any]) -> list[SourceDecl]:
    if "sources" not in raw:
        raise ConfigFormatError("sources", "no sources section found in config")
    section = raw["sources"] or {}
    if not isinstance(section, dict):
        raise ConfigFormatError("sources", "expected a mapping of name to URL")

    sources = []
    for name, value in section.items():
        if isinstance(value, dict):
            value = value.get("url")
        if not isinstance(value, str) or not value.strip():
            raise ConfigFormatError(f"sources.{name}", "expected a URL or path string")
        sources.append(SourceDecl(name=str(name), locator=value.strip()))
    return sources


def _parse_filters(raw: dict[str, Any]) -> list[FilterDecl]:
    key = next((k for k in FILTER_SECTION_KEYS if k in raw), None)
    if key is None:
        return []
    section = raw[key] or {}
    if not isinstance(section, dict):
        raise ConfigFormatError(key, "expected a mapping of filter name to settings")

    filters = []
    for name, table in section.items():
        where = f"{key}.{name}"
        if not isinstance(table, dict):
            raise ConfigFormatError(where, "expected a table with 'in' and 'contains'")
        if "in" not in table:
            raise ConfigFormatError(f"{where}.in", "no input feeds specified")
        if "contains" not in table:
            raise ConfigFormatError(f"{where}.contains", "no 'contains' field")
        filters.append(
            FilterDecl(
                name=str(name),
                inputs=tuple(_string_list(table["in"], f"{where}.in")),
                predicate=_parse_predicate(table["contains"], f"{where}.contains"),
            )
        )
    return filters


def _parse_outputs(raw: dict[str, Any]) -> list[str]:
    section = raw.get("output")
    if not isinstance(section, dict):
        raise ConfigFormatError("output", "unable to find 'output' table in configuration")
    if "combine" not in section:
        raise ConfigFormatError("output.combine", "no 'combine' field in output section")
    combine = section["combine"]
    if not isinstance(combine, list):
        raise ConfigFormatError("output.combine", "should be a list of names")
    return _string_list(combine, "output.combine")


def _parse_predicate(value: Any, where: str) -> Predicate:
    if isinstance(value, str):
        return Contains(value)
    if isinstance(value, list) and value:
        return AnyOf(tuple(Contains(text) for text in _string_list(value, where)))
    raise ConfigFormatError(where, "expected a string or a non-empty list of strings")


def _string_list(value: Any, where: str) -> list[str]:
    """Accept a single name or a list of names."""
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise ConfigFormatError(where, "expected a list of names")
    for item in value:
        if not isinstance(item, str):
            raise ConfigFormatError(where, f"expected names as strings, got {item!r}")
    return list(value)
