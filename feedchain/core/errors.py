"""
Error taxonomy for feedchain.

FeedChainError
├── ConfigFormatError       malformed configuration sections
├── ConfigIntegrityError    graph declarations that cannot form a registry
│   ├── DuplicateNameError
│   ├── UnknownReferenceError
│   └── EmptySetError
├── UnresolvableGraphError  a resolution pass made no progress
└── FetchFailure            one failed fetch attempt (swallowed per pass)
"""

from __future__ import annotations


class FeedChainError(Exception):
    """Base class for all feedchain errors."""


class ConfigFormatError(FeedChainError):
    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(f"{key}: {message}")


class ConfigIntegrityError(FeedChainError):
    """Raised by the graph builder before any resolution is attempted."""


class DuplicateNameError(ConfigIntegrityError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Name '{name}' is declared more than once")


class UnknownReferenceError(ConfigIntegrityError):
    def __init__(self, referrer: str, missing_name: str):
        self.referrer = referrer
        self.missing_name = missing_name
        super().__init__(f"'{referrer}' references unknown feed or filter '{missing_name}'")


class EmptySetError(ConfigIntegrityError):
    def __init__(self, kind: str, owner: str | None = None):
        self.kind = kind
        self.owner = owner
        where = f" for '{owner}'" if owner else ""
        super().__init__(f"Empty {kind}{where}; nothing to process")


class UnresolvableGraphError(FeedChainError):
    """A full pass resolved nothing while unresolved nodes remain.

    The cause is a dependency cycle, a source whose fetch keeps failing, or
    both. ``failed_sources`` and ``cycle`` report what was observed without
    deciding between them.

    Attributes:
        unresolved: Names still unresolved, in queue order
        resolved_count: Number of names resolved when the run stalled
        queue_size: Total number of names in the processing queue
        failed_sources: Unresolved sources (their fetch never succeeded)
        cycle: Unresolved filters that depend on themselves through other
            unresolved filters
    """

    def __init__(
        self,
        unresolved: list[str],
        resolved_count: int,
        queue_size: int,
        failed_sources: list[str] | None = None,
        cycle: list[str] | None = None,
    ):
        self.unresolved = list(unresolved)
        self.resolved_count = resolved_count
        self.queue_size = queue_size
        self.failed_sources = list(failed_sources or [])
        self.cycle = list(cycle or [])
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        parts = [
            f"Stuck after resolving {self.resolved_count} of {self.queue_size} items; "
            f"unresolved: {', '.join(self.unresolved)}"
        ]
        if self.cycle:
            parts.append(f"dependency cycle through: {', '.join(self.cycle)}")
        if self.failed_sources:
            parts.append(f"sources that could not be fetched: {', '.join(self.failed_sources)}")
        return ". ".join(parts)


class FetchFailure(FeedChainError):
    def __init__(self, locator: str, reason: str):
        self.locator = locator
        self.reason = reason
        super().__init__(f"Failed to fetch {locator}: {reason}")
