"""Fatal errors that abort a conform run before any report is produced.

Conformance failures are not exceptions; see :mod:`conform.problems`.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class ConformError(Exception):
    """Base class for all fatal conform errors."""


class SpecificationError(ConformError):
    """Raised when a specification document cannot be read or is invalid."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Invalid specification {source}: {reason}")


class FetchError(ConformError):
    """Raised when an included document cannot be fetched."""

    def __init__(self, reference: str, cause: Exception | str) -> None:
        self.reference = reference
        self.cause = cause
        super().__init__(f"Couldn't fetch {reference}: {cause}")


class IncludeCycleError(ConformError):
    """Raised when a document (transitively) includes itself."""

    def __init__(self, chain: Sequence[str]) -> None:
        self.chain = list(chain)
        super().__init__("Include cycle detected: " + " -> ".join(self.chain))


class CheckIOError(ConformError):
    """Raised for filesystem faults other than a path not existing."""

    def __init__(self, path: Path, cause: Exception) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Couldn't read {path}: {cause}")
