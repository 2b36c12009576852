"""Conformance problems reported by the tree checker.

Problems are plain values. A check run collects them into a list, which is
its only output; they are never raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Union

from conform.validators import MatchProblem
from conform.values import FileFormat


@dataclass(frozen=True)
class IncorrectLength:
    """A file's byte length differs from the expected length.

    Attributes:
        path: Path of the checked file.
        expected: Expected length in bytes.
        actual: Actual length in bytes.
    """

    path: Path
    expected: int
    actual: int

    @property
    def message(self) -> str:
        return f"File {self.path} should be {self.expected} bytes long but is {self.actual}"


@dataclass(frozen=True)
class InvalidFormat:
    """A file couldn't be parsed in the expected format.

    Attributes:
        path: Path of the checked file.
        format: Format the file was parsed as.
        cause: Parser error message.
    """

    path: Path
    format: FileFormat
    cause: str

    @property
    def message(self) -> str:
        return f"File {self.path} couldn't be read in as {self.format.value}: {self.cause}"


@dataclass(frozen=True)
class SchemaNotMatched:
    """A parsed file was rejected by its validator.

    Attributes:
        path: Path of the checked file.
        detail: The clause that failed, with the offending value.
    """

    path: Path
    detail: MatchProblem

    @property
    def message(self) -> str:
        return f"Schema not matched in {self.path}:\n\t{self.detail.message}"


@dataclass(frozen=True)
class RegexNotMatched:
    """A file's text doesn't contain a match for a pattern."""

    path: Path
    pattern: str

    @property
    def message(self) -> str:
        return f"File {self.path} does not match regex {self.pattern}"


@dataclass(frozen=True)
class FileNotPresent:
    """A required file is missing."""

    path: Path

    @property
    def message(self) -> str:
        return f"File {self.path} does not exist"


@dataclass(frozen=True)
class DisallowedFile:
    """A forbidden file exists."""

    path: Path

    @property
    def message(self) -> str:
        return f"File {self.path} is not allowed to exist"


@dataclass(frozen=True)
class FolderNotPresent:
    """A required folder is missing."""

    path: Path

    @property
    def message(self) -> str:
        return f"Folder {self.path} does not exist"


@dataclass(frozen=True)
class DisallowedFolder:
    """A forbidden folder exists."""

    path: Path

    @property
    def message(self) -> str:
        return f"Folder {self.path} is not allowed to exist"


Problem = Union[
    IncorrectLength,
    InvalidFormat,
    SchemaNotMatched,
    RegexNotMatched,
    FileNotPresent,
    DisallowedFile,
    FolderNotPresent,
    DisallowedFolder,
]


def problem_kind(problem: Problem) -> str:
    """Return a stable kebab-case name for a problem's variant."""
    name = type(problem).__name__
    return "".join(f"-{c.lower()}" if c.isupper() else c for c in name).lstrip("-")
