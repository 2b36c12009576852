"""Filesystem tree checker.

Walks a declarative tree of file and folder expectations against the real
filesystem and collects every :data:`~conform.problems.Problem` it finds:

- File presence/absence: required files exist, forbidden files don't
- Folder presence/absence: same for folders, recursing into required ones
- Length: a file's size in bytes
- Regex: a file's text contains a match
- Schema: a file parses as JSON/YAML/TOML and satisfies a validator

A mismatch never stops the walk. Only filesystem faults other than a path
not existing (e.g. permission denied) abort it, as :class:`CheckIOError`.
"""

from __future__ import annotations

import logging
import os
import re
import stat
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from conform import problems
from conform.errors import CheckIOError
from conform.problems import Problem
from conform.validators import Validator, evaluate
from conform.values import DocumentParseError, FileFormat, parse_document

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# File specs
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class HasLength:
    """The file is exactly ``length`` bytes long."""

    length: int


@dataclass(frozen=True)
class MatchesRegex:
    """The file's text contains a match for ``pattern``."""

    pattern: re.Pattern[str]


@dataclass(frozen=True)
class MatchesSchema:
    """The file parses as ``format`` and is accepted by ``validator``."""

    format: FileFormat
    validator: Validator


FileSpec = Union[HasLength, MatchesRegex, MatchesSchema]


# -----------------------------------------------------------------------------
# Tree nodes
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class FilePresent:
    """A regular file must exist at ``name`` and satisfy every spec."""

    name: str
    specs: tuple[FileSpec, ...] = ()


@dataclass(frozen=True)
class FileNotPresent:
    """No regular file may exist at ``name``."""

    name: str


@dataclass(frozen=True)
class FolderPresent:
    """A directory must exist at ``name``; ``children`` are checked inside it."""

    name: str
    children: tuple[FilesAndFolders, ...] = ()


@dataclass(frozen=True)
class FolderNotPresent:
    """No directory may exist at ``name``."""

    name: str


FilesAndFolders = Union[FilePresent, FileNotPresent, FolderPresent, FolderNotPresent]


# -----------------------------------------------------------------------------
# Checker
# -----------------------------------------------------------------------------


def _stat(path: Path) -> os.stat_result | None:
    """Stat a path, returning None if it doesn't exist.

    Raises:
        CheckIOError: For any failure other than the path not existing.
    """
    try:
        return path.stat()
    except (FileNotFoundError, NotADirectoryError):
        return None
    except OSError as e:
        raise CheckIOError(path, e) from e


def _is_file(path: Path) -> bool:
    st = _stat(path)
    return st is not None and stat.S_ISREG(st.st_mode)


def _is_dir(path: Path) -> bool:
    st = _stat(path)
    return st is not None and stat.S_ISDIR(st.st_mode)


def _read_text(path: Path) -> str:
    # Decode the raw bytes so line endings reach the regex unchanged
    try:
        return path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CheckIOError(path, e) from e


class TreeChecker:
    """Checks a declarative tree against the directory at ``root``.

    Attributes:
        root: Directory every top-level node name is resolved against.
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def check(self, tree: Iterable[FilesAndFolders]) -> list[Problem]:
        """Check every node of the tree.

        Args:
            tree: Top-level nodes, in declaration order.

        Returns:
            All problems found, in declaration order (depth-first).

        Raises:
            CheckIOError: On filesystem faults other than missing paths.
        """
        return self._check_nodes(self.root, tree)

    def _check_nodes(self, root: Path, nodes: Iterable[FilesAndFolders]) -> list[Problem]:
        found: list[Problem] = []
        for node in nodes:
            found.extend(self._check_node(root, node))
        return found

    def _check_node(self, root: Path, node: FilesAndFolders) -> list[Problem]:
        path = root / node.name
        logger.debug("Checking %s against %s", path, type(node).__name__)

        if isinstance(node, FilePresent):
            if not _is_file(path):
                return [problems.FileNotPresent(path)]
            found: list[Problem] = []
            for spec in node.specs:
                problem = self._check_spec(path, spec)
                if problem is not None:
                    found.append(problem)
            return found

        if isinstance(node, FileNotPresent):
            return [problems.DisallowedFile(path)] if _is_file(path) else []

        if isinstance(node, FolderPresent):
            if not _is_dir(path):
                return [problems.FolderNotPresent(path)]
            return self._check_nodes(path, node.children)

        if isinstance(node, FolderNotPresent):
            return [problems.DisallowedFolder(path)] if _is_dir(path) else []

        raise TypeError(f"Unknown tree node: {type(node).__name__}")

    def _check_spec(self, path: Path, spec: FileSpec) -> Problem | None:
        if isinstance(spec, HasLength):
            st = _stat(path)
            actual = st.st_size if st is not None else 0
            if actual != spec.length:
                return problems.IncorrectLength(path, spec.length, actual)
            return None

        if isinstance(spec, MatchesRegex):
            if spec.pattern.search(_read_text(path)) is None:
                return problems.RegexNotMatched(path, spec.pattern.pattern)
            return None

        if isinstance(spec, MatchesSchema):
            text = _read_text(path)
            try:
                value = parse_document(text, spec.format)
            except DocumentParseError as e:
                return problems.InvalidFormat(path, spec.format, str(e.cause))
            detail = evaluate(spec.validator, value)
            if detail is not None:
                return problems.SchemaNotMatched(path, detail)
            return None

        raise TypeError(f"Unknown file spec: {type(spec).__name__}")


def check_folder(root: Path | str, tree: Iterable[FilesAndFolders]) -> list[Problem]:
    """Check a declarative tree against the directory at ``root``.

    Args:
        root: Directory to check.
        tree: Top-level nodes, in declaration order.

    Returns:
        All problems found; an empty list means the directory conforms.

    Raises:
        CheckIOError: On filesystem faults other than missing paths.
    """
    found = TreeChecker(Path(root)).check(tree)
    logger.info("Checked %s: %d problem(s)", root, len(found))
    return found
