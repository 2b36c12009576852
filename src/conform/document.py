"""Specification documents.

A specification document is a mapping with two keys::

    config:                       # Ordered check items
    - file: Cargo.toml
      format: toml
      schema:                     # Example value; the file must contain it
        package:
          edition: "2021"
    - file: Cargo.lock
      exists: true
    - file: src/lib.rs
      matches-regex: '(?m)^use'
    - folder: target
      exists: false

    include:                      # Further documents to merge, recursively
    - https://example.com/another-conform.yaml

This module turns such a document into a :class:`ConformDocument` whose items
are tree nodes ready for :mod:`conform.checker`.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from conform.checker import (
    FileNotPresent,
    FilePresent,
    FilesAndFolders,
    FileSpec,
    FolderNotPresent,
    FolderPresent,
    HasLength,
    MatchesRegex,
    MatchesSchema,
)
from conform.errors import SpecificationError
from conform.schema import infer
from conform.validators import dump_validator, parse_validator
from conform.values import DocumentParseError, FileFormat, parse_document

TOP_LEVEL_KEYS = {"config", "include"}
FILE_KEYS = {"file", "exists", "length", "matches-regex", "format", "schema", "validator"}
FOLDER_KEYS = {"folder", "exists", "contents"}


@dataclass(frozen=True)
class ConformDocument:
    """A parsed specification document.

    Attributes:
        items: Check items in declaration order.
        includes: References to further documents, unresolved.
    """

    items: tuple[FilesAndFolders, ...] = ()
    includes: tuple[str, ...] = field(default=())


class _ItemError(ValueError):
    """An invalid check item, with its position in the document."""

    def __init__(self, where: str, reason: str) -> None:
        super().__init__(f"{where}: {reason}")


def load_document(
    text: str,
    source: str,
    format: FileFormat | None = None,
) -> ConformDocument:
    """Parse a specification document.

    Args:
        text: Document text.
        source: Where the text came from (path or URL), used in errors and
            to guess the format.
        format: Format to parse as. Guessed from ``source`` if omitted.

    Returns:
        The parsed document.

    Raises:
        SpecificationError: If the text is unparsable or not a valid document.
    """
    format = format or FileFormat.for_path(source)
    try:
        data = parse_document(text, format)
    except DocumentParseError as e:
        raise SpecificationError(source, str(e)) from e
    try:
        return document_from_data(data)
    except ValueError as e:
        raise SpecificationError(source, str(e)) from e


def document_from_data(data: Any) -> ConformDocument:
    """Build a document from an already-parsed value.

    Raises:
        ValueError: If the value is not a valid document.
    """
    if data is None:
        return ConformDocument()
    if not isinstance(data, Mapping):
        raise ValueError("top level must be a mapping with 'config' and/or 'include'")

    unknown = set(data) - TOP_LEVEL_KEYS
    if unknown:
        raise ValueError(f"unknown top-level keys: {', '.join(sorted(unknown))}")

    raw_items = data.get("config") or []
    if not isinstance(raw_items, list):
        raise ValueError("'config' must be a list of check items")

    raw_includes = data.get("include") or []
    if not isinstance(raw_includes, list) or not all(
        isinstance(ref, str) and ref for ref in raw_includes
    ):
        raise ValueError("'include' must be a list of URLs or paths")

    items = _parse_items(raw_items, "config")
    return ConformDocument(items=items, includes=tuple(raw_includes))


def _parse_items(raw_items: list[Any], where: str) -> tuple[FilesAndFolders, ...]:
    return tuple(
        _parse_item(raw, f"{where}[{index}]") for index, raw in enumerate(raw_items)
    )


def _parse_item(raw: Any, where: str) -> FilesAndFolders:
    if not isinstance(raw, Mapping):
        raise _ItemError(where, "check item must be a mapping")
    if "file" in raw and "folder" in raw:
        raise _ItemError(where, "check item can't have both 'file' and 'folder'")
    if "file" in raw:
        return _parse_file_item(raw, where)
    if "folder" in raw:
        return _parse_folder_item(raw, where)
    raise _ItemError(where, "check item needs a 'file' or 'folder' key")


def _parse_name(raw: Mapping[str, Any], key: str, where: str) -> str:
    name = raw[key]
    if not isinstance(name, str) or not name:
        raise _ItemError(where, f"'{key}' must be a non-empty path")
    return name


def _parse_exists(raw: Mapping[str, Any], where: str) -> bool:
    exists = raw.get("exists", True)
    if not isinstance(exists, bool):
        raise _ItemError(where, "'exists' must be true or false")
    return exists


def _parse_file_item(raw: Mapping[str, Any], where: str) -> FilesAndFolders:
    unknown = set(raw) - FILE_KEYS
    if unknown:
        raise _ItemError(where, f"unknown keys: {', '.join(sorted(unknown))}")

    name = _parse_name(raw, "file", where)
    if not _parse_exists(raw, where):
        extra = set(raw) - {"file", "exists"}
        if extra:
            raise _ItemError(
                where, f"a file that must not exist can't have checks: {', '.join(sorted(extra))}"
            )
        return FileNotPresent(name)

    specs: list[FileSpec] = []

    if "length" in raw:
        length = raw["length"]
        if not isinstance(length, int) or isinstance(length, bool) or length < 0:
            raise _ItemError(where, "'length' must be a non-negative integer")
        specs.append(HasLength(length))

    if "matches-regex" in raw:
        pattern = raw["matches-regex"]
        if not isinstance(pattern, str):
            raise _ItemError(where, "'matches-regex' must be a pattern string")
        try:
            specs.append(MatchesRegex(re.compile(pattern)))
        except re.error as e:
            raise _ItemError(where, f"invalid regex {pattern!r}: {e}") from e

    has_schema = "schema" in raw or "validator" in raw
    if "format" in raw or has_schema:
        specs.append(_parse_schema_spec(raw, where))

    return FilePresent(name, tuple(specs))


def _parse_schema_spec(raw: Mapping[str, Any], where: str) -> MatchesSchema:
    if "format" not in raw:
        raise _ItemError(where, "'schema' and 'validator' need a 'format'")
    if "schema" in raw and "validator" in raw:
        raise _ItemError(where, "use either 'schema' or 'validator', not both")
    if "schema" not in raw and "validator" not in raw:
        raise _ItemError(where, "'format' needs a 'schema' or 'validator'")

    if not isinstance(raw["format"], str):
        raise _ItemError(where, "'format' must be one of: json, toml, yaml")
    try:
        format = FileFormat.from_name(raw["format"])
    except ValueError as e:
        raise _ItemError(where, str(e)) from e

    if "schema" in raw:
        return MatchesSchema(format, infer(raw["schema"]))
    try:
        return MatchesSchema(format, parse_validator(raw["validator"]))
    except ValueError as e:
        raise _ItemError(where, f"invalid validator: {e}") from e


def _parse_folder_item(raw: Mapping[str, Any], where: str) -> FilesAndFolders:
    unknown = set(raw) - FOLDER_KEYS
    if unknown:
        raise _ItemError(where, f"unknown keys: {', '.join(sorted(unknown))}")

    name = _parse_name(raw, "folder", where)
    if not _parse_exists(raw, where):
        if "contents" in raw:
            raise _ItemError(where, "a folder that must not exist can't have 'contents'")
        return FolderNotPresent(name)

    contents = raw.get("contents") or []
    if not isinstance(contents, list):
        raise _ItemError(where, "'contents' must be a list of check items")
    return FolderPresent(name, _parse_items(contents, f"{where}.contents"))


# -----------------------------------------------------------------------------
# Dumping
# -----------------------------------------------------------------------------


def _dump_spec(spec: FileSpec) -> dict[str, Any]:
    if isinstance(spec, HasLength):
        return {"length": spec.length}
    if isinstance(spec, MatchesRegex):
        return {"matches-regex": spec.pattern.pattern}
    return {"format": spec.format.value, "validator": dump_validator(spec.validator)}


def dump_items(items: tuple[FilesAndFolders, ...] | list[FilesAndFolders]) -> list[dict[str, Any]]:
    """Render tree nodes back into check-item form.

    Inferred schemas are rendered as validator literals, so the output can be
    loaded again with :func:`document_from_data`.
    """
    dumped: list[dict[str, Any]] = []
    for node in items:
        if isinstance(node, FilePresent):
            entry: dict[str, Any] = {"file": node.name}
            for spec in node.specs:
                entry.update(_dump_spec(spec))
            if not node.specs:
                entry["exists"] = True
        elif isinstance(node, FileNotPresent):
            entry = {"file": node.name, "exists": False}
        elif isinstance(node, FolderPresent):
            entry = {"folder": node.name}
            if node.children:
                entry["contents"] = dump_items(node.children)
        else:
            entry = {"folder": node.name, "exists": False}
        dumped.append(entry)
    return dumped
