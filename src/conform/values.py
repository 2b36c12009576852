"""Value model shared by every structured file format.

JSON, YAML and TOML documents are all normalised into plain JSON-compatible
Python values (``None``, ``bool``, ``int``/``float``, ``str``, ``list`` and
``dict[str, ...]``) so that the matcher only ever deals with one shape.
"""

from __future__ import annotations

import datetime as dt
import json
import math
import sys
from enum import Enum
from pathlib import PurePath
from typing import Any

import yaml

# tomllib is only available in Python 3.11+
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found]

Value = Any


class JsonType(str, Enum):
    """Type tag of a normalised value."""

    NULL = "null"
    BOOL = "boolean"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


class FileFormat(str, Enum):
    """Structured formats a file can be parsed as."""

    JSON = "json"
    TOML = "toml"
    YAML = "yaml"

    @classmethod
    def from_name(cls, name: str) -> FileFormat:
        """Look up a format by its (case-insensitive) name.

        Raises:
            ValueError: If the name is not a known format.
        """
        try:
            return cls(name.lower())
        except ValueError:
            known = ", ".join(f.value for f in cls)
            raise ValueError(f"Unknown format '{name}' (expected one of: {known})") from None

    @classmethod
    def for_path(cls, path: str | PurePath) -> FileFormat:
        """Guess a format from a file suffix, defaulting to YAML."""
        suffix = PurePath(str(path)).suffix.lower()
        if suffix == ".json":
            return cls.JSON
        if suffix == ".toml":
            return cls.TOML
        return cls.YAML


class DocumentParseError(ValueError):
    """Raised when text cannot be parsed as the requested format."""

    def __init__(self, format: FileFormat, cause: Exception) -> None:
        self.format = format
        self.cause = cause
        super().__init__(f"Invalid {format.value}: {cause}")


def json_type_of(value: Value) -> JsonType:
    """Return the type tag of a normalised value.

    ``bool`` is checked before numbers since it subclasses ``int``.

    Raises:
        TypeError: If the value is outside the value model.
    """
    if value is None:
        return JsonType.NULL
    if isinstance(value, bool):
        return JsonType.BOOL
    if isinstance(value, (int, float)):
        return JsonType.NUMBER
    if isinstance(value, str):
        return JsonType.STRING
    if isinstance(value, list):
        return JsonType.ARRAY
    if isinstance(value, dict):
        return JsonType.OBJECT
    raise TypeError(f"Unsupported value type: {type(value).__name__}")


def values_equal(left: Value, right: Value) -> bool:
    """Structural equality that never confuses booleans with numbers.

    NaN equals NaN, so a parsed document always equals itself.
    """
    kind = json_type_of(left)
    if kind is not json_type_of(right):
        return False
    if kind is JsonType.ARRAY:
        return len(left) == len(right) and all(
            values_equal(a, b) for a, b in zip(left, right)
        )
    if kind is JsonType.OBJECT:
        return left.keys() == right.keys() and all(
            values_equal(item, right[key]) for key, item in left.items()
        )
    if isinstance(left, float) and isinstance(right, float):
        if math.isnan(left) and math.isnan(right):
            return True
    return bool(left == right)


def _key_text(key: Any) -> str:
    if isinstance(key, str):
        return key
    if key is None:
        return "null"
    if isinstance(key, bool):
        return "true" if key else "false"
    return str(key)


def normalize(value: Any) -> Value:
    """Convert parser output into the shared value model.

    Dates and times become ISO-8601 strings, tuples and sets become lists and
    mapping keys become strings.

    Raises:
        TypeError: If the value contains something with no JSON counterpart.
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (dt.datetime, dt.date, dt.time)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [normalize(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return [normalize(item) for item in sorted(value, key=repr)]
    if isinstance(value, dict):
        return {_key_text(key): normalize(item) for key, item in value.items()}
    raise TypeError(f"Unsupported value type: {type(value).__name__}")


def parse_document(text: str, format: FileFormat) -> Value:
    """Parse text in the given format into a normalised value.

    Args:
        text: Document text.
        format: Format to parse as.

    Returns:
        The normalised value.

    Raises:
        DocumentParseError: If the text is not valid for the format.
    """
    try:
        if format is FileFormat.JSON:
            raw = json.loads(text)
        elif format is FileFormat.TOML:
            raw = tomllib.loads(text)
        else:
            raw = yaml.safe_load(text)
        return normalize(raw)
    except (ValueError, TypeError, yaml.YAMLError) as e:
        raise DocumentParseError(format, e) from e
