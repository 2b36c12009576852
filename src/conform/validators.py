"""Structural validators over the shared value model.

A :data:`Validator` is a finite tree of frozen dataclasses describing what an
acceptable value looks like. :func:`evaluate` walks that tree against a value
and returns the first :data:`MatchProblem` found, or ``None`` on acceptance.

Validators come from two places: :func:`conform.schema.infer` derives them
from an example value, and :func:`parse_validator` builds them from a
hand-authored literal in a specification document.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from conform.values import JsonType, Value, json_type_of, values_equal

ROOT_LOCATION = "$"

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")


def _show(value: Value) -> str:
    """Render a value compactly for messages."""
    return json.dumps(value, sort_keys=True, ensure_ascii=False)


def _child_location(location: str, key: str) -> str:
    if _IDENTIFIER.match(key):
        return f"{location}.{key}"
    return f"{location}[{json.dumps(key, ensure_ascii=False)}]"


def _is_number(value: Value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# -----------------------------------------------------------------------------
# Validators
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class AnyValue:
    """Accepts every value."""


@dataclass(frozen=True)
class TypeSet:
    """Accepts values whose type tag is one of ``types``."""

    types: frozenset[JsonType]


@dataclass(frozen=True)
class BoolValue:
    """Accepts exactly the boolean ``value``."""

    value: bool


@dataclass(frozen=True)
class ExactNumber:
    """Accepts a number equal to ``value`` (no epsilon)."""

    value: int | float


@dataclass(frozen=True)
class NumericRange:
    """Accepts a number in ``[low, high]``, both bounds inclusive."""

    low: int | float
    high: int | float

    def __post_init__(self) -> None:
        if not (_is_number(self.low) and _is_number(self.high)):
            raise ValueError("range bounds must be numbers")
        if self.low > self.high:
            raise ValueError(f"range lower bound {self.low} exceeds upper bound {self.high}")


@dataclass(frozen=True)
class ExactString:
    """Accepts exactly the string ``value``."""

    value: str


@dataclass(frozen=True)
class RegexString:
    """Accepts strings in which ``pattern`` is found."""

    pattern: re.Pattern[str]


@dataclass(frozen=True)
class ExactArray:
    """Accepts an array structurally equal to ``items``."""

    items: list[Value]


@dataclass(frozen=True)
class ArrayContains:
    """Accepts an array with at least one element matching ``inner``."""

    inner: Validator


@dataclass(frozen=True)
class ObjectHasKey:
    """Accepts an object that has ``key`` with a value matching ``inner``."""

    key: str
    inner: Validator = field(default_factory=AnyValue)


@dataclass(frozen=True)
class ObjectLacksKey:
    """Accepts an object that does not have ``key``."""

    key: str


@dataclass(frozen=True)
class ExactObject:
    """Accepts an object with exactly the keys and values of ``fields``."""

    fields: dict[str, Value]


@dataclass(frozen=True)
class AllOf:
    """Accepts values matched by every validator in ``validators``."""

    validators: tuple[Validator, ...]


Validator = Union[
    AnyValue,
    TypeSet,
    BoolValue,
    ExactNumber,
    NumericRange,
    ExactString,
    RegexString,
    ExactArray,
    ArrayContains,
    ObjectHasKey,
    ObjectLacksKey,
    ExactObject,
    AllOf,
]


# -----------------------------------------------------------------------------
# Match problems
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class DisallowedType:
    """The value's type is not among the allowed types."""

    allowed: frozenset[JsonType]
    actual: JsonType
    location: str = ROOT_LOCATION

    @property
    def message(self) -> str:
        allowed = ", ".join(sorted(t.value for t in self.allowed))
        return (
            f"{self.location}: value has allowed types [{allowed}] "
            f"but was found to be {self.actual.value}"
        )


@dataclass(frozen=True)
class WrongValue:
    """The value differs from the expected literal."""

    expected: Value
    actual: Value
    location: str = ROOT_LOCATION

    @property
    def message(self) -> str:
        return (
            f"{self.location}: value was expected to be {_show(self.expected)} "
            f"but was found to be {_show(self.actual)}"
        )


@dataclass(frozen=True)
class NoRegexMatch:
    """The value is not a string matching the pattern."""

    pattern: str
    actual: Value
    location: str = ROOT_LOCATION

    @property
    def message(self) -> str:
        return f"{self.location}: value {_show(self.actual)} doesn't match /{self.pattern}/"


@dataclass(frozen=True)
class NoArrayContains:
    """The value is not an array, or no element matched."""

    actual: Value
    location: str = ROOT_LOCATION

    @property
    def message(self) -> str:
        if json_type_of(self.actual) is not JsonType.ARRAY:
            return f"{self.location}: expected an array but found {_show(self.actual)}"
        return f"{self.location}: no array member matched the expected element"


@dataclass(frozen=True)
class OutOfRange:
    """A number lies outside an inclusive range."""

    low: int | float
    high: int | float
    actual: int | float
    location: str = ROOT_LOCATION

    @property
    def message(self) -> str:
        return (
            f"{self.location}: value {_show(self.actual)} is outside "
            f"the range [{self.low}, {self.high}]"
        )


@dataclass(frozen=True)
class MissingKey:
    """A required object key is absent."""

    key: str
    location: str = ROOT_LOCATION

    @property
    def message(self) -> str:
        return f"{self.location}: {_show(self.key)} is a required property"


@dataclass(frozen=True)
class UnexpectedKey:
    """A forbidden object key is present."""

    key: str
    location: str = ROOT_LOCATION

    @property
    def message(self) -> str:
        return f"{self.location}: {_show(self.key)} is not allowed"


MatchProblem = Union[
    DisallowedType,
    WrongValue,
    NoRegexMatch,
    NoArrayContains,
    OutOfRange,
    MissingKey,
    UnexpectedKey,
]


# -----------------------------------------------------------------------------
# Evaluation
# -----------------------------------------------------------------------------


def evaluate(
    validator: Validator,
    value: Value,
    location: str = ROOT_LOCATION,
) -> MatchProblem | None:
    """Check a value against a validator.

    Evaluation stops at the first failing clause; a single call never
    reports more than one problem.

    Args:
        validator: The validator to apply.
        value: A normalised value (see :mod:`conform.values`).
        location: Path of ``value`` inside the document, used in problems.

    Returns:
        ``None`` if the value is accepted, otherwise the problem found.
    """
    actual_type = json_type_of(value)

    if isinstance(validator, AnyValue):
        return None

    if isinstance(validator, TypeSet):
        if actual_type in validator.types:
            return None
        return DisallowedType(validator.types, actual_type, location)

    if isinstance(validator, BoolValue):
        if actual_type is JsonType.BOOL and value == validator.value:
            return None
        return WrongValue(validator.value, value, location)

    if isinstance(validator, ExactNumber):
        if values_equal(validator.value, value):
            return None
        return WrongValue(validator.value, value, location)

    if isinstance(validator, NumericRange):
        if actual_type is not JsonType.NUMBER:
            return DisallowedType(frozenset({JsonType.NUMBER}), actual_type, location)
        if validator.low <= value <= validator.high:
            return None
        return OutOfRange(validator.low, validator.high, value, location)

    if isinstance(validator, ExactString):
        if actual_type is JsonType.STRING and value == validator.value:
            return None
        return WrongValue(validator.value, value, location)

    if isinstance(validator, RegexString):
        if actual_type is JsonType.STRING and validator.pattern.search(value):
            return None
        return NoRegexMatch(validator.pattern.pattern, value, location)

    if isinstance(validator, ExactArray):
        if values_equal(validator.items, value):
            return None
        return WrongValue(validator.items, value, location)

    if isinstance(validator, ArrayContains):
        if actual_type is JsonType.ARRAY and any(
            evaluate(validator.inner, element, location) is None for element in value
        ):
            return None
        return NoArrayContains(value, location)

    if isinstance(validator, ObjectHasKey):
        if actual_type is not JsonType.OBJECT:
            return DisallowedType(frozenset({JsonType.OBJECT}), actual_type, location)
        if validator.key not in value:
            return MissingKey(validator.key, location)
        return evaluate(
            validator.inner,
            value[validator.key],
            _child_location(location, validator.key),
        )

    if isinstance(validator, ObjectLacksKey):
        if actual_type is not JsonType.OBJECT:
            return DisallowedType(frozenset({JsonType.OBJECT}), actual_type, location)
        if validator.key in value:
            return UnexpectedKey(validator.key, location)
        return None

    if isinstance(validator, ExactObject):
        if values_equal(validator.fields, value):
            return None
        return WrongValue(validator.fields, value, location)

    if isinstance(validator, AllOf):
        for clause in validator.validators:
            problem = evaluate(clause, value, location)
            if problem is not None:
                return problem
        return None

    raise TypeError(f"Unknown validator: {type(validator).__name__}")


# -----------------------------------------------------------------------------
# Literal validators
# -----------------------------------------------------------------------------

_TYPE_NAMES: dict[str, JsonType] = {t.value: t for t in JsonType}
_TYPE_NAMES["bool"] = JsonType.BOOL


def _parse_type_set(data: Any) -> TypeSet:
    names = [data] if isinstance(data, str) else data
    if not isinstance(names, list) or not names:
        raise ValueError("'type' expects a type name or a non-empty list of type names")
    types: set[JsonType] = set()
    for name in names:
        if not isinstance(name, str) or name.lower() not in _TYPE_NAMES:
            known = ", ".join(t.value for t in JsonType)
            raise ValueError(f"unknown type {name!r} (expected one of: {known})")
        types.add(_TYPE_NAMES[name.lower()])
    return TypeSet(frozenset(types))


def _parse_bool(data: Any) -> BoolValue:
    if not isinstance(data, bool):
        raise ValueError("'bool' expects true or false")
    return BoolValue(data)


def _parse_number(data: Any) -> ExactNumber:
    if not _is_number(data):
        raise ValueError("'number' expects a number")
    return ExactNumber(data)


def _parse_range(data: Any) -> NumericRange:
    if not isinstance(data, list) or len(data) != 2:
        raise ValueError("'range' expects a [low, high] pair")
    return NumericRange(data[0], data[1])


def _parse_string(data: Any) -> ExactString:
    if not isinstance(data, str):
        raise ValueError("'string' expects a string")
    return ExactString(data)


def _parse_regex(data: Any) -> RegexString:
    if not isinstance(data, str):
        raise ValueError("'regex' expects a pattern string")
    try:
        return RegexString(re.compile(data))
    except re.error as e:
        raise ValueError(f"invalid regex {data!r}: {e}") from e


def _parse_array(data: Any) -> ExactArray:
    if not isinstance(data, list):
        raise ValueError("'array' expects a list")
    return ExactArray(data)


def _parse_has_key(data: Any) -> ObjectHasKey:
    if isinstance(data, str):
        return ObjectHasKey(data)
    if not isinstance(data, Mapping) or not isinstance(data.get("key"), str):
        raise ValueError("'has-key' expects a key name or a mapping with 'key' and 'value'")
    unknown = set(data) - {"key", "value"}
    if unknown:
        raise ValueError(f"'has-key' got unknown fields: {', '.join(sorted(unknown))}")
    inner = parse_validator(data["value"]) if "value" in data else AnyValue()
    return ObjectHasKey(data["key"], inner)


def _parse_lacks_key(data: Any) -> ObjectLacksKey:
    if not isinstance(data, str):
        raise ValueError("'lacks-key' expects a key name")
    return ObjectLacksKey(data)


def _parse_object(data: Any) -> ExactObject:
    if not isinstance(data, dict):
        raise ValueError("'object' expects a mapping")
    return ExactObject(data)


def _parse_all(data: Any) -> AllOf:
    if not isinstance(data, list):
        raise ValueError("'all' expects a list of validators")
    return AllOf(tuple(parse_validator(item) for item in data))


def _parse_any(data: Any) -> AnyValue:
    if data is not True:
        raise ValueError("'any' expects true")
    return AnyValue()


_LITERAL_PARSERS = {
    "any": _parse_any,
    "type": _parse_type_set,
    "bool": _parse_bool,
    "number": _parse_number,
    "range": _parse_range,
    "string": _parse_string,
    "regex": _parse_regex,
    "array": _parse_array,
    "contains": lambda data: ArrayContains(parse_validator(data)),
    "has-key": _parse_has_key,
    "lacks-key": _parse_lacks_key,
    "object": _parse_object,
    "all": _parse_all,
}


def parse_validator(data: Any) -> Validator:
    """Build a validator from a hand-authored literal.

    The literal is a single-key mapping naming the validator kind, e.g.
    ``{"range": [1, 10]}`` or ``{"has-key": {"key": "name", "value": {"type": "string"}}}``.

    Raises:
        ValueError: If the literal is malformed.
    """
    if not isinstance(data, Mapping) or len(data) != 1:
        known = ", ".join(_LITERAL_PARSERS)
        raise ValueError(f"a validator must be a mapping with exactly one of: {known}")
    ((kind, argument),) = data.items()
    parser = _LITERAL_PARSERS.get(kind)
    if parser is None:
        raise ValueError(f"unknown validator kind {kind!r}")
    return parser(argument)


def dump_validator(validator: Validator) -> dict[str, Any]:
    """Render a validator back into its literal form."""
    if isinstance(validator, AnyValue):
        return {"any": True}
    if isinstance(validator, TypeSet):
        return {"type": sorted(t.value for t in validator.types)}
    if isinstance(validator, BoolValue):
        return {"bool": validator.value}
    if isinstance(validator, ExactNumber):
        return {"number": validator.value}
    if isinstance(validator, NumericRange):
        return {"range": [validator.low, validator.high]}
    if isinstance(validator, ExactString):
        return {"string": validator.value}
    if isinstance(validator, RegexString):
        return {"regex": validator.pattern.pattern}
    if isinstance(validator, ExactArray):
        return {"array": validator.items}
    if isinstance(validator, ArrayContains):
        return {"contains": dump_validator(validator.inner)}
    if isinstance(validator, ObjectHasKey):
        return {"has-key": {"key": validator.key, "value": dump_validator(validator.inner)}}
    if isinstance(validator, ObjectLacksKey):
        return {"lacks-key": validator.key}
    if isinstance(validator, ExactObject):
        return {"object": validator.fields}
    if isinstance(validator, AllOf):
        return {"all": [dump_validator(clause) for clause in validator.validators]}
    raise TypeError(f"Unknown validator: {type(validator).__name__}")
