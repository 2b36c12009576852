"""Schema-by-example: derive a validator from an example value.

The inferred schema is open and order-insensitive:

- scalars must be equal to the example
- arrays must contain, somewhere, a match for every example element
- objects must have every example key with a matching value; other keys
  are allowed
"""

from __future__ import annotations

from conform.validators import (
    AllOf,
    ArrayContains,
    BoolValue,
    ExactNumber,
    ExactString,
    ObjectHasKey,
    TypeSet,
    Validator,
)
from conform.values import JsonType, Value, json_type_of


def infer(example: Value) -> Validator:
    """Infer a validator from an example value.

    Args:
        example: A normalised value (see :mod:`conform.values`).

    Returns:
        A validator that accepts ``example`` and every value that contains it.

    Raises:
        TypeError: If the example is outside the value model.
    """
    kind = json_type_of(example)

    if kind is JsonType.NULL:
        return TypeSet(frozenset({JsonType.NULL}))
    if kind is JsonType.BOOL:
        return BoolValue(example)
    if kind is JsonType.NUMBER:
        return ExactNumber(example)
    if kind is JsonType.STRING:
        return ExactString(example)
    if kind is JsonType.ARRAY:
        return AllOf(
            (TypeSet(frozenset({JsonType.ARRAY})),)
            + tuple(ArrayContains(infer(item)) for item in example)
        )
    return AllOf(
        (TypeSet(frozenset({JsonType.OBJECT})),)
        + tuple(ObjectHasKey(key, infer(item)) for key, item in example.items())
    )
