"""Tests for schema-by-example inference."""

from __future__ import annotations

import pytest

from conform.schema import infer
from conform.validators import (
    BoolValue,
    DisallowedType,
    ExactNumber,
    ExactString,
    MissingKey,
    NoArrayContains,
    TypeSet,
    WrongValue,
    evaluate,
)
from conform.values import FileFormat, JsonType, parse_document

EXAMPLES = [
    None,
    True,
    0,
    -2.5,
    "",
    "text",
    [],
    [1, "a", None],
    [[1, 2], [3]],
    {},
    {"package": {"edition": "2021", "authors": ["me"]}},
    {"a": [{"b": [True, {"c": None}]}]},
    float("nan"),
    {"x": float("nan"), "xs": [float("nan")]},
]


class TestInferScalars:
    """Tests for scalar inference."""

    def test_scalars_map_to_exact_validators(self) -> None:
        """Test each scalar kind infers an exact-equality validator."""
        assert infer(None) == TypeSet(frozenset({JsonType.NULL}))
        assert infer(False) == BoolValue(False)
        assert infer(7) == ExactNumber(7)
        assert infer("x") == ExactString("x")

    def test_unsupported_example(self) -> None:
        """Test examples outside the value model are rejected."""
        with pytest.raises(TypeError):
            infer({"a": object()})


class TestInferredSchemaAcceptsItsExample:
    """An example always validates against its own inferred schema."""

    @pytest.mark.parametrize("example", EXAMPLES)
    def test_example_matches_itself(self, example: object) -> None:
        """Test evaluate(infer(v), v) succeeds."""
        assert evaluate(infer(example), example) is None

    @pytest.mark.parametrize(
        ("text", "format"),
        [("x = nan\n", FileFormat.TOML), ("x: .nan\n", FileFormat.YAML)],
    )
    def test_parsed_nan_matches_itself(self, text: str, format: FileFormat) -> None:
        """Test a parsed NaN validates against its own inferred schema."""
        value = parse_document(text, format)
        assert evaluate(infer(value), value) is None


class TestArrayContainment:
    """Tests for array containment semantics."""

    def test_order_and_length_insensitive(self) -> None:
        """Test extra and reordered elements still pass."""
        assert evaluate(infer(["a", "b"]), ["b", "a", "c"]) is None

    def test_missing_element(self) -> None:
        """Test an expected element with no match fails."""
        assert evaluate(infer(["a", "b"]), ["a"]) == NoArrayContains(["a"])

    def test_empty_example_requires_array(self) -> None:
        """Test an empty example only constrains the type."""
        assert evaluate(infer([]), [1, 2]) is None
        assert evaluate(infer([]), {}) == DisallowedType(
            frozenset({JsonType.ARRAY}), JsonType.OBJECT
        )

    def test_nested_object_elements(self) -> None:
        """Test array elements are matched with open object semantics."""
        schema = infer({"deps": [{"name": "serde"}]})
        actual = {"deps": [{"name": "regex", "v": 1}, {"name": "serde", "v": 2}]}
        assert evaluate(schema, actual) is None
        assert evaluate(schema, {"deps": [{"name": "regex"}]}) == NoArrayContains(
            [{"name": "regex"}], "$.deps"
        )


class TestObjectOpenness:
    """Tests for open object semantics."""

    def test_extra_keys_allowed(self) -> None:
        """Test keys absent from the example are unconstrained."""
        assert evaluate(infer({"k": 1}), {"k": 1, "extra": 2}) is None

    def test_missing_key_fails(self) -> None:
        """Test a missing expected key fails."""
        assert evaluate(infer({"k": 1}), {"other": 1}) == MissingKey("k")

    def test_nested_value_mismatch(self) -> None:
        """Test nested mismatches report their location."""
        problem = evaluate(
            infer({"hello": {"world": True}}),
            {"hello": {"world": False}},
        )
        assert problem == WrongValue(True, False, "$.hello.world")

    def test_empty_example_requires_object(self) -> None:
        """Test an empty example only constrains the type."""
        assert evaluate(infer({}), {"anything": 1}) is None
        assert evaluate(infer({}), []) == DisallowedType(
            frozenset({JsonType.OBJECT}), JsonType.ARRAY
        )
