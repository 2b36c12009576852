"""Tests for conform.values module."""

from __future__ import annotations

import datetime as dt

import pytest

from conform.values import (
    DocumentParseError,
    FileFormat,
    JsonType,
    json_type_of,
    normalize,
    parse_document,
    values_equal,
)


class TestJsonTypeOf:
    """Tests for json_type_of."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, JsonType.NULL),
            (True, JsonType.BOOL),
            (False, JsonType.BOOL),
            (0, JsonType.NUMBER),
            (1.5, JsonType.NUMBER),
            ("x", JsonType.STRING),
            ([], JsonType.ARRAY),
            ({}, JsonType.OBJECT),
        ],
    )
    def test_type_tags(self, value: object, expected: JsonType) -> None:
        """Test every value kind maps to its tag."""
        assert json_type_of(value) is expected

    def test_unsupported_type(self) -> None:
        """Test values outside the model are rejected."""
        with pytest.raises(TypeError, match="Unsupported value type"):
            json_type_of(object())


class TestValuesEqual:
    """Tests for values_equal."""

    def test_bool_is_not_a_number(self) -> None:
        """Test True and 1 are different values."""
        assert not values_equal(True, 1)
        assert not values_equal(0, False)

    def test_int_and_float_compare_numerically(self) -> None:
        """Test 1 and 1.0 are the same number."""
        assert values_equal(1, 1.0)

    def test_nested_structures(self) -> None:
        """Test arrays and objects compare structurally."""
        assert values_equal({"a": [1, {"b": None}]}, {"a": [1, {"b": None}]})
        assert not values_equal({"a": [1, 2]}, {"a": [2, 1]})
        assert not values_equal({"a": 1}, {"a": 1, "b": 2})
        assert not values_equal([True], [1])

    def test_nan_equals_nan(self) -> None:
        """Test NaN compares equal to NaN, alone and nested."""
        nan = float("nan")
        assert values_equal(nan, nan)
        assert values_equal({"a": [nan]}, {"a": [nan]})
        assert not values_equal(nan, 1.0)


class TestNormalize:
    """Tests for normalize."""

    def test_dates_become_iso_strings(self) -> None:
        """Test date and datetime values become ISO-8601 text."""
        assert normalize(dt.date(2024, 1, 2)) == "2024-01-02"
        assert normalize(dt.datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05"

    def test_non_string_keys(self) -> None:
        """Test mapping keys become strings."""
        assert normalize({1: "a", None: "c"}) == {"1": "a", "null": "c"}
        assert normalize({False: "b"}) == {"false": "b"}

    def test_tuples_become_lists(self) -> None:
        """Test tuples become lists."""
        assert normalize((1, (2, 3))) == [1, [2, 3]]

    def test_unsupported_value(self) -> None:
        """Test bytes are rejected."""
        with pytest.raises(TypeError):
            normalize(b"raw")


class TestFileFormat:
    """Tests for FileFormat."""

    def test_from_name_is_case_insensitive(self) -> None:
        """Test names are matched case-insensitively."""
        assert FileFormat.from_name("YAML") is FileFormat.YAML
        assert FileFormat.from_name("toml") is FileFormat.TOML

    def test_from_name_unknown(self) -> None:
        """Test unknown names list the known formats."""
        with pytest.raises(ValueError, match="json, toml, yaml"):
            FileFormat.from_name("xml")

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("conform.json", FileFormat.JSON),
            ("conform.TOML", FileFormat.TOML),
            ("conform.yaml", FileFormat.YAML),
            ("conform.yml", FileFormat.YAML),
            ("conform", FileFormat.YAML),
        ],
    )
    def test_for_path(self, path: str, expected: FileFormat) -> None:
        """Test formats are guessed from suffixes, defaulting to YAML."""
        assert FileFormat.for_path(path) is expected


class TestParseDocument:
    """Tests for parse_document."""

    def test_parse_json(self) -> None:
        """Test parsing JSON."""
        assert parse_document('{"a": [1, true, null]}', FileFormat.JSON) == {
            "a": [1, True, None]
        }

    def test_parse_toml(self) -> None:
        """Test parsing TOML, including tables."""
        assert parse_document("[hello]\nworld = true", FileFormat.TOML) == {
            "hello": {"world": True}
        }

    def test_parse_toml_datetime(self) -> None:
        """Test TOML datetimes are normalised to strings."""
        value = parse_document("when = 1979-05-27T07:32:00Z", FileFormat.TOML)
        assert value == {"when": "1979-05-27T07:32:00+00:00"}

    def test_parse_yaml(self) -> None:
        """Test parsing YAML, including dates."""
        value = parse_document("name: x\nreleased: 2024-01-02\n", FileFormat.YAML)
        assert value == {"name": "x", "released": "2024-01-02"}

    def test_parse_empty_yaml(self) -> None:
        """Test an empty YAML document is null."""
        assert parse_document("", FileFormat.YAML) is None

    @pytest.mark.parametrize(
        ("text", "format"),
        [
            ("{", FileFormat.JSON),
            ("[a", FileFormat.TOML),
            ("a: [", FileFormat.YAML),
        ],
    )
    def test_parse_errors(self, text: str, format: FileFormat) -> None:
        """Test invalid text raises DocumentParseError with the format."""
        with pytest.raises(DocumentParseError) as exc_info:
            parse_document(text, format)
        assert exc_info.value.format is format
        assert f"Invalid {format.value}" in str(exc_info.value)
