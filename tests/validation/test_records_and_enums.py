# Copyright (c) 2025 Artoo Corporation
# Licensed under the Business Source License 1.1 (see LICENSE).
# Change Date: 2029-09-08  •  Change License: LGPL-3.0-or-later

import enum

import pytest

from shapeguard import (
    ConfigurationError,
    enum_from_values,
    literal,
    number,
    optional,
    record,
    string,
)


class Colour(enum.Enum):
    RED = "red"
    GREEN = "green"


def test_record_accepts_matching_entries():
    schema = record(string(), number())

    assert schema.parse({"a": 1, "b": 2}) == {"a": 1, "b": 2}


def test_record_reports_bad_value_at_key_path():
    result = record(string(), number()).safe_parse({"a": "x"})

    assert len(result.issues) == 1
    assert result.issues[0].path == ("a",)
    assert result.issues[0].code == "invalid_type"


def test_record_reports_bad_key_as_invalid_key():
    """
    GIVEN: A record whose keys must be at least 3 characters
    WHEN: One key is too short
    THEN: An invalid_key issue is reported at that key, carrying the key issues
    """
    result = record(string().min(3), number()).safe_parse({"ab": 1, "abc": 2})

    assert len(result.issues) == 1
    issue = result.issues[0]
    assert issue.code == "invalid_key"
    assert issue.path == ("ab",)
    assert [inner.code for inner in issue.issues] == ["too_small"]


def test_record_with_enum_keys_is_exhaustive():
    schema = record(enum_from_values(["a", "b"]), number())

    result = schema.safe_parse({"a": 1})

    assert [(issue.code, issue.path) for issue in result.issues] == [("missing", ("b",))]


def test_record_with_enum_keys_allows_optional_values():
    schema = record(enum_from_values(["a", "b"]), optional(number()))

    assert schema.parse({"a": 1}) == {"a": 1}


def test_record_requires_both_schemas():
    with pytest.raises(ConfigurationError):
        record(string())


def test_enum_accepts_members_and_rejects_others():
    schema = enum_from_values(["red", "green"])

    assert schema.parse("red") == "red"
    result = schema.safe_parse("blue")
    assert result.issues[0].code == "invalid_enum_value"
    assert result.issues[0].values == ("red", "green")
    assert result.issues[0].message == 'Invalid option: expected one of "red"|"green"'


def test_enum_from_enum_class_accepts_members_and_values():
    schema = enum_from_values(Colour)

    assert schema.parse(Colour.RED) is Colour.RED
    assert schema.parse("green") == "green"
    assert schema.safe_parse("blue").success is False


@pytest.mark.parametrize("values", [[], "red", {"a": 1}, ["a", "a"], [object()]])
def test_enum_construction_errors(values):
    with pytest.raises(ConfigurationError):
        enum_from_values(values)


def test_enum_extract_and_exclude():
    schema = enum_from_values(["a", "b", "c"])

    assert schema.extract("a", "b").values == ("a", "b")
    assert schema.exclude("a").values == ("b", "c")
    with pytest.raises(ConfigurationError):
        schema.exclude("a", "b", "c")


def test_literal_uses_strict_equality():
    schema = literal(1)

    assert schema.parse(1) == 1
    result = schema.safe_parse(True)
    assert result.issues[0].code == "invalid_literal"
    assert result.issues[0].message == "Invalid input: expected 1"


def test_literal_requires_values():
    with pytest.raises(ConfigurationError):
        literal()


def test_record_with_enum_class_keys_accepts_member_keys():
    """
    GIVEN: A record keyed by an Enum class
    WHEN: The input uses Enum members as keys
    THEN: The members satisfy the exhaustive key check
    """
    schema = record(enum_from_values(Colour), number())

    assert schema.safe_parse({Colour.RED: 1, Colour.GREEN: 2}).success is True
    assert schema.safe_parse({"red": 1, Colour.GREEN: 2}).success is True

    result = schema.safe_parse({Colour.RED: 1})
    assert [(issue.code, issue.path) for issue in result.issues] == [("missing", ("green",))]
