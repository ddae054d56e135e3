# Copyright (c) 2025 Artoo Corporation
# Licensed under the Business Source License 1.1 (see LICENSE).
# Change Date: 2029-09-08  •  Change License: LGPL-3.0-or-later

import pytest

from shapeguard import (
    ConfigurationError,
    ObjectMode,
    array,
    extend,
    loose_object,
    number,
    object_,
    optional,
    strict_object,
    string,
)


def test_strict_object_reports_unrecognized_keys_once():
    result = strict_object({"a": string()}).safe_parse({"a": "x", "b": 1, "c": 2})

    assert len(result.issues) == 1
    issue = result.issues[0]
    assert issue.code == "unrecognized_keys"
    assert issue.path == ()
    assert issue.keys == ("b", "c")
    assert issue.message == 'Unrecognized keys: "b", "c"'


def test_loose_object_passes_unknown_keys_through():
    result = loose_object({"a": string()}).safe_parse({"a": "x", "b": 1})

    assert result.success is True
    assert result.data == {"a": "x", "b": 1}


def test_strip_mode_drops_unknown_keys():
    schema = object_({"a": string()}).strip()

    assert schema.parse({"a": "x", "b": 1}) == {"a": "x"}


def test_default_mode_rejects_each_unknown_key_at_its_path():
    """
    GIVEN: A plain object schema (exact mode)
    WHEN: The input carries two undeclared keys
    THEN: Each undeclared key gets its own invalid_type issue expecting "never"
    """
    result = object_({"a": string()}).safe_parse({"a": "x", "b": 1, "c": "y"})

    assert [(issue.code, issue.path, issue.expected) for issue in result.issues] == [
        ("invalid_type", ("b",), "never"),
        ("invalid_type", ("c",), "never"),
    ]


def test_catchall_validates_unknown_keys():
    schema = object_({"a": string()}).with_catchall(number())

    assert schema.parse({"a": "x", "n": 1}) == {"a": "x", "n": 1}
    result = schema.safe_parse({"a": "x", "n": "one"})
    assert result.issues[0].path == ("n",)
    assert result.issues[0].code == "invalid_type"


def test_extend_adds_keys_without_changing_base():
    base = strict_object({"a": string()})
    extended = extend(base, {"b": number()})

    assert extended.parse({"a": "x", "b": 1}) == {"a": "x", "b": 1}
    assert extended.effective_mode is ObjectMode.STRICT

    before = base.safe_parse({"a": "x", "b": 1})
    assert [issue.code for issue in before.issues] == ["unrecognized_keys"]
    assert list(base.shape) == ["a"]


def test_extend_later_keys_win():
    extended = object_({"a": string()}).extend({"a": number()})

    assert extended.parse({"a": 1}) == {"a": 1}


def test_extend_takes_mode_from_explicit_object_addition():
    extended = object_({"a": string()}).extend(loose_object({"b": number()}))

    assert extended.parse({"a": "x", "b": 1, "z": True}) == {"a": "x", "b": 1, "z": True}


def test_extend_rejects_refined_base():
    refined = object_({"a": string()}).refine(lambda value: True)

    with pytest.raises(ConfigurationError):
        extend(refined, {"b": number()})


def test_pick_and_omit():
    schema = object_({"a": string(), "b": number(), "c": array(string())})

    assert list(schema.pick("a", "c").shape) == ["a", "c"]
    assert list(schema.omit("b").shape) == ["a", "c"]
    with pytest.raises(ConfigurationError):
        schema.pick("missing")


def test_partial_and_required():
    schema = object_({"a": string(), "b": number()})

    partial = schema.partial()
    assert partial.parse({}) == {}

    only_b = schema.partial("b")
    assert only_b.safe_parse({}).issues[0].path == ("a",)

    restored = partial.required()
    assert [issue.path for issue in restored.safe_parse({}).issues] == [("a",), ("b",)]


def test_keyof_builds_enum_of_keys():
    keys = object_({"a": string(), "b": number()}).keyof()

    assert keys.parse("a") == "a"
    assert keys.safe_parse("z").issues[0].code == "invalid_enum_value"


def test_object_rejects_non_mapping_input():
    result = object_({"a": string()}).safe_parse(["a"])

    assert result.issues[0].code == "invalid_type"
    assert result.issues[0].expected == "object"
    assert result.issues[0].received == "array"


def test_nested_paths_are_full():
    schema = object_({"user": object_({"emails": array(string())})})

    result = schema.safe_parse({"user": {"emails": ["a", 2]}})

    assert result.issues[0].path == ("user", "emails", 1)


def test_unknown_mode_is_a_configuration_error():
    with pytest.raises(ConfigurationError, match="Unknown object mode"):
        object_({"a": string()}, "sloppy")


def test_optional_child_missing_is_not_an_issue():
    schema = object_({"nickname": optional(string())})

    assert schema.safe_parse({}).success is True
