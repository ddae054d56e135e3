# Copyright (c) 2025 Artoo Corporation
# Licensed under the Business Source License 1.1 (see LICENSE).
# Change Date: 2029-09-08  •  Change License: LGPL-3.0-or-later

import logging

import pytest

from shapeguard import (
    ConfigurationError,
    configure,
    number,
    object_,
    string,
)


def test_check_error_beats_node_error():
    schema = string(error="node says no").min(3, error="too short!")

    assert schema.safe_parse("ab").issues[0].message == "too short!"
    assert schema.safe_parse(1).issues[0].message == "node says no"


def test_node_error_beats_global_resolver():
    configure(custom_error=lambda issue: "global")
    schema = string(error="node")

    assert schema.safe_parse(1).issues[0].message == "node"
    assert number().safe_parse("x").issues[0].message == "global"


def test_resolver_returning_none_defers_to_next_level():
    """
    GIVEN: A node resolver that only handles invalid_type issues
    WHEN: A too_small issue is produced
    THEN: The resolver returns None and the built-in message is used
    """

    def only_types(issue):
        if issue.code == "invalid_type":
            return f"Expected {issue.expected}"
        return None

    schema = string(error=only_types).min(2)

    assert schema.safe_parse(5).issues[0].message == "Expected string"
    assert schema.safe_parse("a").issues[0].message == "Too small: expected string to have >=2 characters"


def test_resolver_receives_issue_params_as_attributes():
    seen = {}

    def resolver(issue):
        seen["minimum"] = issue.minimum
        seen["origin"] = issue.origin
        seen["input"] = issue.input
        return "custom"

    string().min(4, error=resolver).safe_parse("abc")

    assert seen == {"minimum": 4, "origin": "string", "input": "abc"}


def test_resolver_may_return_mapping_with_message():
    schema = number(error=lambda issue: {"message": "number please"})

    assert schema.safe_parse("x").issues[0].message == "number please"


def test_raising_resolver_falls_back_and_logs_warning(caplog):
    def broken(issue):
        raise RuntimeError("boom")

    configure(custom_error=lambda issue: "global fallback")
    schema = string(error=broken)

    with caplog.at_level(logging.WARNING, logger="shapeguard.validation.resolution"):
        result = schema.safe_parse(1)

    assert result.issues[0].message == "global fallback"
    assert any("falling back" in record.getMessage() for record in caplog.records)


def test_missing_key_uses_child_resolver():
    schema = object_({"name": string(error="Name is required")})

    assert schema.safe_parse({}).issues[0].message == "Name is required"


@pytest.mark.parametrize(
    "legacy,value,expected",
    [
        ({"message": "bad"}, 1, "bad"),
        ({"invalid_type_error": "must be text"}, 1, "must be text"),
        ({"error_map": lambda issue: "mapped"}, 1, "mapped"),
    ],
)
def test_legacy_options_are_deprecated_but_honoured(legacy, value, expected):
    with pytest.warns(DeprecationWarning):
        schema = string(**legacy)

    assert schema.safe_parse(value).issues[0].message == expected


def test_legacy_required_error_applies_to_missing_values():
    with pytest.warns(DeprecationWarning):
        schema = object_({"name": string(required_error="name needed")})

    assert schema.safe_parse({}).issues[0].message == "name needed"


def test_error_combined_with_legacy_option_is_rejected():
    with pytest.raises(ConfigurationError, match="cannot be combined"):
        string(error="x", message="y")


@pytest.mark.parametrize("options", [{"colour": "red"}, {"error": 42}])
def test_bad_error_options_are_rejected(options):
    with pytest.raises(ConfigurationError):
        string(**options)


@pytest.mark.parametrize(
    "schema,value,message",
    [
        (string(), 1, "Invalid input: expected string, received number"),
        (number().min(5), 1, "Too small: expected number to be >=5"),
        (number().lt(5), 9, "Too big: expected number to be <5"),
        (string().max(1), "ab", "Too big: expected string to have <=1 characters"),
        (number().multiple_of(5), 7, "Invalid number: must be a multiple of 5"),
        (string().starts_with("x"), "a", 'Invalid string: must start with "x"'),
    ],
)
def test_default_messages(schema, value, message):
    assert schema.safe_parse(value).issues[0].message == message
