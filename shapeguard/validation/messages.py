# Copyright (c) 2025 Artoo Corporation
# Licensed under the Business Source License 1.1 (see LICENSE).
# Change Date: 2029-09-08  •  Change License: LGPL-3.0-or-later

"""Built-in default messages, keyed by issue code.

Every template is a pure function of the issue's params; nothing here performs
I/O or looks at global state.
"""

from __future__ import annotations

import inspect
import math
from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterable

from .base import MISSING, Issue, IssueCode


_FORMAT_NOUNS: Dict[str, str] = {
    "regex": "input",
    "email": "email address",
    "url": "URL",
    "emoji": "emoji",
    "uuid": "UUID",
    "guid": "GUID",
    "nanoid": "nanoid",
    "cuid": "cuid",
    "cuid2": "cuid2",
    "ulid": "ULID",
    "datetime": "ISO datetime",
    "date": "ISO date",
    "time": "ISO time",
    "ipv4": "IPv4 address",
    "ipv6": "IPv6 address",
    "cidrv4": "IPv4 range",
    "cidrv6": "IPv6 range",
    "base64": "base64-encoded string",
    "base64url": "base64url-encoded string",
}

_SIZE_UNITS: Dict[str, str] = {
    "string": "characters",
    "array": "items",
    "tuple": "items",
    "set": "items",
    "object": "keys",
}


def describe_type(value: Any) -> str:
    """Return the name used for *value* in ``received`` params."""

    if value is MISSING:
        return "missing"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return "NaN"
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, (list, tuple)):
        return "array"
    if inspect.isawaitable(value):
        return "awaitable"
    if callable(value):
        return "function"
    return type(value).__name__


def stringify(value: Any) -> str:
    if isinstance(value, str):
        return f'"{value}"'
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return repr(value)


def join_values(values: Iterable[Any], separator: str = "|") -> str:
    return separator.join(stringify(value) for value in values)


def _invalid_type(issue: Issue) -> str:
    return (
        f"Invalid input: expected {issue.params.get('expected', 'value')}, "
        f"received {issue.params.get('received', describe_type(issue.input))}"
    )


def _missing(issue: Issue) -> str:
    expected = issue.params.get("expected")
    if expected:
        return f"Required: expected {expected}, received nothing"
    return "Required"


def _bound(issue: Issue, *, small: bool) -> str:
    params = issue.params
    origin = params.get("origin", "value")
    inclusive = params.get("inclusive", True)
    limit = params.get("minimum") if small else params.get("maximum")
    word = "small" if small else "big"
    if small:
        comparator = ">=" if inclusive else ">"
    else:
        comparator = "<=" if inclusive else "<"
    if params.get("exact"):
        comparator = ""
    unit = _SIZE_UNITS.get(origin)
    if unit:
        return f"Too {word}: expected {origin} to have {comparator}{limit} {unit}"
    return f"Too {word}: expected {origin} to be {comparator}{limit}"


def _invalid_format(issue: Issue) -> str:
    params = issue.params
    fmt = params.get("format", "regex")
    if fmt == "starts_with":
        return f'Invalid string: must start with "{params.get("prefix")}"'
    if fmt == "ends_with":
        return f'Invalid string: must end with "{params.get("suffix")}"'
    if fmt == "includes":
        return f'Invalid string: must include "{params.get("includes")}"'
    if fmt == "regex":
        return f"Invalid string: must match pattern {params.get('pattern')}"
    return f"Invalid {_FORMAT_NOUNS.get(fmt, fmt)}"


def _invalid_enum_value(issue: Issue) -> str:
    values = tuple(issue.params.get("values", ()))
    if len(values) == 1:
        return f"Invalid input: expected {stringify(values[0])}"
    return f"Invalid option: expected one of {join_values(values)}"


def _invalid_literal(issue: Issue) -> str:
    values = tuple(issue.params.get("values", ()))
    if len(values) == 1:
        return f"Invalid input: expected {stringify(values[0])}"
    return f"Invalid input: expected one of {join_values(values)}"


def _unrecognized_keys(issue: Issue) -> str:
    keys = list(issue.params.get("keys", ()))
    noun = "key" if len(keys) == 1 else "keys"
    return f"Unrecognized {noun}: {join_values(keys, ', ')}"


def _arity_mismatch(issue: Issue) -> str:
    params = issue.params
    minimum, maximum = params.get("minimum"), params.get("maximum")
    if maximum is None:
        expected = f"at least {minimum}"
    elif minimum == maximum:
        expected = str(maximum)
    else:
        expected = f"{minimum} to {maximum}"
    return f"Invalid arguments: expected {expected}, received {params.get('received')}"


_TEMPLATES: Dict[str, Callable[[Issue], str]] = {
    IssueCode.MISSING: _missing,
    IssueCode.INVALID_TYPE: _invalid_type,
    IssueCode.TOO_SMALL: lambda issue: _bound(issue, small=True),
    IssueCode.TOO_BIG: lambda issue: _bound(issue, small=False),
    IssueCode.INVALID_FORMAT: _invalid_format,
    IssueCode.INVALID_ENUM_VALUE: _invalid_enum_value,
    IssueCode.INVALID_LITERAL: _invalid_literal,
    IssueCode.NOT_MULTIPLE_OF: lambda issue: (
        f"Invalid number: must be a multiple of {issue.params.get('divisor')}"
    ),
    IssueCode.UNRECOGNIZED_KEYS: _unrecognized_keys,
    IssueCode.INVALID_KEY: lambda issue: f"Invalid key in {issue.params.get('origin', 'record')}",
    IssueCode.INVALID_UNION: lambda issue: "Invalid input",
    IssueCode.TRANSFORM_ERROR: lambda issue: f"Transform failed: {issue.params.get('error')}",
    IssueCode.ARITY_MISMATCH: _arity_mismatch,
    IssueCode.IMPLEMENTATION_ERROR: lambda issue: (
        f"Implementation failed: {issue.params.get('error')}"
    ),
    IssueCode.CUSTOM: lambda issue: "Invalid input",
}


def default_message(issue: Issue) -> str:
    """Return the built-in message for *issue*."""

    template = _TEMPLATES.get(issue.code)
    if template is None:
        return "Invalid input"
    return template(issue)


__all__ = [
    "default_message",
    "describe_type",
    "join_values",
    "stringify",
]
