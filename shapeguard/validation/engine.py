# Copyright (c) 2025 Artoo Corporation
# Licensed under the Business Source License 1.1 (see LICENSE).
# Change Date: 2029-09-08  •  Change License: LGPL-3.0-or-later

"""Recursive-descent validation engine.

``validate(schema, value)`` walks the schema tree depth-first, left to right,
and returns a ``ParseResult``. The walk is pure: inputs are never modified,
containers in the output are rebuilt, and no state survives between calls.

Issue collection rules:

* A scalar node reports at most one issue: its first failing constraint.
* Objects, records, arrays and tuples validate every child and concatenate
  all child issues in declaration (or element) order.
* A union tries its options in order and succeeds with the first option that
  produced no issues. When every option fails it reports one
  ``invalid_union`` issue whose ``errors`` param holds each option's issues.
"""

from __future__ import annotations

import inspect
import logging
import math
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..schema.nodes import Check, Kind, ObjectMode, SchemaNode, as_node
from ..telemetry.metrics import record_validation_metrics
from .base import MISSING, Issue, IssueCode, ParseResult, Path
from .messages import describe_type
from .resolution import finalize

logger = logging.getLogger(__name__)

Outcome = Tuple[Any, List[Issue]]

# Kinds that decide for themselves what an absent value means
_ABSENT_AWARE = frozenset({Kind.OPTIONAL, Kind.DEFAULT, Kind.NULLABLE, Kind.TRANSFORM, Kind.PIPE})


def strict_equals(left: Any, right: Any) -> bool:
    """Equality without cross-type coercion (``True`` never equals ``1``)."""

    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        return left == right
    return type(left) is type(right) and left == right


def make_issue(
    node: SchemaNode,
    code: str,
    path: Path,
    value: Any,
    *,
    check: Optional[Check] = None,
    **params: Any,
) -> Issue:
    merged: Dict[str, Any] = dict(check.params) if check is not None else {}
    merged.update(params)
    draft = Issue(code=code, path=tuple(path), input=value, params=MappingProxyType(merged))
    return finalize(draft, check_error=check.error if check is not None else None, node_error=node.error)


def _holds(check: Check, value: Any) -> Tuple[bool, Optional[BaseException]]:
    try:
        return bool(check.predicate(value)), None
    except Exception as exc:
        logger.debug("Check '%s' raised %s; treating as failed", check.name, type(exc).__name__)
        return False, exc


def _first_failing_check(node: SchemaNode, checks: Tuple[Check, ...], value: Any, path: Path) -> List[Issue]:
    for check in checks:
        ok, exc = _holds(check, value)
        if not ok:
            extra = {"error": f"{type(exc).__name__}: {exc}"} if exc is not None else {}
            return [make_issue(node, check.code, path + check.path, value, check=check, **extra)]
    return []


def _invalid_type(node: SchemaNode, value: Any, path: Path, received: Optional[str] = None) -> Outcome:
    return value, [
        make_issue(
            node,
            IssueCode.INVALID_TYPE,
            path,
            value,
            expected=node.expected,
            received=received or describe_type(value),
        )
    ]


def walk(node: SchemaNode, value: Any, path: Path = ()) -> Outcome:
    """Validate *value* against *node*; returns ``(output, issues)``."""

    if value is MISSING:
        if node.kind not in _ABSENT_AWARE and not node.accepts_missing:
            return MISSING, [
                make_issue(node, IssueCode.MISSING, path, value, expected=node.expected)
            ]
    elif inspect.isawaitable(value):
        return _invalid_type(node, value, path, received="awaitable")

    output, issues = _HANDLERS[node.kind](node, value, path)
    if not issues and node.refinements and output is not MISSING:
        issues = _first_failing_check(node, node.refinements, output, path)
    return output, issues


# ----------------------------------------------------------------------
# Scalars
# ----------------------------------------------------------------------


def _parse_string(node: SchemaNode, value: Any, path: Path) -> Outcome:
    if not isinstance(value, str):
        return _invalid_type(node, value, path)
    return value, _first_failing_check(node, node.checks, value, path)


def _parse_number(node: SchemaNode, value: Any, path: Path) -> Outcome:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return _invalid_type(node, value, path)
    if isinstance(value, float) and not math.isfinite(value):
        return _invalid_type(node, value, path, received="NaN" if math.isnan(value) else "Infinity")
    return value, _first_failing_check(node, node.checks, value, path)


def _parse_boolean(node: SchemaNode, value: Any, path: Path) -> Outcome:
    if not isinstance(value, bool):
        return _invalid_type(node, value, path)
    return value, _first_failing_check(node, node.checks, value, path)


def _parse_literal(node: SchemaNode, value: Any, path: Path) -> Outcome:
    if any(strict_equals(value, expected) for expected in node.values):
        return value, []
    return value, [make_issue(node, IssueCode.INVALID_LITERAL, path, value, values=node.values)]


def _parse_enum(node: SchemaNode, value: Any, path: Path) -> Outcome:
    if node.enum_class is not None and isinstance(value, node.enum_class):
        return value, []
    if any(strict_equals(value, member) for member in node.values):
        return value, []
    return value, [make_issue(node, IssueCode.INVALID_ENUM_VALUE, path, value, values=node.values)]


def _parse_any(node: SchemaNode, value: Any, path: Path) -> Outcome:
    return value, []


def _parse_custom(node: SchemaNode, value: Any, path: Path) -> Outcome:
    if node.fn is None:
        return value, []
    try:
        ok = bool(node.fn(value))
    except Exception as exc:
        return value, [
            make_issue(node, IssueCode.CUSTOM, path, value, error=f"{type(exc).__name__}: {exc}")
        ]
    if ok:
        return value, []
    return value, [make_issue(node, IssueCode.CUSTOM, path, value)]


# ----------------------------------------------------------------------
# Composites
# ----------------------------------------------------------------------


def _parse_object(node: SchemaNode, value: Any, path: Path) -> Outcome:
    if not isinstance(value, Mapping):
        return _invalid_type(node, value, path)

    output: Dict[Any, Any] = {}
    issues: List[Issue] = []
    for key, child in node.shape.items():
        raw = value[key] if key in value else MISSING
        parsed, child_issues = walk(child, raw, path + (key,))
        if child_issues:
            issues.extend(child_issues)
        elif parsed is not MISSING:
            output[key] = parsed

    unknown = [key for key in value if key not in node.shape]
    if not unknown:
        return output, issues

    if node.catchall is not None:
        for key in unknown:
            parsed, extra_issues = walk(node.catchall, value[key], path + (key,))
            if extra_issues:
                issues.extend(extra_issues)
            elif parsed is not MISSING:
                output[key] = parsed
        return output, issues

    mode = node.effective_mode
    if mode is ObjectMode.LOOSE:
        for key in unknown:
            output[key] = value[key]
    elif mode is ObjectMode.STRICT:
        issues.append(
            make_issue(node, IssueCode.UNRECOGNIZED_KEYS, path, value, keys=tuple(unknown))
        )
    elif mode is ObjectMode.EXACT:
        for key in unknown:
            issues.append(
                make_issue(
                    node,
                    IssueCode.INVALID_TYPE,
                    path + (key,),
                    value[key],
                    expected="never",
                    received=describe_type(value[key]),
                )
            )
    return output, issues


def _parse_record(node: SchemaNode, value: Any, path: Path) -> Outcome:
    if not isinstance(value, Mapping):
        return _invalid_type(node, value, path)

    output: Dict[Any, Any] = {}
    issues: List[Issue] = []
    for key, raw in value.items():
        key_path = path + (key,)
        parsed_key, key_issues = walk(node.key_schema, key, key_path)
        if key_issues:
            issues.append(
                make_issue(
                    node,
                    IssueCode.INVALID_KEY,
                    key_path,
                    key,
                    origin="record",
                    issues=tuple(key_issues),
                )
            )
        parsed_value, value_issues = walk(node.value_schema, raw, key_path)
        issues.extend(value_issues)
        if not key_issues and not value_issues and parsed_value is not MISSING:
            output[parsed_key] = parsed_value

    # enum / literal keys make the record exhaustive
    if node.key_schema.kind in (Kind.ENUM, Kind.LITERAL):
        enum_class = node.key_schema.enum_class
        for member in node.key_schema.values:
            if member in value or (enum_class is not None and enum_class(member) in value):
                continue
            parsed_value, value_issues = walk(node.value_schema, MISSING, path + (member,))
            issues.extend(value_issues)
            if not value_issues and parsed_value is not MISSING:
                output[member] = parsed_value
    return output, issues


def _rebuild(original: Any, items: List[Any]) -> Any:
    return tuple(items) if isinstance(original, tuple) else items


def _parse_array(node: SchemaNode, value: Any, path: Path) -> Outcome:
    if not isinstance(value, (list, tuple)):
        return _invalid_type(node, value, path)

    issues = _first_failing_check(node, node.checks, value, path)
    items: List[Any] = []
    for index, element in enumerate(value):
        parsed, element_issues = walk(node.element, element, path + (index,))
        issues.extend(element_issues)
        items.append(parsed)
    return _rebuild(value, items), issues


def _parse_tuple(node: SchemaNode, value: Any, path: Path) -> Outcome:
    if not isinstance(value, (list, tuple)):
        return _invalid_type(node, value, path)

    declared = len(node.items)
    required = declared
    while required and node.items[required - 1].accepts_missing:
        required -= 1

    if len(value) < required:
        return value, [
            make_issue(
                node,
                IssueCode.TOO_SMALL,
                path,
                value,
                origin="tuple",
                minimum=required,
                inclusive=True,
                exact=required == declared and node.rest is None,
            )
        ]
    if node.rest is None and len(value) > declared:
        return value, [
            make_issue(
                node,
                IssueCode.TOO_BIG,
                path,
                value,
                origin="tuple",
                maximum=declared,
                inclusive=True,
                exact=required == declared,
            )
        ]

    items: List[Any] = []
    issues: List[Issue] = []
    for index, item_node in enumerate(node.items):
        raw = value[index] if index < len(value) else MISSING
        parsed, item_issues = walk(item_node, raw, path + (index,))
        issues.extend(item_issues)
        if parsed is MISSING:
            # trailing optional items that were omitted stay omitted
            break
        items.append(parsed)
    for index in range(declared, len(value)):
        parsed, rest_issues = walk(node.rest, value[index], path + (index,))
        issues.extend(rest_issues)
        items.append(parsed)
    return _rebuild(value, items), issues


def _parse_union(node: SchemaNode, value: Any, path: Path) -> Outcome:
    branch_issues: List[Tuple[Issue, ...]] = []
    for option in node.options:
        parsed, issues = walk(option, value, path)
        if not issues:
            return parsed, []
        branch_issues.append(tuple(issues))
    return value, [
        make_issue(node, IssueCode.INVALID_UNION, path, value, errors=tuple(branch_issues))
    ]


# ----------------------------------------------------------------------
# Wrappers and transforms
# ----------------------------------------------------------------------


def _parse_optional(node: SchemaNode, value: Any, path: Path) -> Outcome:
    if value is MISSING:
        return MISSING, []
    return walk(node.inner, value, path)


def _parse_nullable(node: SchemaNode, value: Any, path: Path) -> Outcome:
    if value is None:
        return None, []
    return walk(node.inner, value, path)


def _parse_default(node: SchemaNode, value: Any, path: Path) -> Outcome:
    if value is MISSING:
        default = node.default_value
        return (default() if callable(default) else default), []
    return walk(node.inner, value, path)


def _parse_transform(node: SchemaNode, value: Any, path: Path) -> Outcome:
    parsed, issues = walk(node.inner, value, path)
    if issues or parsed is MISSING:
        return parsed, issues
    try:
        return node.fn(parsed), []
    except Exception as exc:
        logger.debug("Transform at %s raised %s", list(path), type(exc).__name__)
        return parsed, [
            make_issue(
                node,
                IssueCode.TRANSFORM_ERROR,
                path,
                parsed,
                error=f"{type(exc).__name__}: {exc}",
            )
        ]


def _parse_pipe(node: SchemaNode, value: Any, path: Path) -> Outcome:
    parsed, issues = walk(node.inner, value, path)
    if issues:
        return parsed, issues
    return walk(node.target, parsed, path)


def _parse_function(node: SchemaNode, value: Any, path: Path) -> Outcome:
    if not callable(value):
        return _invalid_type(node, value, path)
    from ..contracts import wrap_callable

    return wrap_callable(node, value), []


_HANDLERS: Dict[Kind, Callable[[SchemaNode, Any, Path], Outcome]] = {
    Kind.STRING: _parse_string,
    Kind.CUSTOM_FORMAT: _parse_string,
    Kind.NUMBER: _parse_number,
    Kind.BOOLEAN: _parse_boolean,
    Kind.LITERAL: _parse_literal,
    Kind.ENUM: _parse_enum,
    Kind.ANY: _parse_any,
    Kind.CUSTOM: _parse_custom,
    Kind.OBJECT: _parse_object,
    Kind.RECORD: _parse_record,
    Kind.ARRAY: _parse_array,
    Kind.TUPLE: _parse_tuple,
    Kind.UNION: _parse_union,
    Kind.OPTIONAL: _parse_optional,
    Kind.NULLABLE: _parse_nullable,
    Kind.DEFAULT: _parse_default,
    Kind.TRANSFORM: _parse_transform,
    Kind.PIPE: _parse_pipe,
    Kind.FUNCTION: _parse_function,
}

_UNHANDLED = set(Kind) - set(_HANDLERS)
if _UNHANDLED:  # pragma: no cover
    raise RuntimeError(f"No validation handler for schema kinds: {sorted(k.value for k in _UNHANDLED)}")


def validate(schema: Any, value: Any = MISSING) -> ParseResult:
    """Validate *value* against *schema*.

    Returns a successful ``ParseResult`` carrying the parsed value, or a failed
    one carrying every issue found. Never raises for malformed input.
    """

    node = as_node(schema)
    output, issues = walk(node, value, ())
    if issues:
        result = ParseResult(success=False, issues=tuple(issues))
    else:
        result = ParseResult(success=True, data=None if output is MISSING else output)
    record_validation_metrics(node.kind.value, result.success, (issue.code for issue in issues))
    return result


__all__ = ["make_issue", "strict_equals", "validate", "walk"]
