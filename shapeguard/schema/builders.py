# Copyright (c) 2025 Artoo Corporation
# Licensed under the Business Source License 1.1 (see LICENSE).
# Change Date: 2029-09-08  •  Change License: LGPL-3.0-or-later

"""Schema constructors.

Every constructor validates its arguments eagerly: a malformed schema raises
``ConfigurationError`` here, at construction time, and never later during
validation. Every constructor accepts ``error=`` (a message or a resolver).
"""

from __future__ import annotations

import enum
import logging
import re
from collections.abc import Mapping as MappingABC
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Optional, Pattern, Sequence, Union

from ..config import ErrorOption
from ..exceptions import ConfigurationError
from ..validation import formats
from ..validation.base import IssueCode
from ..validation.resolution import coerce_error_option
from .nodes import Check, Kind, ObjectMode, SchemaNode, as_node, freeze_shape

logger = logging.getLogger(__name__)

_NO_ARGUMENT: Any = object()


def compile_pattern(pattern: Union[str, Pattern[str]]) -> Pattern[str]:
    if isinstance(pattern, re.Pattern):
        return pattern
    if not isinstance(pattern, str):
        raise ConfigurationError(f"Expected a regex pattern, got {type(pattern).__name__}")
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ConfigurationError(f"Invalid regex pattern {pattern!r}: {exc}") from exc


def _format_check(name: str, predicate: Callable[[str], bool], error: Optional[ErrorOption] = None, **params: Any) -> Check:
    return Check(
        code=IssueCode.INVALID_FORMAT,
        predicate=predicate,
        params=MappingProxyType({"format": name, "check": name, **params}),
        error=error,
    )


# ----------------------------------------------------------------------
# Scalars
# ----------------------------------------------------------------------


def string(*, error: Optional[ErrorOption] = None, **legacy: Any) -> SchemaNode:
    return SchemaNode(kind=Kind.STRING, error=coerce_error_option(error, **legacy))


def number(*, error: Optional[ErrorOption] = None, **legacy: Any) -> SchemaNode:
    """Finite ``int`` or ``float`` (``bool`` is rejected)."""

    return SchemaNode(kind=Kind.NUMBER, error=coerce_error_option(error, **legacy))


def int_(*, error: Optional[ErrorOption] = None, **legacy: Any) -> SchemaNode:
    return number(error=error, **legacy).int_()


def boolean(*, error: Optional[ErrorOption] = None, **legacy: Any) -> SchemaNode:
    return SchemaNode(kind=Kind.BOOLEAN, error=coerce_error_option(error, **legacy))


def any_() -> SchemaNode:
    return SchemaNode(kind=Kind.ANY)


unknown = any_


def literal(*values: Any, error: Optional[ErrorOption] = None, **legacy: Any) -> SchemaNode:
    """Accept exactly one of *values* (strict equality)."""

    if not values:
        raise ConfigurationError("literal() requires at least one value")
    for value in values:
        if value is not None and not isinstance(value, (str, int, float, bool)):
            raise ConfigurationError(
                f"literal() values must be str, int, float, bool or None, got {type(value).__name__}"
            )
    return SchemaNode(kind=Kind.LITERAL, values=tuple(values), error=coerce_error_option(error, **legacy))


def enum_from_values(values: Any, *, error: Optional[ErrorOption] = None, **legacy: Any) -> SchemaNode:
    """Build an enum schema from literal values or from an ``enum.Enum`` subclass.

    With an ``Enum`` class, both the members and their raw values are accepted.
    """

    enum_class = None
    if isinstance(values, type) and issubclass(values, enum.Enum):
        enum_class = values
        members = tuple(member.value for member in values)
    elif isinstance(values, (str, bytes)) or isinstance(values, MappingABC):
        raise ConfigurationError("enum_from_values() expects a sequence of values or an Enum class")
    else:
        try:
            members = tuple(values)
        except TypeError as exc:
            raise ConfigurationError(
                f"enum_from_values() expects a sequence of values or an Enum class, got {type(values).__name__}"
            ) from exc

    if not members:
        raise ConfigurationError("enum_from_values() requires at least one value")

    seen = []
    for member in members:
        if member is not None and not isinstance(member, (str, int, float, bool)):
            raise ConfigurationError(f"Enum values must be literals, got {type(member).__name__}")
        if any(type(member) is type(other) and member == other for other in seen):
            raise ConfigurationError(f"Duplicate enum value: {member!r}")
        seen.append(member)

    return SchemaNode(
        kind=Kind.ENUM,
        values=members,
        enum_class=enum_class,
        error=coerce_error_option(error, **legacy),
    )


def custom(
    predicate: Optional[Callable[[Any], bool]] = None,
    *,
    error: Optional[ErrorOption] = None,
    **legacy: Any,
) -> SchemaNode:
    """Accept any value for which *predicate* returns true (everything when omitted)."""

    if predicate is not None and not callable(predicate):
        raise ConfigurationError("custom() expects a callable predicate")
    return SchemaNode(kind=Kind.CUSTOM, fn=predicate, error=coerce_error_option(error, **legacy))


# ----------------------------------------------------------------------
# String formats
# ----------------------------------------------------------------------


def string_format(
    name: str,
    predicate: Union[Callable[[str], bool], str, Pattern[str]],
    *,
    error: Optional[ErrorOption] = None,
    **legacy: Any,
) -> SchemaNode:
    """Build a string schema checked by a caller-named format."""

    if not isinstance(name, str) or not name:
        raise ConfigurationError("string_format() requires a non-empty format name")
    if isinstance(predicate, (str, re.Pattern)):
        compiled = compile_pattern(predicate)
        check = lambda value: compiled.search(value) is not None
    elif callable(predicate):
        check = predicate
    else:
        raise ConfigurationError("string_format() expects a predicate or a regex")
    return SchemaNode(
        kind=Kind.CUSTOM_FORMAT,
        format=name,
        checks=(_format_check(name, check),),
        error=coerce_error_option(error, **legacy),
    )


def _format_leaf(name: str, predicate: Callable[[str], bool], error, legacy, **params: Any) -> SchemaNode:
    return SchemaNode(
        kind=Kind.STRING,
        checks=(_format_check(name, predicate, **params),),
        error=coerce_error_option(error, **legacy),
    )


def email(*, error: Optional[ErrorOption] = None, **legacy: Any) -> SchemaNode:
    return _format_leaf("email", formats.is_email, error, legacy)


def uuid(*, version: Optional[int] = None, error: Optional[ErrorOption] = None, **legacy: Any) -> SchemaNode:
    """RFC 9562 UUID; ``version`` restricts the accepted version nibble."""

    try:
        predicate = formats.make_uuid(version)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(str(exc)) from exc
    if version is None:
        return _format_leaf("uuid", predicate, error, legacy)
    return _format_leaf("uuid", predicate, error, legacy, version=f"v{version}")


def guid(*, error: Optional[ErrorOption] = None, **legacy: Any) -> SchemaNode:
    return _format_leaf("guid", formats.is_guid, error, legacy)


def url(
    *,
    hostname: Optional[Union[str, Pattern[str]]] = None,
    protocol: Optional[Union[str, Pattern[str]]] = None,
    error: Optional[ErrorOption] = None,
    **legacy: Any,
) -> SchemaNode:
    predicate = formats.make_url(
        hostname=compile_pattern(hostname) if hostname is not None else None,
        protocol=compile_pattern(protocol) if protocol is not None else None,
    )
    return _format_leaf("url", predicate, error, legacy)


def emoji(*, error: Optional[ErrorOption] = None, **legacy: Any) -> SchemaNode:
    return _format_leaf("emoji", formats.is_emoji, error, legacy)


def base64(*, error: Optional[ErrorOption] = None, **legacy: Any) -> SchemaNode:
    return _format_leaf("base64", formats.is_base64, error, legacy)


def base64url(*, error: Optional[ErrorOption] = None, **legacy: Any) -> SchemaNode:
    return _format_leaf("base64url", formats.is_base64url, error, legacy)


def nanoid(*, error: Optional[ErrorOption] = None, **legacy: Any) -> SchemaNode:
    return _format_leaf("nanoid", formats.is_nanoid, error, legacy)


def cuid(*, error: Optional[ErrorOption] = None, **legacy: Any) -> SchemaNode:
    return _format_leaf("cuid", formats.is_cuid, error, legacy)


def cuid2(*, error: Optional[ErrorOption] = None, **legacy: Any) -> SchemaNode:
    return _format_leaf("cuid2", formats.is_cuid2, error, legacy)


def ulid(*, error: Optional[ErrorOption] = None, **legacy: Any) -> SchemaNode:
    return _format_leaf("ulid", formats.is_ulid, error, legacy)


def _check_precision(precision: Optional[int]) -> None:
    if precision is not None and (not isinstance(precision, int) or precision < -1):
        raise ConfigurationError(f"precision must be an integer >= -1, got {precision!r}")


def datetime(
    *,
    offset: bool = False,
    local: bool = False,
    precision: Optional[int] = None,
    error: Optional[ErrorOption] = None,
    **legacy: Any,
) -> SchemaNode:
    """ISO 8601 datetime string (``Z`` only unless ``offset``/``local``)."""

    _check_precision(precision)
    predicate = formats.make_datetime(offset=offset, local=local, precision=precision)
    return _format_leaf("datetime", predicate, error, legacy)


def iso_date(*, error: Optional[ErrorOption] = None, **legacy: Any) -> SchemaNode:
    return _format_leaf("date", formats.is_date, error, legacy)


def iso_time(*, precision: Optional[int] = None, error: Optional[ErrorOption] = None, **legacy: Any) -> SchemaNode:
    _check_precision(precision)
    return _format_leaf("time", formats.make_time(precision), error, legacy)


def ipv4(*, error: Optional[ErrorOption] = None, **legacy: Any) -> SchemaNode:
    return _format_leaf("ipv4", formats.is_ipv4, error, legacy)


def ipv6(*, error: Optional[ErrorOption] = None, **legacy: Any) -> SchemaNode:
    return _format_leaf("ipv6", formats.is_ipv6, error, legacy)


def cidrv4(*, error: Optional[ErrorOption] = None, **legacy: Any) -> SchemaNode:
    return _format_leaf("cidrv4", formats.is_cidrv4, error, legacy)


def cidrv6(*, error: Optional[ErrorOption] = None, **legacy: Any) -> SchemaNode:
    return _format_leaf("cidrv6", formats.is_cidrv6, error, legacy)


FORMAT_BUILDERS = {
    "email": email,
    "uuid": uuid,
    "guid": guid,
    "url": url,
    "emoji": emoji,
    "base64": base64,
    "base64url": base64url,
    "nanoid": nanoid,
    "cuid": cuid,
    "cuid2": cuid2,
    "ulid": ulid,
    "datetime": datetime,
    "date": iso_date,
    "time": iso_time,
    "ipv4": ipv4,
    "ipv6": ipv6,
    "cidrv4": cidrv4,
    "cidrv6": cidrv6,
}


# ----------------------------------------------------------------------
# Composites
# ----------------------------------------------------------------------


def _coerce_mode(mode: Any) -> ObjectMode:
    if isinstance(mode, ObjectMode):
        return mode
    try:
        return ObjectMode(mode)
    except ValueError:
        valid = [m.value for m in ObjectMode]
        raise ConfigurationError(f"Unknown object mode {mode!r}; expected one of {valid}") from None


def object_(
    shape: Optional[Mapping[str, Any]] = None,
    mode: Any = None,
    *,
    error: Optional[ErrorOption] = None,
    **legacy: Any,
) -> SchemaNode:
    """Object schema.

    ``mode`` controls undeclared input keys: ``"exact"`` (default) fails each
    one, ``"strict"`` reports a single ``unrecognized_keys`` issue, ``"loose"``
    passes them through and ``"strip"`` drops them.
    """

    return SchemaNode(
        kind=Kind.OBJECT,
        shape=freeze_shape(shape or {}),
        mode=_coerce_mode(mode) if mode is not None else None,
        error=coerce_error_option(error, **legacy),
    )


def strict_object(shape: Optional[Mapping[str, Any]] = None, **options: Any) -> SchemaNode:
    return object_(shape, ObjectMode.STRICT, **options)


def loose_object(shape: Optional[Mapping[str, Any]] = None, **options: Any) -> SchemaNode:
    return object_(shape, ObjectMode.LOOSE, **options)


def extend(base: Any, addition: Any) -> SchemaNode:
    """Return a new object schema with *addition*'s keys overlaid on *base*'s.

    *addition* may be a mapping of key -> schema or another object schema.
    Keys from *addition* win on collision. The mode of *base* is kept unless
    *addition* is an object schema that set one explicitly.
    """

    base = as_node(base, "extend() base")
    if base.kind is not Kind.OBJECT:
        raise ConfigurationError(f"extend() needs an object schema, got {base.kind.value}")
    if base.refinements:
        raise ConfigurationError(
            "extend() cannot be used on an object schema with refinements; extend first, then refine"
        )

    mode = base.mode
    catchall = base.catchall
    if isinstance(addition, SchemaNode):
        if addition.kind is not Kind.OBJECT:
            raise ConfigurationError(f"extend() addition must be an object schema or a mapping, got {addition.kind.value}")
        extra = addition.shape
        if addition.mode is not None:
            mode = addition.mode
            catchall = addition.catchall
    elif isinstance(addition, MappingABC):
        extra = freeze_shape(addition, "extend() addition")
    else:
        raise ConfigurationError(
            f"extend() addition must be an object schema or a mapping, got {type(addition).__name__}"
        )

    merged = dict(base.shape)
    for key, child in extra.items():
        if key in merged:
            logger.debug("extend() overrides key '%s'", key)
        merged[key] = child
    return SchemaNode(
        kind=Kind.OBJECT,
        shape=freeze_shape(merged),
        mode=mode,
        catchall=catchall,
        error=base.error,
        description=base.description,
    )


def record(key_schema: Any = _NO_ARGUMENT, value_schema: Any = _NO_ARGUMENT, *, error: Optional[ErrorOption] = None, **legacy: Any) -> SchemaNode:
    """Mapping whose every key matches *key_schema* and every value *value_schema*.

    Both schemas are mandatory. With an enum or literal key schema every member
    must be present.
    """

    if key_schema is _NO_ARGUMENT or value_schema is _NO_ARGUMENT:
        raise ConfigurationError("record() requires both a key schema and a value schema")
    key_node = as_node(key_schema, "record key")
    value_node = as_node(value_schema, "record value")
    return SchemaNode(
        kind=Kind.RECORD,
        key_schema=key_node,
        value_schema=value_node,
        error=coerce_error_option(error, **legacy),
    )


def array(element: Any, *, error: Optional[ErrorOption] = None, **legacy: Any) -> SchemaNode:
    return SchemaNode(
        kind=Kind.ARRAY,
        element=as_node(element, "array element"),
        error=coerce_error_option(error, **legacy),
    )


def tuple_(
    items: Sequence[Any],
    rest: Any = None,
    *,
    error: Optional[ErrorOption] = None,
    **legacy: Any,
) -> SchemaNode:
    """Fixed-position sequence; *rest* validates any extra trailing items."""

    if isinstance(items, (str, bytes)) or not isinstance(items, Iterable):
        raise ConfigurationError("tuple_() expects a sequence of schemas")
    nodes = tuple(as_node(item, f"tuple item {index}") for index, item in enumerate(items))
    seen_optional = False
    for index, node in enumerate(nodes):
        if node.accepts_missing:
            seen_optional = True
        elif seen_optional:
            raise ConfigurationError(
                f"tuple_() item {index} is required but follows an optional item"
            )
    return SchemaNode(
        kind=Kind.TUPLE,
        items=nodes,
        rest=as_node(rest, "tuple rest") if rest is not None else None,
        error=coerce_error_option(error, **legacy),
    )


def union(options: Sequence[Any], *, error: Optional[ErrorOption] = None, **legacy: Any) -> SchemaNode:
    """Try *options* in order; the first that validates wins."""

    if isinstance(options, (str, bytes)) or not isinstance(options, Iterable):
        raise ConfigurationError("union() expects a sequence of schemas")
    nodes = tuple(as_node(option, f"union option {index}") for index, option in enumerate(options))
    if not nodes:
        raise ConfigurationError("union() requires at least one option")
    return SchemaNode(kind=Kind.UNION, options=nodes, error=coerce_error_option(error, **legacy))


def optional(schema: Any) -> SchemaNode:
    return as_node(schema).optional()


def nullable(schema: Any) -> SchemaNode:
    return as_node(schema).nullable()


__all__ = [
    "FORMAT_BUILDERS",
    "any_",
    "array",
    "base64",
    "base64url",
    "boolean",
    "cidrv4",
    "cidrv6",
    "compile_pattern",
    "cuid",
    "cuid2",
    "custom",
    "datetime",
    "email",
    "emoji",
    "enum_from_values",
    "extend",
    "guid",
    "int_",
    "ipv4",
    "ipv6",
    "iso_date",
    "iso_time",
    "literal",
    "loose_object",
    "nanoid",
    "nullable",
    "number",
    "object_",
    "optional",
    "record",
    "strict_object",
    "string",
    "string_format",
    "tuple_",
    "ulid",
    "union",
    "unknown",
    "url",
    "uuid",
]
