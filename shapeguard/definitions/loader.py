# Copyright (c) 2025 Artoo Corporation
# Licensed under the Business Source License 1.1 (see LICENSE).
# Change Date: 2029-09-08  •  Change License: LGPL-3.0-or-later

"""Build schema trees from declarative YAML / JSON definitions.

A definition is a mapping with a ``type`` plus operators::

    type: object
    mode: strict
    shape:
      name: {type: string, min: 1}
      email: {type: email, optional: true}
      tags: {type: array, element: string, max: 10}

A bare string is shorthand for ``{type: <string>}``. Every mistake (unknown
type, unknown operator, malformed value, invalid regex) raises
``DefinitionError`` naming where in the definition it happened.
"""

from __future__ import annotations

import difflib
import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Callable, Dict, FrozenSet, Iterable, Tuple, Union

import yaml

from ..exceptions import ConfigurationError
from ..formatting import format_path
from ..schema import builders
from ..schema.nodes import SchemaNode

logger = logging.getLogger(__name__)

DefinitionPath = Tuple[Union[str, int], ...]


class DefinitionError(ConfigurationError):
    """A declarative definition is malformed.

    ``path`` locates the offending entry inside the definition document.
    """

    def __init__(self, message: str, path: DefinitionPath = ()):
        self.path = tuple(path)
        self.reason = message
        super().__init__(f"{message} (at {_where(self.path)})")

    def __reduce__(self):
        return (type(self), (self.reason, self.path))


def _where(path: DefinitionPath) -> str:
    return format_path(path) or "<root>"


_COMMON: FrozenSet[str] = frozenset({"type", "optional", "nullable", "default", "description"})
_STRING_OPS: FrozenSet[str] = frozenset(
    {"error", "min", "max", "length", "pattern", "starts_with", "ends_with", "includes"}
)
_NUMBER_OPS: FrozenSet[str] = frozenset(
    {"error", "min", "max", "gt", "gte", "lt", "lte", "multiple_of"}
)

_FORMAT_OPTIONS: Dict[str, FrozenSet[str]] = {
    "uuid": frozenset({"version"}),
    "url": frozenset({"hostname", "protocol"}),
    "datetime": frozenset({"offset", "local", "precision"}),
    "time": frozenset({"precision"}),
}

_TYPE_OPERATORS: Dict[str, FrozenSet[str]] = {
    "string": _STRING_OPS,
    "number": _NUMBER_OPS,
    "int": _NUMBER_OPS,
    "boolean": frozenset({"error"}),
    "any": frozenset(),
    "literal": frozenset({"error", "value", "values"}),
    "enum": frozenset({"error", "values"}),
    "object": frozenset({"error", "shape", "mode", "catchall"}),
    "record": frozenset({"error", "key", "value_schema"}),
    "array": frozenset({"error", "element", "min", "max", "length"}),
    "tuple": frozenset({"error", "items", "rest"}),
    "union": frozenset({"error", "options"}),
}
for _name in builders.FORMAT_BUILDERS:
    _TYPE_OPERATORS[_name] = _STRING_OPS | _FORMAT_OPTIONS.get(_name, frozenset())

SUPPORTED_TYPES: Tuple[str, ...] = tuple(sorted(_TYPE_OPERATORS))


def _reject_unknown(kind: str, name: str, choices: Iterable[str], path: DefinitionPath) -> DefinitionError:
    suggestions = difflib.get_close_matches(str(name), list(choices), n=1)
    hint = f"; did you mean '{suggestions[0]}'?" if suggestions else ""
    logger.error("Unknown %s '%s' in schema definition at %s", kind, name, _where(path))
    return DefinitionError(f"Unknown {kind} '{name}'{hint}", path)


def _expect(value: Any, types: Union[type, Tuple[type, ...]], what: str, path: DefinitionPath) -> Any:
    if isinstance(value, bool) and bool not in (types if isinstance(types, tuple) else (types,)):
        raise DefinitionError(f"'{what}' must not be a boolean", path)
    if not isinstance(value, types):
        raise DefinitionError(f"'{what}' has the wrong type ({type(value).__name__})", path)
    return value


def _sequence(value: Any, what: str, path: DefinitionPath) -> list:
    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
        raise DefinitionError(f"'{what}' must be a list", path)
    return list(value)


# ----------------------------------------------------------------------
# Per-type construction
# ----------------------------------------------------------------------


def _apply_string_ops(node: SchemaNode, definition: Mapping, path: DefinitionPath) -> SchemaNode:
    for op in ("min", "max", "length"):
        if op in definition:
            node = getattr(node, op)(_expect(definition[op], int, op, path + (op,)))
    if "pattern" in definition:
        node = node.regex(_expect(definition["pattern"], str, "pattern", path + ("pattern",)))
    for op in ("starts_with", "ends_with", "includes"):
        if op in definition:
            node = getattr(node, op)(_expect(definition[op], str, op, path + (op,)))
    return node


def _apply_number_ops(node: SchemaNode, definition: Mapping, path: DefinitionPath) -> SchemaNode:
    for op in ("min", "max", "gt", "gte", "lt", "lte", "multiple_of"):
        if op in definition:
            node = getattr(node, op)(_expect(definition[op], (int, float), op, path + (op,)))
    return node


def _build_string(definition: Mapping, path: DefinitionPath) -> SchemaNode:
    return _apply_string_ops(builders.string(error=definition.get("error")), definition, path)


def _build_number(definition: Mapping, path: DefinitionPath) -> SchemaNode:
    return _apply_number_ops(builders.number(error=definition.get("error")), definition, path)


def _build_int(definition: Mapping, path: DefinitionPath) -> SchemaNode:
    return _apply_number_ops(builders.int_(error=definition.get("error")), definition, path)


def _build_boolean(definition: Mapping, path: DefinitionPath) -> SchemaNode:
    return builders.boolean(error=definition.get("error"))


def _build_any(definition: Mapping, path: DefinitionPath) -> SchemaNode:
    return builders.any_()


def _build_literal(definition: Mapping, path: DefinitionPath) -> SchemaNode:
    if ("value" in definition) == ("values" in definition):
        raise DefinitionError("literal needs exactly one of 'value' or 'values'", path)
    if "value" in definition:
        values = [definition["value"]]
    else:
        values = _sequence(definition["values"], "values", path + ("values",))
    return builders.literal(*values, error=definition.get("error"))


def _build_enum(definition: Mapping, path: DefinitionPath) -> SchemaNode:
    if "values" not in definition:
        raise DefinitionError("enum needs 'values'", path)
    values = _sequence(definition["values"], "values", path + ("values",))
    return builders.enum_from_values(values, error=definition.get("error"))


def _build_object(definition: Mapping, path: DefinitionPath) -> SchemaNode:
    raw_shape = definition.get("shape", {})
    if not isinstance(raw_shape, Mapping):
        raise DefinitionError("'shape' must be a mapping", path + ("shape",))
    shape = {
        key: _build(child, path + ("shape", key)) for key, child in raw_shape.items()
    }
    node = builders.object_(shape, definition.get("mode"), error=definition.get("error"))
    if "catchall" in definition:
        node = node.with_catchall(_build(definition["catchall"], path + ("catchall",)))
    return node


def _build_record(definition: Mapping, path: DefinitionPath) -> SchemaNode:
    if "key" not in definition or "value_schema" not in definition:
        raise DefinitionError("record needs both 'key' and 'value_schema'", path)
    return builders.record(
        _build(definition["key"], path + ("key",)),
        _build(definition["value_schema"], path + ("value_schema",)),
        error=definition.get("error"),
    )


def _build_array(definition: Mapping, path: DefinitionPath) -> SchemaNode:
    if "element" not in definition:
        raise DefinitionError("array needs 'element'", path)
    node = builders.array(_build(definition["element"], path + ("element",)), error=definition.get("error"))
    for op in ("min", "max", "length"):
        if op in definition:
            node = getattr(node, op)(_expect(definition[op], int, op, path + (op,)))
    return node


def _build_tuple(definition: Mapping, path: DefinitionPath) -> SchemaNode:
    items = _sequence(definition.get("items", []), "items", path + ("items",))
    rest = _build(definition["rest"], path + ("rest",)) if "rest" in definition else None
    return builders.tuple_(
        [_build(item, path + ("items", index)) for index, item in enumerate(items)],
        rest,
        error=definition.get("error"),
    )


def _build_union(definition: Mapping, path: DefinitionPath) -> SchemaNode:
    options = _sequence(definition.get("options", []), "options", path + ("options",))
    return builders.union(
        [_build(option, path + ("options", index)) for index, option in enumerate(options)],
        error=definition.get("error"),
    )


def _format_builder(name: str) -> Callable[[Mapping, DefinitionPath], SchemaNode]:
    factory = builders.FORMAT_BUILDERS[name]
    options = _FORMAT_OPTIONS.get(name, frozenset())

    def build(definition: Mapping, path: DefinitionPath) -> SchemaNode:
        kwargs = {option: definition[option] for option in options if option in definition}
        return _apply_string_ops(factory(error=definition.get("error"), **kwargs), definition, path)

    return build


_BUILDERS: Dict[str, Callable[[Mapping, DefinitionPath], SchemaNode]] = {
    "string": _build_string,
    "number": _build_number,
    "int": _build_int,
    "boolean": _build_boolean,
    "any": _build_any,
    "literal": _build_literal,
    "enum": _build_enum,
    "object": _build_object,
    "record": _build_record,
    "array": _build_array,
    "tuple": _build_tuple,
    "union": _build_union,
}
for _name in builders.FORMAT_BUILDERS:
    _BUILDERS[_name] = _format_builder(_name)


def _build(definition: Any, path: DefinitionPath) -> SchemaNode:
    if isinstance(definition, str):
        definition = {"type": definition}
    if not isinstance(definition, Mapping):
        raise DefinitionError(
            f"Schema definition must be a mapping or a type name, got {type(definition).__name__}",
            path,
        )
    if "type" not in definition:
        raise DefinitionError("Schema definition is missing 'type'", path)

    type_name = definition["type"]
    if not isinstance(type_name, str):
        raise DefinitionError("'type' must be a string", path + ("type",))
    if type_name not in _BUILDERS:
        raise _reject_unknown("type", type_name, _BUILDERS, path + ("type",))

    allowed = _COMMON | _TYPE_OPERATORS[type_name]
    for operator in definition:
        if operator not in allowed:
            raise _reject_unknown(f"operator for {type_name}", operator, allowed, path + (operator,))

    try:
        node = _BUILDERS[type_name](definition, path)
        if "description" in definition:
            node = node.describe(str(definition["description"]))
        if definition.get("nullable", False):
            node = node.nullable()
        if "default" in definition:
            node = node.default(definition["default"])
        elif definition.get("optional", False):
            node = node.optional()
    except DefinitionError:
        raise
    except ConfigurationError as exc:
        raise DefinitionError(str(exc), path) from exc
    return node


def schema_from_definition(definition: Any) -> SchemaNode:
    """Build a schema tree from a decoded definition (mapping or type name)."""

    node = _build(definition, ())
    logger.debug("Built %s schema from definition", node.kind.value)
    return node


def read_document(path: Union[str, Path]) -> Any:
    """Decode a JSON (``.json``) or YAML (anything else) document."""

    file_path = Path(path)
    try:
        text = file_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigurationError(f"File not found: {file_path}") from None
    except OSError as exc:
        raise ConfigurationError(f"Could not read {file_path}: {exc}") from exc

    try:
        if file_path.suffix.lower() == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Could not parse {file_path}: {exc}") from exc


def load_schema(path: Union[str, Path]) -> SchemaNode:
    """Load a schema definition file and build its schema tree."""

    logger.debug("Loading schema definition from %s", path)
    definition = read_document(path)
    if definition is None:
        raise DefinitionError(f"Schema definition file {path} is empty")
    return schema_from_definition(definition)


__all__ = [
    "DefinitionError",
    "SUPPORTED_TYPES",
    "load_schema",
    "read_document",
    "schema_from_definition",
]
