# Copyright (c) 2025 Artoo Corporation
# Licensed under the Business Source License 1.1 (see LICENSE).
# Change Date: 2029-09-08  •  Change License: LGPL-3.0-or-later

"""Schema node representation.

A schema is a tree of immutable ``SchemaNode`` values. Every node carries a
``kind`` tag; the validation engine dispatches on that tag. Only the fields
relevant to a node's kind are populated, the rest keep their empty defaults.

All chained methods (``.min()``, ``.optional()``, ``.extend()``, ...) return a
new node; nodes are never modified after construction, which is what makes it
safe to share them between threads and tasks.
"""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Optional, Tuple, Type

from ..config import ErrorOption
from ..exceptions import ConfigurationError
from ..validation.base import MISSING, IssueCode, ParseResult, Path
from ..validation.messages import join_values
from ..validation.resolution import coerce_error_option


class Kind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    LITERAL = "literal"
    ENUM = "enum"
    OBJECT = "object"
    RECORD = "record"
    ARRAY = "array"
    TUPLE = "tuple"
    UNION = "union"
    FUNCTION = "function"
    CUSTOM_FORMAT = "custom-format"
    TRANSFORM = "transform"
    OPTIONAL = "optional"
    NULLABLE = "nullable"
    DEFAULT = "default"
    ANY = "any"
    CUSTOM = "custom"
    PIPE = "pipe"


class ObjectMode(str, Enum):
    """Policy for input keys that are not declared in an object's shape."""

    EXACT = "exact"    # each unknown key fails on its own path
    STRICT = "strict"  # one ``unrecognized_keys`` issue on the object
    LOOSE = "loose"    # unknown keys pass through untouched
    STRIP = "strip"    # unknown keys are dropped from the output


WRAPPER_KINDS = frozenset({Kind.OPTIONAL, Kind.NULLABLE, Kind.DEFAULT})
STRING_KINDS = frozenset({Kind.STRING, Kind.CUSTOM_FORMAT})

_EMPTY_SHAPE: Mapping[str, "SchemaNode"] = MappingProxyType({})


@dataclass(frozen=True)
class Check:
    """One constraint on a node.

    ``predicate`` receives a value that already passed the node's type check
    and returns ``True`` when the constraint holds. ``params`` become the
    issue params on failure.
    """

    code: str
    predicate: Callable[[Any], bool]
    params: Mapping[str, Any] = field(default_factory=dict)
    error: Optional[ErrorOption] = None
    path: Path = ()

    @property
    def name(self) -> str:
        return str(self.params.get("check", self.code))


def as_node(candidate: Any, what: str = "schema") -> "SchemaNode":
    """Return *candidate* as a ``SchemaNode`` or raise ``ConfigurationError``."""

    if isinstance(candidate, SchemaNode):
        return candidate
    node = getattr(candidate, "node", None)
    if isinstance(node, SchemaNode):
        return node
    raise ConfigurationError(
        f"Expected a schema for {what}, got {type(candidate).__name__}"
    )


def freeze_shape(shape: Mapping[str, Any], what: str = "object shape") -> Mapping[str, "SchemaNode"]:
    if not isinstance(shape, Mapping):
        raise ConfigurationError(f"{what} must be a mapping of key -> schema")
    frozen = {}
    for key, child in shape.items():
        if not isinstance(key, str):
            raise ConfigurationError(f"{what} keys must be strings, got {key!r}")
        frozen[key] = as_node(child, f"key '{key}'")
    return MappingProxyType(frozen)


def size_check(
    origin: str,
    *,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
    inclusive: bool = True,
    exact: bool = False,
    measure: Callable[[Any], float] = len,
    error: Optional[ErrorOption] = None,
    check: Optional[str] = None,
) -> Check:
    """Build a ``too_small`` (``minimum``) or ``too_big`` (``maximum``) check."""

    if (minimum is None) == (maximum is None):
        raise ConfigurationError("size_check needs exactly one of minimum / maximum")
    limit = minimum if minimum is not None else maximum
    if not isinstance(limit, (int, float)) or isinstance(limit, bool) or math.isnan(limit):
        raise ConfigurationError(f"Bound for {origin} must be a number, got {limit!r}")

    params = {"origin": origin, "inclusive": inclusive, "exact": exact}
    if minimum is not None:
        code = IssueCode.TOO_SMALL
        params["minimum"] = minimum
        if inclusive:
            predicate = lambda value: measure(value) >= minimum
        else:
            predicate = lambda value: measure(value) > minimum
    else:
        code = IssueCode.TOO_BIG
        params["maximum"] = maximum
        if inclusive:
            predicate = lambda value: measure(value) <= maximum
        else:
            predicate = lambda value: measure(value) < maximum
    if check:
        params["check"] = check
    return Check(code=code, predicate=predicate, params=MappingProxyType(params), error=error)


def _identity(value: Any) -> Any:
    return value


def _is_multiple(value: float, divisor: float) -> bool:
    if isinstance(value, int) and isinstance(divisor, int):
        return value % divisor == 0
    ratio = value / divisor
    return math.isclose(ratio, round(ratio), rel_tol=0.0, abs_tol=1e-9)


@dataclass(frozen=True, eq=False, repr=False)
class SchemaNode:
    """Immutable description of one validation rule."""

    kind: Kind
    checks: Tuple[Check, ...] = ()
    refinements: Tuple[Check, ...] = ()
    error: Optional[ErrorOption] = None
    description: Optional[str] = None
    # object
    shape: Mapping[str, "SchemaNode"] = field(default_factory=lambda: _EMPTY_SHAPE)
    mode: Optional[ObjectMode] = None
    catchall: Optional["SchemaNode"] = None
    # record
    key_schema: Optional["SchemaNode"] = None
    value_schema: Optional["SchemaNode"] = None
    # array / tuple / union
    element: Optional["SchemaNode"] = None
    items: Tuple["SchemaNode", ...] = ()
    rest: Optional["SchemaNode"] = None
    options: Tuple["SchemaNode", ...] = ()
    # literal / enum
    values: Tuple[Any, ...] = ()
    enum_class: Optional[Type[Enum]] = None
    # wrappers, transform, pipe
    inner: Optional["SchemaNode"] = None
    target: Optional["SchemaNode"] = None
    fn: Optional[Callable[..., Any]] = None
    default_value: Any = MISSING
    # custom-format
    format: Optional[str] = None
    # function
    inputs: Tuple["SchemaNode", ...] = ()
    output: Optional["SchemaNode"] = None

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def effective_mode(self) -> ObjectMode:
        return self.mode or ObjectMode.EXACT

    @property
    def expected(self) -> str:
        """Type name reported in ``invalid_type`` / ``missing`` issues."""

        if self.kind in STRING_KINDS:
            return "string"
        if self.kind in (Kind.LITERAL, Kind.ENUM):
            return join_values(self.values)
        if self.kind in WRAPPER_KINDS or self.kind in (Kind.TRANSFORM, Kind.PIPE):
            return self.inner.expected
        return self.kind.value

    @property
    def accepts_missing(self) -> bool:
        """True when an absent value is valid for this node."""

        if self.kind in (Kind.OPTIONAL, Kind.DEFAULT):
            return True
        if self.kind in (Kind.NULLABLE, Kind.TRANSFORM, Kind.PIPE):
            return self.inner.accepts_missing
        if self.kind is Kind.UNION:
            return any(option.accepts_missing for option in self.options)
        return False

    def __repr__(self) -> str:
        details = ""
        if self.kind is Kind.OBJECT:
            details = f", keys={list(self.shape)}, mode='{self.effective_mode.value}'"
        elif self.kind in (Kind.LITERAL, Kind.ENUM):
            details = f", values={list(self.values)}"
        elif self.kind is Kind.CUSTOM_FORMAT:
            details = f", format='{self.format}'"
        elif self.inner is not None:
            details = f", inner={self.inner!r}"
        if self.checks:
            details += f", checks={[check.name for check in self.checks]}"
        return f"SchemaNode(kind='{self.kind.value}'{details})"

    # ------------------------------------------------------------------
    # Validation entry points
    # ------------------------------------------------------------------

    def safe_parse(self, value: Any = MISSING) -> ParseResult:
        """Validate *value* and return a ``ParseResult``; never raises for bad input."""

        from ..validation.engine import validate

        return validate(self, value)

    def parse(self, value: Any = MISSING) -> Any:
        """Validate *value* and return the parsed output or raise ``ValidationError``."""

        return self.safe_parse(value).unwrap()

    def is_valid(self, value: Any = MISSING) -> bool:
        return self.safe_parse(value).success

    # ------------------------------------------------------------------
    # Generic modifiers
    # ------------------------------------------------------------------

    def _replace(self, **changes: Any) -> "SchemaNode":
        return dataclasses.replace(self, **changes)

    def _with_check(self, check: Check) -> "SchemaNode":
        return self._replace(checks=self.checks + (check,))

    def _require(self, operation: str, *kinds: Kind) -> None:
        if self.kind not in kinds:
            allowed = ", ".join(kind.value for kind in kinds)
            raise ConfigurationError(
                f"'{operation}' is not available on {self.kind.value} schemas (only: {allowed})"
            )

    def describe(self, description: str) -> "SchemaNode":
        return self._replace(description=description)

    def optional(self) -> "SchemaNode":
        return SchemaNode(kind=Kind.OPTIONAL, inner=self)

    def nullable(self) -> "SchemaNode":
        return SchemaNode(kind=Kind.NULLABLE, inner=self)

    def nullish(self) -> "SchemaNode":
        return self.nullable().optional()

    def default(self, value: Any) -> "SchemaNode":
        """Substitute *value* when the input is absent.

        A callable is invoked once per substitution, so mutable defaults such
        as ``list`` are never shared between results.
        """

        return SchemaNode(kind=Kind.DEFAULT, inner=self, default_value=value)

    def unwrap(self) -> "SchemaNode":
        self._require("unwrap", Kind.OPTIONAL, Kind.NULLABLE, Kind.DEFAULT)
        return self.inner

    def transform(self, fn: Callable[[Any], Any]) -> "SchemaNode":
        if not callable(fn):
            raise ConfigurationError("transform() expects a callable")
        return SchemaNode(kind=Kind.TRANSFORM, inner=self, fn=fn)

    def pipe(self, target: Any) -> "SchemaNode":
        """Feed this schema's output into *target*."""

        return SchemaNode(kind=Kind.PIPE, inner=self, target=as_node(target, "pipe target"))

    def refine(
        self,
        predicate: Callable[[Any], bool],
        *,
        error: Optional[ErrorOption] = None,
        path: Iterable[Any] = (),
        params: Optional[Mapping[str, Any]] = None,
        **legacy: Any,
    ) -> "SchemaNode":
        """Add a custom predicate that runs once the node is otherwise valid."""

        if not callable(predicate):
            raise ConfigurationError("refine() expects a callable predicate")
        check = Check(
            code=IssueCode.CUSTOM,
            predicate=predicate,
            params=MappingProxyType(dict(params or {})),
            error=coerce_error_option(error, **legacy),
            path=tuple(path),
        )
        return self._replace(refinements=self.refinements + (check,))

    def or_(self, other: Any) -> "SchemaNode":
        from .builders import union

        return union([self, other])

    def array(self) -> "SchemaNode":
        from .builders import array

        return array(self)

    # ------------------------------------------------------------------
    # Size / bound checks shared by string, number and array
    # ------------------------------------------------------------------

    def _origin(self) -> str:
        return "string" if self.kind in STRING_KINDS else self.kind.value

    def min(self, value: float, *, error: Optional[ErrorOption] = None, **legacy: Any) -> "SchemaNode":
        self._require("min", Kind.STRING, Kind.CUSTOM_FORMAT, Kind.NUMBER, Kind.ARRAY)
        error = coerce_error_option(error, **legacy)
        if self.kind is Kind.NUMBER:
            return self.gte(value, error=error)
        return self._with_check(size_check(self._origin(), minimum=value, error=error, check="min"))

    def max(self, value: float, *, error: Optional[ErrorOption] = None, **legacy: Any) -> "SchemaNode":
        self._require("max", Kind.STRING, Kind.CUSTOM_FORMAT, Kind.NUMBER, Kind.ARRAY)
        error = coerce_error_option(error, **legacy)
        if self.kind is Kind.NUMBER:
            return self.lte(value, error=error)
        return self._with_check(size_check(self._origin(), maximum=value, error=error, check="max"))

    def length(self, value: int, *, error: Optional[ErrorOption] = None, **legacy: Any) -> "SchemaNode":
        self._require("length", Kind.STRING, Kind.CUSTOM_FORMAT, Kind.ARRAY)
        error = coerce_error_option(error, **legacy)
        origin = self._origin()
        return self._with_check(
            size_check(origin, minimum=value, exact=True, error=error, check="length")
        )._with_check(size_check(origin, maximum=value, exact=True, error=error, check="length"))

    def nonempty(self, *, error: Optional[ErrorOption] = None, **legacy: Any) -> "SchemaNode":
        return self.min(1, error=error, **legacy)

    # ------------------------------------------------------------------
    # String checks
    # ------------------------------------------------------------------

    def _string_check(self, name: str, predicate: Callable[[str], bool], params: dict, error, legacy) -> "SchemaNode":
        self._require(name, Kind.STRING, Kind.CUSTOM_FORMAT)
        params = dict(params, check=name)
        return self._with_check(
            Check(
                code=IssueCode.INVALID_FORMAT,
                predicate=predicate,
                params=MappingProxyType(params),
                error=coerce_error_option(error, **legacy),
            )
        )

    def regex(self, pattern: Any, *, error: Optional[ErrorOption] = None, **legacy: Any) -> "SchemaNode":
        from .builders import compile_pattern

        compiled = compile_pattern(pattern)
        return self._string_check(
            "regex",
            lambda value: compiled.search(value) is not None,
            {"format": "regex", "pattern": compiled.pattern},
            error,
            legacy,
        )

    def starts_with(self, prefix: str, *, error: Optional[ErrorOption] = None, **legacy: Any) -> "SchemaNode":
        return self._string_check(
            "starts_with",
            lambda value: value.startswith(prefix),
            {"format": "starts_with", "prefix": prefix},
            error,
            legacy,
        )

    def ends_with(self, suffix: str, *, error: Optional[ErrorOption] = None, **legacy: Any) -> "SchemaNode":
        return self._string_check(
            "ends_with",
            lambda value: value.endswith(suffix),
            {"format": "ends_with", "suffix": suffix},
            error,
            legacy,
        )

    def includes(self, needle: str, *, error: Optional[ErrorOption] = None, **legacy: Any) -> "SchemaNode":
        return self._string_check(
            "includes",
            lambda value: needle in value,
            {"format": "includes", "includes": needle},
            error,
            legacy,
        )

    # ------------------------------------------------------------------
    # Number checks
    # ------------------------------------------------------------------

    def _bound(self, name: str, *, error, legacy, **bounds: Any) -> "SchemaNode":
        self._require(name, Kind.NUMBER)
        return self._with_check(
            size_check(
                "number",
                measure=_identity,
                error=coerce_error_option(error, **legacy),
                check=name,
                **bounds,
            )
        )

    def gt(self, value: float, *, error: Optional[ErrorOption] = None, **legacy: Any) -> "SchemaNode":
        return self._bound("gt", minimum=value, inclusive=False, error=error, legacy=legacy)

    def gte(self, value: float, *, error: Optional[ErrorOption] = None, **legacy: Any) -> "SchemaNode":
        return self._bound("gte", minimum=value, inclusive=True, error=error, legacy=legacy)

    def lt(self, value: float, *, error: Optional[ErrorOption] = None, **legacy: Any) -> "SchemaNode":
        return self._bound("lt", maximum=value, inclusive=False, error=error, legacy=legacy)

    def lte(self, value: float, *, error: Optional[ErrorOption] = None, **legacy: Any) -> "SchemaNode":
        return self._bound("lte", maximum=value, inclusive=True, error=error, legacy=legacy)

    def positive(self, *, error: Optional[ErrorOption] = None) -> "SchemaNode":
        return self.gt(0, error=error)

    def nonnegative(self, *, error: Optional[ErrorOption] = None) -> "SchemaNode":
        return self.gte(0, error=error)

    def negative(self, *, error: Optional[ErrorOption] = None) -> "SchemaNode":
        return self.lt(0, error=error)

    def nonpositive(self, *, error: Optional[ErrorOption] = None) -> "SchemaNode":
        return self.lte(0, error=error)

    def int_(self, *, error: Optional[ErrorOption] = None, **legacy: Any) -> "SchemaNode":
        self._require("int", Kind.NUMBER)
        return self._with_check(
            Check(
                code=IssueCode.INVALID_TYPE,
                predicate=lambda value: isinstance(value, int) or float(value).is_integer(),
                params=MappingProxyType({"expected": "int", "received": "number", "check": "int"}),
                error=coerce_error_option(error, **legacy),
            )
        )

    def multiple_of(self, divisor: float, *, error: Optional[ErrorOption] = None, **legacy: Any) -> "SchemaNode":
        self._require("multiple_of", Kind.NUMBER)
        if not isinstance(divisor, (int, float)) or isinstance(divisor, bool) or divisor == 0:
            raise ConfigurationError(f"multiple_of() needs a non-zero number, got {divisor!r}")
        return self._with_check(
            Check(
                code=IssueCode.NOT_MULTIPLE_OF,
                predicate=lambda value: _is_multiple(value, divisor),
                params=MappingProxyType({"divisor": divisor, "check": "multiple_of"}),
                error=coerce_error_option(error, **legacy),
            )
        )

    # ------------------------------------------------------------------
    # Object derivations
    # ------------------------------------------------------------------

    def extend(self, addition: Any) -> "SchemaNode":
        from .builders import extend

        return extend(self, addition)

    def merge(self, other: "SchemaNode") -> "SchemaNode":
        other = as_node(other, "merge()")
        other._require("merge", Kind.OBJECT)
        return self.extend(other)

    def _check_keys(self, operation: str, keys: Iterable[str]) -> Tuple[str, ...]:
        self._require(operation, Kind.OBJECT)
        keys = tuple(keys)
        unknown = [key for key in keys if key not in self.shape]
        if unknown:
            raise ConfigurationError(f"{operation}() references unknown key(s): {unknown}")
        return keys

    def _derive_shape(self, shape: Mapping[str, "SchemaNode"]) -> "SchemaNode":
        if self.refinements:
            raise ConfigurationError(
                "Cannot derive a new shape from an object schema with refinements; derive first, then refine"
            )
        return self._replace(shape=freeze_shape(shape))

    def pick(self, *keys: str) -> "SchemaNode":
        keys = self._check_keys("pick", keys)
        return self._derive_shape({key: child for key, child in self.shape.items() if key in keys})

    def omit(self, *keys: str) -> "SchemaNode":
        keys = self._check_keys("omit", keys)
        return self._derive_shape({key: child for key, child in self.shape.items() if key not in keys})

    def partial(self, *keys: str) -> "SchemaNode":
        keys = self._check_keys("partial", keys) or tuple(self.shape)
        shape = {}
        for key, child in self.shape.items():
            if key in keys and child.kind is not Kind.OPTIONAL:
                child = child.optional()
            shape[key] = child
        return self._derive_shape(shape)

    def required(self, *keys: str) -> "SchemaNode":
        keys = self._check_keys("required", keys) or tuple(self.shape)
        shape = {}
        for key, child in self.shape.items():
            while key in keys and child.kind is Kind.OPTIONAL:
                child = child.inner
            shape[key] = child
        return self._derive_shape(shape)

    def strict(self) -> "SchemaNode":
        self._require("strict", Kind.OBJECT)
        return self._replace(mode=ObjectMode.STRICT, catchall=None)

    def loose(self) -> "SchemaNode":
        self._require("loose", Kind.OBJECT)
        return self._replace(mode=ObjectMode.LOOSE, catchall=None)

    def strip(self) -> "SchemaNode":
        self._require("strip", Kind.OBJECT)
        return self._replace(mode=ObjectMode.STRIP, catchall=None)

    def with_catchall(self, schema: Any) -> "SchemaNode":
        """Validate undeclared keys against *schema* instead of applying ``mode``."""

        self._require("catchall", Kind.OBJECT)
        return self._replace(catchall=as_node(schema, "catchall"))

    def keyof(self) -> "SchemaNode":
        self._require("keyof", Kind.OBJECT)
        from .builders import enum_from_values

        return enum_from_values(list(self.shape))

    # ------------------------------------------------------------------
    # Enum helpers
    # ------------------------------------------------------------------

    def extract(self, *values: Any) -> "SchemaNode":
        self._require("extract", Kind.ENUM)
        missing = [value for value in values if value not in self.values]
        if missing:
            raise ConfigurationError(f"extract() references values not in the enum: {missing}")
        return self._replace(values=tuple(v for v in self.values if v in values), enum_class=None)

    def exclude(self, *values: Any) -> "SchemaNode":
        self._require("exclude", Kind.ENUM)
        missing = [value for value in values if value not in self.values]
        if missing:
            raise ConfigurationError(f"exclude() references values not in the enum: {missing}")
        remaining = tuple(v for v in self.values if v not in values)
        if not remaining:
            raise ConfigurationError("exclude() would leave the enum empty")
        return self._replace(values=remaining, enum_class=None)


__all__ = [
    "Check",
    "Kind",
    "ObjectMode",
    "SchemaNode",
    "STRING_KINDS",
    "WRAPPER_KINDS",
    "as_node",
    "freeze_shape",
    "size_check",
]
