# Copyright (c) 2025 Artoo Corporation
# Licensed under the Business Source License 1.1 (see LICENSE).
# Change Date: 2029-09-08  •  Change License: LGPL-3.0-or-later

"""Core data structures shared by the validation engine and formatters."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, Optional, Tuple, Union

if TYPE_CHECKING:  # pragma: no cover
    from ..exceptions import ValidationError
    from ..formatting import TreeNode


PathKey = Union[str, int]
Path = Tuple[PathKey, ...]


class _Missing:
    """Marker for an absent value (missing key or omitted argument)."""

    _instance: Optional["_Missing"] = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_Missing, ())


MISSING: Any = _Missing()


class IssueCode:
    """Issue code vocabulary."""

    MISSING = "missing"
    INVALID_TYPE = "invalid_type"
    TOO_SMALL = "too_small"
    TOO_BIG = "too_big"
    INVALID_FORMAT = "invalid_format"
    INVALID_ENUM_VALUE = "invalid_enum_value"
    INVALID_LITERAL = "invalid_literal"
    NOT_MULTIPLE_OF = "not_multiple_of"
    UNRECOGNIZED_KEYS = "unrecognized_keys"
    INVALID_KEY = "invalid_key"
    INVALID_UNION = "invalid_union"
    TRANSFORM_ERROR = "transform_error"
    ARITY_MISMATCH = "arity_mismatch"
    IMPLEMENTATION_ERROR = "implementation_error"
    CUSTOM = "custom"

    ALL = frozenset(
        {
            MISSING,
            INVALID_TYPE,
            TOO_SMALL,
            TOO_BIG,
            INVALID_FORMAT,
            INVALID_ENUM_VALUE,
            INVALID_LITERAL,
            NOT_MULTIPLE_OF,
            UNRECOGNIZED_KEYS,
            INVALID_KEY,
            INVALID_UNION,
            TRANSFORM_ERROR,
            ARITY_MISMATCH,
            IMPLEMENTATION_ERROR,
            CUSTOM,
        }
    )


_EMPTY_PARAMS: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True)
class Issue:
    """A single validation failure.

    ``params`` carries the constraint metadata used to build messages
    (``expected``, ``minimum``, ``format``, ...). Those entries are also
    readable as attributes, so ``issue.minimum`` works inside resolvers.
    """

    code: str
    path: Path = ()
    message: str = ""
    input: Any = field(default=None, compare=False)
    params: Mapping[str, Any] = field(default_factory=lambda: _EMPTY_PARAMS, compare=False)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_") or name == "params":
            raise AttributeError(name)
        params = self.__dict__.get("params", _EMPTY_PARAMS)
        if name in params:
            return params[name]
        raise AttributeError(f"{type(self).__name__!s} has no attribute {name!r}")

    def __reduce__(self):
        # mappingproxy does not pickle
        return (_restore_issue, (self.code, self.path, self.message, self.input, dict(self.params)))

    def with_path_prefix(self, prefix: Path) -> "Issue":
        if not prefix:
            return self
        return Issue(
            code=self.code,
            path=tuple(prefix) + self.path,
            message=self.message,
            input=self.input,
            params=self.params,
        )

    def to_dict(self) -> dict:
        data = {"code": self.code, "path": list(self.path), "message": self.message}
        for key, value in self.params.items():
            if key == "errors":
                data[key] = [[issue.to_dict() for issue in branch] for branch in value]
            elif key == "issues":
                data[key] = [issue.to_dict() for issue in value]
            else:
                data[key] = value
        return data


def _restore_issue(code: str, path: Path, message: str, value: Any, params: dict) -> Issue:
    return Issue(code=code, path=path, message=message, input=value, params=MappingProxyType(params))


@dataclass(frozen=True)
class ParseResult:
    """Outcome of one validation run.

    On success ``data`` holds the (possibly transformed) value and ``issues``
    is empty. On failure ``issues`` is a non-empty, order-stable tuple.
    """

    success: bool
    data: Any = None
    issues: Tuple[Issue, ...] = ()

    @cached_property
    def tree(self) -> "TreeNode":
        from ..formatting import treeify

        return treeify(self.issues)

    @property
    def error(self) -> Optional["ValidationError"]:
        if self.success:
            return None
        from ..exceptions import ValidationError

        return ValidationError(self.issues)

    def unwrap(self) -> Any:
        """Return ``data`` or raise the ``ValidationError``."""

        if self.success:
            return self.data
        raise self.error

    def __bool__(self) -> bool:
        return self.success


__all__ = [
    "MISSING",
    "Issue",
    "IssueCode",
    "ParseResult",
    "Path",
    "PathKey",
]
