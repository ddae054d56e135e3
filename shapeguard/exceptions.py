# Copyright (c) 2025 Artoo Corporation
# Licensed under the Business Source License 1.1 (see LICENSE).
# Change Date: 2029-09-08  •  Change License: LGPL-3.0-or-later

"""Exception hierarchy for shapeguard.

Validation itself never raises for malformed *input*: ``safe_parse`` returns a
result object. Exceptions are reserved for:

* ``ConfigurationError``  - programmer mistakes while building schemas, raised
  immediately at construction time.
* ``ValidationError``     - raised by ``parse`` and by function contracts when
  arguments or return values violate their schemas.
* ``ImplementationError`` - the callable wrapped by a function contract failed.
"""

from __future__ import annotations

from functools import cached_property, partial
from typing import TYPE_CHECKING, Any, Optional, Sequence

if TYPE_CHECKING:  # pragma: no cover
    from .formatting import TreeNode
    from .validation.base import Issue


class ShapeguardError(Exception):
    """Base class for every error raised by shapeguard."""


class ConfigurationError(ShapeguardError):
    """Raised when a schema or definition is constructed incorrectly."""


class ValidationError(ShapeguardError):
    """Raised when a value does not satisfy its schema.

    The full, order-stable issue list is available on ``issues``; the nested
    view is computed on first access of ``tree``.
    """

    def __init__(self, issues: Sequence["Issue"], *, context: Optional[str] = None):
        self.issues = tuple(issues)
        self.context = context
        super().__init__(self.message)

    @property
    def message(self) -> str:
        from .formatting import prettify

        header = f"{self.context}: " if self.context else ""
        count = len(self.issues)
        noun = "issue" if count == 1 else "issues"
        return f"{header}{count} validation {noun}\n{prettify(self.issues)}"

    @cached_property
    def tree(self) -> "TreeNode":
        from .formatting import treeify

        return treeify(self.issues)

    def __reduce__(self):
        return (partial(type(self), context=self.context), (self.issues,))

    def __repr__(self) -> str:
        codes = ", ".join(issue.code for issue in self.issues)
        return f"ValidationError(issues=[{codes}])"


class ImplementationError(ShapeguardError):
    """The implementation wrapped by a function contract raised.

    The original exception is chained as ``__cause__`` and also exposed as
    ``original``.
    """

    def __init__(self, function_name: str, original: BaseException, *, issue: Any = None):
        self.function_name = function_name
        self.original = original
        self.issue = issue
        self.message = (
            f"Implementation of '{function_name}' failed: "
            f"{type(original).__name__}: {original}"
        )
        super().__init__(self.message)

    def __reduce__(self):
        return (partial(type(self), issue=self.issue), (self.function_name, self.original))


__all__ = [
    "ShapeguardError",
    "ConfigurationError",
    "ValidationError",
    "ImplementationError",
]
