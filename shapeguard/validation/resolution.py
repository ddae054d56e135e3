# Copyright (c) 2025 Artoo Corporation
# Licensed under the Business Source License 1.1 (see LICENSE).
# Change Date: 2029-09-08  •  Change License: LGPL-3.0-or-later

"""Error message resolution.

A failed constraint asks, in order:

1. the per-constraint ``error`` given at the call site (``.min(3, error=...)``)
2. the node-level ``error`` given when the schema was constructed
3. the global ``custom_error`` from :func:`shapeguard.configure`
4. the built-in template for the issue code

A resolver that returns ``None`` defers to the next level. A resolver that
raises is logged and skipped; it never aborts the validation run.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import replace
from typing import Any, Mapping, Optional

from ..config import ErrorOption, get_config
from ..exceptions import ConfigurationError
from ..telemetry.metrics import resolver_failure_total
from .base import Issue, IssueCode
from .messages import default_message

logger = logging.getLogger(__name__)

LEGACY_ERROR_OPTIONS = ("message", "invalid_type_error", "required_error", "error_map")


def _apply(option: ErrorOption, issue: Issue, level: str) -> Optional[str]:
    if isinstance(option, str):
        return option
    try:
        result = option(issue)
    except Exception as exc:
        logger.warning(
            "%s error resolver raised %s for issue '%s' at %s; falling back",
            level,
            type(exc).__name__,
            issue.code,
            list(issue.path),
        )
        try:
            resolver_failure_total.add(1, {"level": level, "code": issue.code})
        except Exception:
            pass
        return None

    if result is None:
        return None
    if isinstance(result, Mapping):
        message = result.get("message")
        return str(message) if message is not None else None
    return str(result)


def resolve_message(
    issue: Issue,
    *,
    check_error: Optional[ErrorOption] = None,
    node_error: Optional[ErrorOption] = None,
) -> str:
    """Return the message for *issue* following the precedence chain."""

    chain = (
        ("constraint", check_error),
        ("node", node_error),
        ("global", get_config().custom_error),
    )
    for level, option in chain:
        if option is None:
            continue
        message = _apply(option, issue, level)
        if message is not None:
            return message
    return default_message(issue)


def finalize(
    issue: Issue,
    *,
    check_error: Optional[ErrorOption] = None,
    node_error: Optional[ErrorOption] = None,
) -> Issue:
    """Attach the resolved message to an issue-in-progress."""

    message = resolve_message(issue, check_error=check_error, node_error=node_error)
    return replace(issue, message=message)


def _legacy_resolver(invalid_type_error: Optional[str], required_error: Optional[str]):
    def resolver(issue: Issue) -> Optional[str]:
        if required_error is not None and issue.code == IssueCode.MISSING:
            return required_error
        if invalid_type_error is not None and issue.code == IssueCode.INVALID_TYPE:
            return invalid_type_error
        return None

    return resolver


def coerce_error_option(error: Optional[ErrorOption] = None, **legacy: Any) -> Optional[ErrorOption]:
    """Validate the ``error`` option and translate deprecated spellings.

    Raises ``ConfigurationError`` when ``error`` is combined with one of the
    older options, or when an option has the wrong type.
    """

    supplied = {name: value for name, value in legacy.items() if value is not None}
    unknown = sorted(set(supplied) - set(LEGACY_ERROR_OPTIONS))
    if unknown:
        raise ConfigurationError(f"Unknown error option(s): {unknown}")

    if error is not None and supplied:
        raise ConfigurationError(
            f"The 'error' option cannot be combined with deprecated option(s) {sorted(supplied)}; "
            "use 'error' alone"
        )

    if supplied:
        message = (
            f"Option(s) {sorted(supplied)} are deprecated; pass 'error' (a string or a resolver) instead"
        )
        warnings.warn(message, DeprecationWarning, stacklevel=3)
        logger.warning(message)

        if "error_map" in supplied:
            if len(supplied) > 1:
                raise ConfigurationError("'error_map' cannot be combined with other message options")
            error = supplied["error_map"]
        elif "message" in supplied:
            if len(supplied) > 1:
                raise ConfigurationError("'message' cannot be combined with other message options")
            error = supplied["message"]
        else:
            error = _legacy_resolver(
                supplied.get("invalid_type_error"), supplied.get("required_error")
            )

    if error is not None and not (isinstance(error, str) or callable(error)):
        raise ConfigurationError(
            f"'error' must be a string or a callable, got {type(error).__name__}"
        )
    return error


__all__ = [
    "LEGACY_ERROR_OPTIONS",
    "coerce_error_option",
    "finalize",
    "resolve_message",
]
