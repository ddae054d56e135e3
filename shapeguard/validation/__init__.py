"""Validation package - issue model and message resolution.

The recursive engine lives in ``shapeguard.validation.engine``; it is not
imported here because schema nodes depend on this package's base types.
"""

from .base import MISSING, Issue, IssueCode, ParseResult, Path, PathKey
from .messages import default_message, describe_type
from .resolution import coerce_error_option, resolve_message

__all__ = [
    "MISSING",
    "Issue",
    "IssueCode",
    "ParseResult",
    "Path",
    "PathKey",
    "coerce_error_option",
    "default_message",
    "describe_type",
    "resolve_message",
]
