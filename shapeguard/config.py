# Copyright (c) 2025 Artoo Corporation
# Licensed under the Business Source License 1.1 (see LICENSE).
# Change Date: 2029-09-08  •  Change License: LGPL-3.0-or-later

"""Process-wide configuration.

Configuration is meant to be written once during application setup, before
schemas are used for validation. Reads happen on every validation call and
take no lock.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ErrorResolver = Callable[[Any], Optional[str]]
ErrorOption = Union[str, ErrorResolver]

OFFLOAD_ENV = "SHAPEGUARD_OFFLOAD_SYNC"
LOG_LEVEL_ENV = "SHAPEGUARD_LOG_LEVEL"


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() not in ("", "0", "false", "no", "off")


@dataclass(frozen=True)
class ShapeguardConfig:
    """Global options.

    :param custom_error: Schema-global resolver (or fixed message) consulted
        after per-constraint and per-node resolvers and before the built-in
        messages.
    :param offload_sync_implementations: When a plain (non-coroutine) callable
        is given to ``implement_async`` it runs in a worker thread instead of
        blocking the event loop.
    :param max_prettify_issues: Cap on the number of issues rendered by
        ``prettify``; ``None`` renders all of them.
    """

    custom_error: Optional[ErrorOption] = None
    offload_sync_implementations: bool = True
    max_prettify_issues: Optional[int] = None


def _from_environment() -> ShapeguardConfig:
    return ShapeguardConfig(
        offload_sync_implementations=_env_flag(OFFLOAD_ENV, True),
    )


_CONFIG: ShapeguardConfig = _from_environment()
_FIELDS = frozenset(f.name for f in dataclasses.fields(ShapeguardConfig))


def get_config() -> ShapeguardConfig:
    """Return the active configuration."""

    return _CONFIG


def configure(**options: Any) -> ShapeguardConfig:
    """Update global options and return the new configuration.

    Unknown option names raise ``ConfigurationError`` rather than being ignored.
    """

    global _CONFIG

    unknown = sorted(set(options) - _FIELDS)
    if unknown:
        raise ConfigurationError(
            f"Unknown configuration option(s): {unknown}. Valid options: {sorted(_FIELDS)}"
        )

    custom_error = options.get("custom_error")
    if custom_error is not None and not (isinstance(custom_error, str) or callable(custom_error)):
        raise ConfigurationError("custom_error must be a string or a callable")

    max_issues = options.get("max_prettify_issues")
    if max_issues is not None and (not isinstance(max_issues, int) or max_issues < 1):
        raise ConfigurationError("max_prettify_issues must be a positive integer or None")

    _CONFIG = dataclasses.replace(_CONFIG, **options)
    logger.debug("shapeguard configuration updated: %s", sorted(options))
    return _CONFIG


def reset_config() -> ShapeguardConfig:
    """Restore defaults (re-reading environment variables)."""

    global _CONFIG
    _CONFIG = _from_environment()
    return _CONFIG


__all__ = [
    "ErrorOption",
    "ErrorResolver",
    "ShapeguardConfig",
    "configure",
    "get_config",
    "reset_config",
]
