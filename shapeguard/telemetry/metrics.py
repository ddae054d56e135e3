# Copyright (c) 2025 Artoo Corporation
# Licensed under the Business Source License 1.1 (see LICENSE).
# Change Date: 2029-09-08  •  Change License: LGPL-3.0-or-later

"""Metric instrument definitions for shapeguard."""

from __future__ import annotations

import logging
import time
from typing import Iterable

from .runtime import meter

logger = logging.getLogger(__name__)

validation_total = meter.create_counter(
    name="shapeguard.validation.total",
    description="Counts top-level validation runs partitioned by root kind and outcome.",
    unit="1",
)

validation_issue_total = meter.create_counter(
    name="shapeguard.validation.issue.total",
    description="Counts issues reported by validation runs, partitioned by issue code.",
    unit="1",
)

resolver_failure_total = meter.create_counter(
    name="shapeguard.resolver.failure.total",
    description="Counts error resolvers that raised and were skipped in favour of a fallback.",
    unit="1",
)

contract_invocation_total = meter.create_counter(
    name="shapeguard.contract.invocation.total",
    description="Counts function contract invocations partitioned by outcome.",
    unit="1",
)

contract_exec_latency_ms = meter.create_histogram(
    name="shapeguard.contract.exec.latency.ms",
    description="Time spent inside a contract implementation after its arguments validated.",
    unit="ms",
)


def record_validation_metrics(kind: str, success: bool, codes: Iterable[str] = ()) -> None:
    """Record the outcome of one top-level validation run."""

    try:
        validation_total.add(1, {"kind": kind, "outcome": "success" if success else "failure"})
        for code in codes:
            validation_issue_total.add(1, {"code": code})
    except Exception:
        # Telemetry must never interfere with validation
        logger.debug("Failed to record validation metrics", exc_info=True)


def record_contract_metrics(function_name: str, status: str, started_at: float) -> None:
    """Record latency and outcome for one contract invocation.

    Args:
        function_name: Qualified name of the wrapped implementation
        status: ``"success"``, ``"invalid_input"``, ``"invalid_output"`` or ``"error"``
        started_at: Timestamp from ``time.perf_counter()`` taken before the call
    """

    duration_ms = (time.perf_counter() - started_at) * 1000.0
    try:
        contract_exec_latency_ms.record(duration_ms, {"function": function_name, "status": status})
        contract_invocation_total.add(1, {"function": function_name, "status": status})
    except Exception:
        logger.debug("Failed to record contract metrics", exc_info=True)


__all__ = [
    "contract_exec_latency_ms",
    "contract_invocation_total",
    "record_contract_metrics",
    "record_validation_metrics",
    "resolver_failure_total",
    "validation_issue_total",
    "validation_total",
]
