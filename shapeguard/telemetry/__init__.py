# Copyright (c) 2025 Artoo Corporation
# Licensed under the Business Source License 1.1 (see LICENSE).
# Change Date: 2029-09-08  •  Change License: LGPL-3.0-or-later

"""OpenTelemetry instruments for shapeguard.

Only the OpenTelemetry *API* is used. Without an SDK configured by the host
application every instrument is a no-op.
"""

from .runtime import get_tracer, meter
from .metrics import (
    contract_exec_latency_ms,
    contract_invocation_total,
    record_contract_metrics,
    record_validation_metrics,
    resolver_failure_total,
    validation_issue_total,
    validation_total,
)

__all__ = [
    "contract_exec_latency_ms",
    "contract_invocation_total",
    "get_tracer",
    "meter",
    "record_contract_metrics",
    "record_validation_metrics",
    "resolver_failure_total",
    "validation_issue_total",
    "validation_total",
]
