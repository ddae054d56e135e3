# Copyright (c) 2025 Artoo Corporation
# Licensed under the Business Source License 1.1 (see LICENSE).
# Change Date: 2029-09-08  •  Change License: LGPL-3.0-or-later

import time

import pytest

from shapeguard import function_schema, number, string
from shapeguard.telemetry import metrics


class _Recorder:
    def __init__(self):
        self.calls = []

    def add(self, amount, attributes=None):
        self.calls.append((amount, dict(attributes or {})))

    def record(self, amount, attributes=None):
        self.calls.append((amount, dict(attributes or {})))


class _Broken:
    def add(self, *_a, **_kw):
        raise RuntimeError("exporter down")

    record = add


def test_validation_records_outcome_and_issue_codes(monkeypatch):
    totals, issues = _Recorder(), _Recorder()
    monkeypatch.setattr(metrics, "validation_total", totals)
    monkeypatch.setattr(metrics, "validation_issue_total", issues)

    string().min(2).safe_parse("a")

    assert totals.calls == [(1, {"kind": "string", "outcome": "failure"})]
    assert issues.calls == [(1, {"code": "too_small"})]


def test_contract_records_status(monkeypatch):
    invocations = _Recorder()
    monkeypatch.setattr(metrics, "contract_invocation_total", invocations)
    monkeypatch.setattr(metrics, "contract_exec_latency_ms", _Recorder())

    double = function_schema(input=[number()], output=number()).implement(lambda n: n * 2)
    double(2)
    with pytest.raises(Exception):
        double("x")

    assert [attrs["status"] for _, attrs in invocations.calls] == ["success", "invalid_input"]


def test_broken_instruments_never_break_validation(monkeypatch):
    """
    GIVEN: Metric instruments that raise on every call
    WHEN: Validation and contract calls run
    THEN: They complete normally
    """
    monkeypatch.setattr(metrics, "validation_total", _Broken())
    monkeypatch.setattr(metrics, "contract_invocation_total", _Broken())
    monkeypatch.setattr(metrics, "contract_exec_latency_ms", _Broken())

    assert string().safe_parse("ok").success is True
    metrics.record_contract_metrics("demo", "success", time.perf_counter())
