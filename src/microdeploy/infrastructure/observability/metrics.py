"""Prometheus metrics configuration."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Histogram,
    Info,
)


# Application info
APP_INFO = Info("microdeploy", "Single-instance deployment teardown service info")
APP_INFO.info({
    "version": "0.1.0",
    "service": "microdeploy",
})

# Teardown metrics
TEARDOWN_RUNS_TOTAL = Counter(
    "microdeploy_teardown_runs_total",
    "Total number of teardown runs",
    ["result"],  # "deleted", "noop", "failed"
)

TEARDOWN_DURATION = Histogram(
    "microdeploy_teardown_duration_seconds",
    "Time taken for a teardown run",
    buckets=[1, 5, 10, 30, 60, 120, 300, 600],
)

TEARDOWN_STEPS_TOTAL = Counter(
    "microdeploy_teardown_steps_total",
    "Total number of progress steps by outcome",
    ["outcome"],  # "finished", "skipped", "failed"
)

# Infrastructure metrics
CLOUD_CALLS_TOTAL = Counter(
    "microdeploy_cloud_calls_total",
    "Total infrastructure (CPI) calls",
    ["method", "result"],
)

DISTRIBUTED_LOCK_OPERATIONS = Counter(
    "microdeploy_distributed_lock_operations_total",
    "Total distributed lock operations",
    ["operation", "result"],  # operation: acquire/release, result: success/failure
)
