# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Observability and metrics for the Finnhub client.

Classes:
    UnifiedMetricsCollector: Metrics collector with dict snapshot and Prometheus export.

Functions:
    get_metrics_collector: Get the global metrics collector singleton.
    reset_metrics_collector: Reset the global metrics collector singleton.
"""

from .collector import (
    METRIC_DEFINITIONS,
    MetricDefinition,
    UnifiedMetricsCollector,
    get_metrics_collector,
    reset_metrics_collector,
)
from .constants import (
    ACTIVE_REQUESTS,
    ADMISSION_WAIT_SECONDS,
    ADMISSIONS_TOTAL,
    AVAILABLE_PERMITS,
    LATENCY_BUCKETS,
    METRIC_PREFIX,
    RATE_LIMITED_TOTAL,
    REQUEST_DURATION_SECONDS,
    REQUESTS_TOTAL,
    WAIT_BUCKETS,
    WEBSOCKET_MESSAGES_TOTAL,
)

__all__ = [
    "ACTIVE_REQUESTS",
    "ADMISSIONS_TOTAL",
    "ADMISSION_WAIT_SECONDS",
    "AVAILABLE_PERMITS",
    "LATENCY_BUCKETS",
    "METRIC_DEFINITIONS",
    "METRIC_PREFIX",
    "RATE_LIMITED_TOTAL",
    "REQUESTS_TOTAL",
    "REQUEST_DURATION_SECONDS",
    "WAIT_BUCKETS",
    "WEBSOCKET_MESSAGES_TOTAL",
    "MetricDefinition",
    "UnifiedMetricsCollector",
    "get_metrics_collector",
    "reset_metrics_collector",
]
