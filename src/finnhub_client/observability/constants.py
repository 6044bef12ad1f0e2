# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Metric name constants following Prometheus naming conventions.

All metric names use the `finnhub_` prefix.

Naming Conventions:
    - Counter metrics end with `_total`
    - Histogram metrics for time end with `_seconds`
    - Gauges use present-tense descriptive names

Label Best Practices:
    To prevent label cardinality explosion, use only:
    - `operation` - Operation identifier from the endpoint table (or "raw")
    - `outcome` - "success" or a normalized error kind
    - `bucket` - Admission bucket key
    - `message_type` - WebSocket message discriminator

    NEVER use symbols, query values or URLs as labels.

Usage:
    >>> from finnhub_client.observability.constants import REQUESTS_TOTAL
    >>> print(REQUESTS_TOTAL)
    'finnhub_requests_total'
"""


METRIC_PREFIX = "finnhub"
"""Prefix for all Prometheus metrics in this library."""


# =============================================================================
# Request Metrics (client.py)
# =============================================================================

REQUESTS_TOTAL = f"{METRIC_PREFIX}_requests_total"
"""Total dispatched requests by operation and outcome."""

REQUEST_DURATION_SECONDS = f"{METRIC_PREFIX}_request_duration_seconds"
"""End-to-end dispatch latency including admission wait."""

RATE_LIMITED_TOTAL = f"{METRIC_PREFIX}_rate_limited_total"
"""Total 429 responses received from the API."""

ACTIVE_REQUESTS = f"{METRIC_PREFIX}_active_requests"
"""Number of requests currently between admission and interpretation."""


# =============================================================================
# Admission Metrics (admission.py)
# =============================================================================

ADMISSIONS_TOTAL = f"{METRIC_PREFIX}_admissions_total"
"""Total permits granted by the admission controller."""

ADMISSION_WAIT_SECONDS = f"{METRIC_PREFIX}_admission_wait_seconds"
"""Time spent suspended waiting for a permit."""

AVAILABLE_PERMITS = f"{METRIC_PREFIX}_available_permits"
"""Permits left in the bucket after the most recent admission."""


# =============================================================================
# Streaming Metrics (websocket.py)
# =============================================================================

WEBSOCKET_MESSAGES_TOTAL = f"{METRIC_PREFIX}_websocket_messages_total"
"""Total WebSocket push messages received by type."""


# =============================================================================
# Histogram Buckets
# =============================================================================

LATENCY_BUCKETS: list[float] = [
    0.005,
    0.01,
    0.025,
    0.05,
    0.1,
    0.25,
    0.5,
    1.0,
    2.5,
    5.0,
    10.0,
    30.0,
]
"""Request latency buckets in seconds."""

WAIT_BUCKETS: list[float] = [
    0.001,
    0.01,
    0.033,
    0.1,
    0.25,
    0.5,
    1.0,
    2.0,
    5.0,
    15.0,
]
"""Admission wait buckets in seconds; 0.033 is one permit at 30/s."""


__all__ = [
    "ACTIVE_REQUESTS",
    "ADMISSIONS_TOTAL",
    "ADMISSION_WAIT_SECONDS",
    "AVAILABLE_PERMITS",
    "LATENCY_BUCKETS",
    "METRIC_PREFIX",
    "RATE_LIMITED_TOTAL",
    "REQUESTS_TOTAL",
    "REQUEST_DURATION_SECONDS",
    "WAIT_BUCKETS",
    "WEBSOCKET_MESSAGES_TOTAL",
]
