# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Unified metrics collector backed by prometheus_client.

This module provides the UnifiedMetricsCollector class that serves as the
single source of truth for all metrics in the finnhub-client library.

Features:
    1. Thread-safe counter/gauge/histogram operations
    2. Prometheus metric registration (default or injected registry)
    3. Dict snapshot for JSON export and tests
    4. Label cardinality protection (max 1000 unique combinations per metric)
    5. Optional HTTP server for Prometheus scraping

Usage:
    >>> from finnhub_client.observability import get_metrics_collector
    >>> collector = get_metrics_collector()
    >>> collector.inc_counter('finnhub_requests_total',
    ...                       labels={'operation': 'quote', 'outcome': 'success'})
    >>> metrics = collector.get_metrics()
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, ClassVar

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    start_http_server,
)

from .constants import (
    ACTIVE_REQUESTS,
    ADMISSION_WAIT_SECONDS,
    ADMISSIONS_TOTAL,
    AVAILABLE_PERMITS,
    LATENCY_BUCKETS,
    RATE_LIMITED_TOTAL,
    REQUEST_DURATION_SECONDS,
    REQUESTS_TOTAL,
    WAIT_BUCKETS,
    WEBSOCKET_MESSAGES_TOTAL,
)

logger = logging.getLogger(__name__)


@dataclass
class MetricDefinition:
    """Schema for a pre-defined metric."""

    name: str
    metric_type: str  # 'counter', 'gauge', 'histogram'
    description: str
    label_names: tuple[str, ...] = ()
    buckets: list[float] | None = None


METRIC_DEFINITIONS: dict[str, MetricDefinition] = {
    # === Requests ===
    REQUESTS_TOTAL: MetricDefinition(
        REQUESTS_TOTAL,
        "counter",
        "Total dispatched requests",
        ("operation", "outcome"),
    ),
    REQUEST_DURATION_SECONDS: MetricDefinition(
        REQUEST_DURATION_SECONDS,
        "histogram",
        "Dispatch latency including admission wait",
        ("operation",),
        buckets=LATENCY_BUCKETS,
    ),
    RATE_LIMITED_TOTAL: MetricDefinition(
        RATE_LIMITED_TOTAL,
        "counter",
        "Total 429 responses",
        ("operation",),
    ),
    ACTIVE_REQUESTS: MetricDefinition(
        ACTIVE_REQUESTS,
        "gauge",
        "Requests currently in flight",
        (),
    ),
    # === Admission ===
    ADMISSIONS_TOTAL: MetricDefinition(
        ADMISSIONS_TOTAL,
        "counter",
        "Total permits granted",
        ("bucket",),
    ),
    ADMISSION_WAIT_SECONDS: MetricDefinition(
        ADMISSION_WAIT_SECONDS,
        "histogram",
        "Time spent waiting for a permit",
        ("bucket",),
        buckets=WAIT_BUCKETS,
    ),
    AVAILABLE_PERMITS: MetricDefinition(
        AVAILABLE_PERMITS,
        "gauge",
        "Permits left after the last admission",
        ("bucket",),
    ),
    # === Streaming ===
    WEBSOCKET_MESSAGES_TOTAL: MetricDefinition(
        WEBSOCKET_MESSAGES_TOTAL,
        "counter",
        "Total WebSocket messages received",
        ("message_type",),
    ),
}


class UnifiedMetricsCollector:
    """
    Unified metrics collector with a dict snapshot and Prometheus export.

    Thread Safety:
        All dict operations use an RLock. The collector is shared by every
        client in the process through get_metrics_collector().

    Cardinality Protection:
        To prevent unbounded memory growth, a maximum of MAX_LABEL_COMBINATIONS
        unique label combinations are tracked per metric.

    Example:
        >>> collector = UnifiedMetricsCollector(enable_prometheus=False)
        >>> collector.inc_counter('finnhub_admissions_total',
        ...                       labels={'bucket': 'default'})
        >>> collector.get_metrics()["counters"]
        {'finnhub_admissions_total': {'bucket=default': 1}}
    """

    MAX_LABEL_COMBINATIONS: ClassVar[int] = 1000

    def __init__(
        self,
        enable_prometheus: bool = True,
        registry: CollectorRegistry | None = None,
    ) -> None:
        """
        Initialize the metrics collector.

        Args:
            enable_prometheus: Whether to register Prometheus metrics
            registry: Optional Prometheus CollectorRegistry for testing
        """
        self._enable_prometheus = enable_prometheus
        self._registry = registry if registry is not None else REGISTRY

        self._counters: dict[str, dict[str, float]] = defaultdict(
            lambda: defaultdict(float)
        )
        self._gauges: dict[str, dict[str, float]] = defaultdict(
            lambda: defaultdict(float)
        )
        self._histograms: dict[str, dict[str, list[float]]] = defaultdict(
            lambda: defaultdict(list)
        )

        self._lock = threading.RLock()

        self._prom_metrics: dict[str, Any] = {}
        self._label_combinations: dict[str, set[str]] = defaultdict(set)
        self._server_running = False

        logger.debug(
            f"UnifiedMetricsCollector initialized "
            f"(prometheus={'enabled' if self._enable_prometheus else 'disabled'})"
        )

    def _labels_to_key(self, labels: dict[str, str] | None) -> str:
        """Convert labels dict to a stable string key."""
        if not labels:
            return ""
        return ",".join(f"{k}={v}" for k, v in sorted(labels.items()))

    def _check_cardinality(self, name: str, label_key: str) -> bool:
        """Return False when this label combination would exceed the limit."""
        if label_key in self._label_combinations[name]:
            return True
        if len(self._label_combinations[name]) >= self.MAX_LABEL_COMBINATIONS:
            logger.warning(
                f"Cardinality limit ({self.MAX_LABEL_COMBINATIONS}) reached "
                f"for metric {name}. Dropping label combination: {label_key}"
            )
            return False
        self._label_combinations[name].add(label_key)
        return True

    def _get_or_create_prom(
        self, name: str, metric_type: str, labels: dict[str, str] | None
    ) -> Any | None:
        """Get or lazily register the Prometheus metric for ``name``."""
        if not self._enable_prometheus:
            return None

        with self._lock:
            if name not in self._prom_metrics:
                defn = METRIC_DEFINITIONS.get(name)
                if defn is not None and defn.metric_type == metric_type:
                    label_names = list(defn.label_names)
                    description = defn.description
                else:
                    label_names = sorted(labels) if labels else []
                    description = f"Dynamic {metric_type}: {name}"

                try:
                    if metric_type == "counter":
                        metric: Any = Counter(
                            name, description, label_names, registry=self._registry
                        )
                    elif metric_type == "gauge":
                        metric = Gauge(
                            name, description, label_names, registry=self._registry
                        )
                    else:
                        buckets = (
                            defn.buckets if defn and defn.buckets else LATENCY_BUCKETS
                        )
                        metric = Histogram(
                            name,
                            description,
                            label_names,
                            buckets=buckets,
                            registry=self._registry,
                        )
                except ValueError as e:
                    # Already registered by another collector on this registry
                    logger.warning(
                        f"Failed to create Prometheus {metric_type} {name}: {e}"
                    )
                    metric = None
                self._prom_metrics[name] = metric

            return self._prom_metrics[name]

    def _prom_apply(
        self,
        name: str,
        metric_type: str,
        labels: dict[str, str] | None,
        method: str,
        value: float,
    ) -> None:
        metric = self._get_or_create_prom(name, metric_type, labels)
        if metric is None:
            return
        try:
            target = metric.labels(**labels) if labels else metric
            getattr(target, method)(value)
        except ValueError as e:
            logger.debug(f"Prometheus {metric_type} update failed for {name}: {e}")

    # === Counter Operations ===

    def inc_counter(
        self,
        name: str,
        value: float = 1,
        labels: dict[str, str] | None = None,
    ) -> None:
        """
        Increment a counter metric.

        Raises:
            ValueError: If value is negative
        """
        if value < 0:
            raise ValueError("Counter increment must be non-negative")

        label_key = self._labels_to_key(labels)
        with self._lock:
            if not self._check_cardinality(name, label_key):
                return
            self._counters[name][label_key] += value

        self._prom_apply(name, "counter", labels, "inc", value)

    # === Gauge Operations ===

    def set_gauge(
        self,
        name: str,
        value: float,
        labels: dict[str, str] | None = None,
    ) -> None:
        """Set a gauge metric to a specific value."""
        label_key = self._labels_to_key(labels)
        with self._lock:
            if not self._check_cardinality(name, label_key):
                return
            self._gauges[name][label_key] = value

        self._prom_apply(name, "gauge", labels, "set", value)

    def inc_gauge(
        self,
        name: str,
        value: float = 1.0,
        labels: dict[str, str] | None = None,
    ) -> None:
        label_key = self._labels_to_key(labels)
        with self._lock:
            if not self._check_cardinality(name, label_key):
                return
            self._gauges[name][label_key] += value

        self._prom_apply(name, "gauge", labels, "inc", value)

    def dec_gauge(
        self,
        name: str,
        value: float = 1.0,
        labels: dict[str, str] | None = None,
    ) -> None:
        label_key = self._labels_to_key(labels)
        with self._lock:
            if not self._check_cardinality(name, label_key):
                return
            self._gauges[name][label_key] -= value

        self._prom_apply(name, "gauge", labels, "dec", value)

    # === Histogram Operations ===

    def observe_histogram(
        self,
        name: str,
        value: float,
        labels: dict[str, str] | None = None,
    ) -> None:
        """Record an observation in a histogram."""
        label_key = self._labels_to_key(labels)
        with self._lock:
            if not self._check_cardinality(name, label_key):
                return
            observations = self._histograms[name][label_key]
            observations.append(value)
            # Keep only recent observations to prevent memory growth
            if len(observations) > 10000:
                self._histograms[name][label_key] = observations[-5000:]

        self._prom_apply(name, "histogram", labels, "observe", value)

    # === Snapshot Operations ===

    def get_metrics(self) -> dict[str, Any]:
        """
        Get a snapshot of all metrics.

        Returns a dict suitable for JSON serialization with structure:
        {
            "counters": {"metric_name": {"label_key": value, ...}, ...},
            "gauges": {"metric_name": {"label_key": value, ...}, ...},
            "histograms": {"metric_name": {"label_key": {...}, ...}, ...}
        }
        """
        with self._lock:
            counters = {
                name: dict(label_values)
                for name, label_values in self._counters.items()
            }
            gauges = {
                name: dict(label_values) for name, label_values in self._gauges.items()
            }

            histograms: dict[str, dict[str, dict[str, Any]]] = {}
            for name, label_values in self._histograms.items():
                histograms[name] = {}
                for label_key, observations in label_values.items():
                    if observations:
                        histograms[name][label_key] = {
                            "count": len(observations),
                            "sum": sum(observations),
                            "avg": sum(observations) / len(observations),
                            "min": min(observations),
                            "max": max(observations),
                        }

        return {
            "counters": counters,
            "gauges": gauges,
            "histograms": histograms,
        }

    # === Lifecycle ===

    def reset(self) -> None:
        """Reset the dict snapshot. Registered Prometheus metrics are kept."""
        with self._lock:
            self._counters.clear()
            self._gauges.clear()
            self._histograms.clear()
            self._label_combinations.clear()

        logger.debug("Metrics collector reset")

    def start_http_server(self, host: str = "127.0.0.1", port: int = 9090) -> bool:
        """
        Start the Prometheus HTTP server for metrics scraping.

        Binds to localhost by default. Returns False if the server could not
        be started.
        """
        if self._server_running:
            logger.warning("Prometheus server already running")
            return True

        try:
            start_http_server(port, addr=host, registry=self._registry)
        except OSError as e:
            logger.error(f"Failed to start Prometheus server: {e}")
            return False
        self._server_running = True
        logger.info(f"Prometheus metrics server started on {host}:{port}")
        return True

    @property
    def prometheus_enabled(self) -> bool:
        return self._enable_prometheus

    @property
    def server_running(self) -> bool:
        return self._server_running


# =============================================================================
# Singleton Pattern
# =============================================================================

_global_collector: UnifiedMetricsCollector | None = None
_collector_lock = threading.Lock()


def get_metrics_collector(
    enable_prometheus: bool = True,
) -> UnifiedMetricsCollector:
    """
    Get or create the global metrics collector singleton.

    Args:
        enable_prometheus: Whether to enable Prometheus metrics
            (only used on first call)
    """
    global _global_collector

    if _global_collector is None:
        with _collector_lock:
            if _global_collector is None:
                _global_collector = UnifiedMetricsCollector(
                    enable_prometheus=enable_prometheus
                )

    return _global_collector


def reset_metrics_collector() -> None:
    """Reset the global metrics collector singleton (mainly for testing)."""
    global _global_collector
    with _collector_lock:
        if _global_collector:
            _global_collector.reset()
        _global_collector = None


__all__ = [
    "METRIC_DEFINITIONS",
    "MetricDefinition",
    "UnifiedMetricsCollector",
    "get_metrics_collector",
    "reset_metrics_collector",
]
