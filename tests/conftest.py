# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Shared fixtures for the finnhub-client test suite."""

from __future__ import annotations

import asyncio

import pytest

from finnhub_client.observability.collector import (
    UnifiedMetricsCollector,
    reset_metrics_collector,
)

TEST_API_KEY = "sk-test-0123456789abcdef"


class FakeClock:
    """
    Manually advanced monotonic clock.

    ``sleep`` advances the clock instead of waiting, so admission tests run
    instantly while still exercising the real refill arithmetic.
    """

    def __init__(self, start: float = 1000.0) -> None:
        self.start = start
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    @property
    def elapsed(self) -> float:
        return self.now - self.start

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        # Yield so concurrent waiters interleave like they would for real
        await asyncio.sleep(0)


@pytest.fixture
def api_key() -> str:
    return TEST_API_KEY


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def metrics() -> UnifiedMetricsCollector:
    """Isolated collector with Prometheus registration disabled."""
    return UnifiedMetricsCollector(enable_prometheus=False)


@pytest.fixture(autouse=True)
def _reset_global_metrics():
    """Keep the global collector from leaking between tests."""
    yield
    reset_metrics_collector()


@pytest.fixture(autouse=True)
def _clear_finnhub_env(monkeypatch):
    """Tests never read credentials or settings from the real environment."""
    for name in (
        "FINNHUB_API_KEY",
        "FINNHUB_BASE_URL",
        "FINNHUB_WEBSOCKET_URL",
        "FINNHUB_TIMEOUT",
        "FINNHUB_AUTH_METHOD",
        "FINNHUB_RATE_LIMIT_STRATEGY",
    ):
        monkeypatch.delenv(name, raising=False)
