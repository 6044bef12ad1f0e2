# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Rate limit types and configurations.

This module defines the rate limit strategies, the token bucket
configuration and the result types returned by admission checks.
"""

from dataclasses import dataclass
from enum import Enum

# Documented Finnhub limit for all plans.
FINNHUB_REQUESTS_PER_SECOND = 30

# Averaging window used by FIFTEEN_SECOND_WINDOW.
FINNHUB_WINDOW_SECONDS = 15


class RateLimitStrategy(Enum):
    """
    Rate limiting strategies supported by the admission controller.

    Strategies:
        * **PER_SECOND**: capacity and refill rate both equal the documented
          per-second limit. Allows a burst of one second's worth of requests.
        * **FIFTEEN_SECOND_WINDOW**: capacity of fifteen seconds' worth of
          requests, refilled at the per-second limit. Batch workloads can
          burst heavily and then throttle, with the same long-run average.
        * **CUSTOM**: explicit capacity and refill rate.
    """

    PER_SECOND = "per_second"
    FIFTEEN_SECOND_WINDOW = "fifteen_second_window"
    CUSTOM = "custom"


@dataclass(frozen=True)
class BucketConfig:
    """
    Token bucket parameters.

    Attributes:
        capacity: Maximum number of permits the bucket can hold
        refill_rate: Permits added per second
    """

    capacity: int
    refill_rate: float

    def __post_init__(self) -> None:
        if self.capacity < 1:
            raise ValueError("capacity must be at least 1")
        if self.refill_rate <= 0:
            raise ValueError("refill_rate must be positive")

    @classmethod
    def per_second(cls, limit: int = FINNHUB_REQUESTS_PER_SECOND) -> "BucketConfig":
        """Steady-state bucket: burst of one second, refill at the limit."""
        return cls(capacity=limit, refill_rate=float(limit))

    @classmethod
    def windowed(
        cls,
        limit: int = FINNHUB_REQUESTS_PER_SECOND,
        window_seconds: int = FINNHUB_WINDOW_SECONDS,
    ) -> "BucketConfig":
        """Windowed bucket: burst of ``window_seconds`` worth, same average rate."""
        return cls(capacity=limit * window_seconds, refill_rate=float(limit))

    @classmethod
    def for_strategy(
        cls,
        strategy: RateLimitStrategy,
        capacity: int | None = None,
        refill_rate: float | None = None,
    ) -> "BucketConfig":
        """Resolve a strategy into concrete bucket parameters."""
        if strategy is RateLimitStrategy.PER_SECOND:
            return cls.per_second()
        if strategy is RateLimitStrategy.FIFTEEN_SECOND_WINDOW:
            return cls.windowed()
        if capacity is None or refill_rate is None:
            raise ValueError("CUSTOM strategy requires capacity and refill_rate")
        return cls(capacity=capacity, refill_rate=refill_rate)


@dataclass
class BucketState:
    """
    Point-in-time view of a token bucket.

    Attributes:
        permits: Permits available after refill (fractional)
        capacity: Bucket capacity
        last_refill: Clock reading of the last refill
    """

    permits: float
    capacity: int
    last_refill: float


@dataclass
class AdmissionResult:
    """
    Result of a single admission attempt.

    Attributes:
        admitted: Whether a permit was granted
        wait_time: Seconds until the next permit accrues (0 when admitted)
        permits_remaining: Permits left after this attempt
    """

    admitted: bool
    wait_time: float = 0.0
    permits_remaining: float = 0.0


__all__ = [
    "FINNHUB_REQUESTS_PER_SECOND",
    "FINNHUB_WINDOW_SECONDS",
    "AdmissionResult",
    "BucketConfig",
    "BucketState",
    "RateLimitStrategy",
]
