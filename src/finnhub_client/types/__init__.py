# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Type definitions and constants."""

from .rate_limit import (
    FINNHUB_REQUESTS_PER_SECOND,
    FINNHUB_WINDOW_SECONDS,
    AdmissionResult,
    BucketConfig,
    BucketState,
    RateLimitStrategy,
)
from .request import PendingRequest, format_query_value

__all__ = [
    "FINNHUB_REQUESTS_PER_SECOND",
    "FINNHUB_WINDOW_SECONDS",
    # Rate limit types
    "AdmissionResult",
    "BucketConfig",
    "BucketState",
    # Request types
    "PendingRequest",
    "RateLimitStrategy",
    "format_query_value",
]
