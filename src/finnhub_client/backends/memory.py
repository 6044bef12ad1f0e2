# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
MemoryBucketBackend for the admission controller

This module provides the default in-process token bucket storage. Each
client owns its own backend, so budgets are never shared between client
instances.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from ..types.rate_limit import AdmissionResult, BucketConfig, BucketState
from .base import (
    BaseBucketBackend,
    HealthCheckResult,
    has_permit,
    refill,
    wait_for_permit,
)

logger = logging.getLogger(__name__)


@dataclass
class _TokenBucket:
    """Mutable permit counter for a single key."""

    permits: float
    last_refill: float


class MemoryBucketBackend(BaseBucketBackend):
    """
    An in-memory token bucket backend.

    Key Features:
    - Pure in-memory dict-based storage
    - Async-safe operations using a single asyncio.Lock
    - Injectable monotonic clock for deterministic tests
    - No external dependencies beyond Python stdlib

    Note:
        This backend is NOT suitable for sharing a quota between processes.
        Use RedisBucketBackend when several clients must share one API key.
    """

    def __init__(
        self,
        namespace: str = "finnhub_memory",
        clock: Callable[[], float] | None = None,
    ) -> None:
        """
        Initialize the in-memory backend.

        Args:
            namespace: Namespace for key isolation (for compatibility)
            clock: Monotonic clock returning seconds; defaults to time.monotonic
        """
        super().__init__(namespace)
        self._clock = clock or time.monotonic
        self._buckets: dict[str, _TokenBucket] = {}

        # Refill + decrement must be one critical section
        self._lock = asyncio.Lock()

        logger.debug(f"Initialized MemoryBucketBackend with namespace '{namespace}'")

    def _refilled_locked(self, key: str, bucket: BucketConfig) -> _TokenBucket:
        """
        Fetch the bucket for ``key`` and bring it up to date.

        IMPORTANT: Must be called while holding self._lock.
        """
        now = self._clock()
        state = self._buckets.get(key)
        if state is None:
            state = _TokenBucket(permits=float(bucket.capacity), last_refill=now)
            self._buckets[key] = state
            return state

        state.permits = refill(state.permits, state.last_refill, now, bucket)
        state.last_refill = max(state.last_refill, now)
        return state

    async def try_acquire(self, key: str, bucket: BucketConfig) -> AdmissionResult:
        """Atomically refill and take one permit if available."""
        async with self._lock:
            state = self._refilled_locked(key, bucket)
            if has_permit(state.permits):
                state.permits = max(0.0, state.permits - 1.0)
                return AdmissionResult(
                    admitted=True, wait_time=0.0, permits_remaining=state.permits
                )
            return AdmissionResult(
                admitted=False,
                wait_time=wait_for_permit(state.permits, bucket),
                permits_remaining=state.permits,
            )

    async def get_state(self, key: str, bucket: BucketConfig) -> BucketState:
        """Return the refilled state without consuming a permit."""
        async with self._lock:
            state = self._refilled_locked(key, bucket)
            return BucketState(
                permits=state.permits,
                capacity=bucket.capacity,
                last_refill=state.last_refill,
            )

    async def reset(self, key: str) -> None:
        async with self._lock:
            self._buckets.pop(key, None)

    async def clear(self) -> None:
        async with self._lock:
            self._buckets.clear()

    async def health_check(self) -> HealthCheckResult:
        return HealthCheckResult(
            healthy=True,
            backend_type="memory",
            namespace=self.namespace,
            metadata={"buckets": len(self._buckets)},
        )


__all__ = ["MemoryBucketBackend"]
