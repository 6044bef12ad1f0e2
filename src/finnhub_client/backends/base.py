# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Base Backend for token bucket storage

This module provides the BaseBucketBackend abstract class that defines the
interface for storing admission controller state.

The only mutable state shared between concurrent calls is the bucket's permit
count and its last refill timestamp. Backends must perform refill and
decrement as one atomic unit so that two concurrent admissions never both
spend a permit from the same pre-refill snapshot.
"""

import abc
import logging
from dataclasses import dataclass
from typing import Any

from ..types.rate_limit import AdmissionResult, BucketConfig, BucketState

logger = logging.getLogger(__name__)


@dataclass
class HealthCheckResult:
    """
    Structured health check result for backend monitoring.

    Attributes:
        healthy: Whether the backend is operational
        backend_type: Type of backend (e.g., 'redis', 'memory')
        namespace: Backend namespace
        error: Error message if unhealthy
        metadata: Additional backend-specific information
    """

    healthy: bool
    backend_type: str
    namespace: str
    error: str | None = None
    metadata: dict[str, Any] | None = None


def refill(
    permits: float,
    last_refill: float,
    now: float,
    bucket: BucketConfig,
) -> float:
    """
    Apply elapsed-time refill to a permit count.

    Adds ``elapsed * refill_rate`` permits, saturating at capacity. A clock
    reading earlier than ``last_refill`` adds nothing.
    """
    elapsed = max(0.0, now - last_refill)
    return min(float(bucket.capacity), permits + elapsed * bucket.refill_rate)


# Refill arithmetic can land a hair below a whole permit.
PERMIT_EPSILON = 1e-9


def has_permit(permits: float) -> bool:
    return permits >= 1.0 - PERMIT_EPSILON


def wait_for_permit(permits: float, bucket: BucketConfig) -> float:
    """Seconds until at least one whole permit has accrued."""
    if has_permit(permits):
        return 0.0
    return (1.0 - permits) / bucket.refill_rate


class BaseBucketBackend(abc.ABC):
    """
    Abstract storage for token buckets.

    A single backend can hold several buckets addressed by key. The in-memory
    backend scopes buckets to one client instance; the Redis backend lets
    several clients or processes share one remote quota.
    """

    def __init__(self, namespace: str = "finnhub"):
        """
        Initialize the backend with a namespace for isolation.

        Args:
            namespace: Namespace for isolating keys across deployments
        """
        self.namespace = namespace

    @abc.abstractmethod
    async def try_acquire(self, key: str, bucket: BucketConfig) -> AdmissionResult:
        """
        Atomically refill the bucket and take one permit if available.

        Never blocks waiting for capacity. When no permit is available the
        state is still refilled and the result carries the time until the
        next permit accrues.

        Args:
            key: Bucket identifier
            bucket: Capacity and refill rate; a missing bucket starts full

        Returns:
            AdmissionResult describing the outcome
        """
        pass

    @abc.abstractmethod
    async def get_state(self, key: str, bucket: BucketConfig) -> BucketState:
        """
        Return the refilled bucket state without consuming a permit.

        Args:
            key: Bucket identifier
            bucket: Capacity and refill rate; a missing bucket reads as full
        """
        pass

    @abc.abstractmethod
    async def reset(self, key: str) -> None:
        """Forget a bucket so that it starts full on next use."""
        pass

    @abc.abstractmethod
    async def clear(self) -> None:
        """Forget all buckets held by this backend."""
        pass

    @abc.abstractmethod
    async def health_check(self) -> HealthCheckResult:
        """Report whether the backend can serve admissions."""
        pass

    async def close(self) -> None:  # noqa: B027
        """Release backend resources. The default implementation does nothing."""
        pass


__all__ = [
    "PERMIT_EPSILON",
    "BaseBucketBackend",
    "HealthCheckResult",
    "has_permit",
    "refill",
    "wait_for_permit",
]
