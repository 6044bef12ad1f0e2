# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Admission controller for outgoing requests.

Every request passes through AdmissionController.acquire() before it is sent.
The controller is a token bucket: permits accrue continuously at
``refill_rate`` per second up to ``capacity``, and each request spends one.

Key Properties:
- Refill + decrement happen atomically inside the backend
- Sleeping happens OUTSIDE any lock, so other callers keep making progress
- A caller cancelled while waiting holds no permit and leaves no trace
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from .backends.base import BaseBucketBackend
from .backends.memory import MemoryBucketBackend
from .config import ClientConfig
from .observability.collector import UnifiedMetricsCollector
from .observability.constants import (
    ADMISSION_WAIT_SECONDS,
    ADMISSIONS_TOTAL,
    AVAILABLE_PERMITS,
)
from .types.rate_limit import AdmissionResult, BucketConfig, BucketState

logger = logging.getLogger(__name__)

DEFAULT_BUCKET_KEY = "default"


class AdmissionController:
    """
    Token bucket admission control.

    Example:
        >>> controller = AdmissionController(BucketConfig.per_second(30))
        >>> waited = await controller.acquire()
    """

    def __init__(
        self,
        bucket: BucketConfig,
        backend: BaseBucketBackend | None = None,
        key: str = DEFAULT_BUCKET_KEY,
        metrics: UnifiedMetricsCollector | None = None,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        """
        Initialize the admission controller.

        Args:
            bucket: Capacity and refill rate
            backend: Bucket storage; a private MemoryBucketBackend by default
            key: Bucket key within the backend
            metrics: Optional metrics collector
            sleep: Coroutine used to wait for permits; asyncio.sleep by default
        """
        self.bucket = bucket
        self.backend = backend if backend is not None else MemoryBucketBackend()
        self.key = key
        self._metrics = metrics
        self._sleep = sleep or asyncio.sleep

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        backend: BaseBucketBackend | None = None,
        metrics: UnifiedMetricsCollector | None = None,
    ) -> "AdmissionController":
        """Build a controller for the strategy selected in ``config``."""
        return cls(config.bucket(), backend=backend, metrics=metrics)

    async def acquire(self) -> float:
        """
        Wait until a permit is available and take it.

        Returns:
            Total seconds spent suspended (0.0 when admitted immediately)

        Raises:
            asyncio.CancelledError: If cancelled while waiting; no permit is held
            BackendError: If the bucket storage fails
        """
        waited = 0.0
        while True:
            result = await self.backend.try_acquire(self.key, self.bucket)
            if result.admitted:
                self._record(result, waited)
                return waited

            # Sleep outside the backend lock, then re-check
            logger.debug(
                f"Admission for bucket '{self.key}' delayed {result.wait_time:.3f}s "
                f"({result.permits_remaining:.3f} permits)"
            )
            await self._sleep(result.wait_time)
            waited += result.wait_time

    async def try_acquire(self) -> AdmissionResult:
        """Take a permit if one is available, without waiting."""
        result = await self.backend.try_acquire(self.key, self.bucket)
        if result.admitted:
            self._record(result, 0.0)
        return result

    async def available_permits(self) -> float:
        """Current refilled permit count; does not consume."""
        state = await self.backend.get_state(self.key, self.bucket)
        return state.permits

    async def snapshot(self) -> BucketState:
        return await self.backend.get_state(self.key, self.bucket)

    async def reset(self) -> None:
        """Refill the bucket to capacity."""
        await self.backend.reset(self.key)

    async def close(self) -> None:
        await self.backend.close()

    def _record(self, result: AdmissionResult, waited: float) -> None:
        if self._metrics is None:
            return
        labels = {"bucket": self.key}
        self._metrics.inc_counter(ADMISSIONS_TOTAL, labels=labels)
        self._metrics.observe_histogram(ADMISSION_WAIT_SECONDS, waited, labels=labels)
        self._metrics.set_gauge(
            AVAILABLE_PERMITS, result.permits_remaining, labels=labels
        )

    def __repr__(self) -> str:
        return (
            f"AdmissionController(capacity={self.bucket.capacity}, "
            f"refill_rate={self.bucket.refill_rate}, key={self.key!r})"
        )


__all__ = ["DEFAULT_BUCKET_KEY", "AdmissionController"]
