# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Token bucket storage backends.

The Redis backend is imported lazily so that the ``redis`` extra stays
optional for clients that only need the in-memory bucket.
"""

from typing import TYPE_CHECKING, Any

from .base import BaseBucketBackend, HealthCheckResult
from .memory import MemoryBucketBackend

if TYPE_CHECKING:
    from .redis import RedisBucketBackend


def __getattr__(name: str) -> Any:
    """Lazy import for the optional redis backend."""
    if name == "RedisBucketBackend":
        try:
            from .redis import RedisBucketBackend
        except ImportError as e:  # pragma: no cover
            raise ImportError(  # pragma: no cover
                "'RedisBucketBackend' requires the 'redis' extra. "
                "Install with: pip install finnhub-client[redis]"
            ) from e
        return RedisBucketBackend
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "BaseBucketBackend",
    "HealthCheckResult",
    "MemoryBucketBackend",
    "RedisBucketBackend",
]
