# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Finnhub Client - typed async client for the Finnhub financial data API.

Every call funnels through one dispatch pipeline: a token bucket admission
controller keeps the client under the documented rate limit, the API key is
attached as a header or query parameter, and responses are decoded into
pydantic models or raised as a closed set of typed errors.

Key Features:
    - Token bucket rate limiting (per-second or 15-second window strategies)
    - Optional Redis backend to share one quota across processes
    - Soft decoding: missing optional fields become None
    - Data-driven endpoint table; one entry per remote operation
    - Minimal WebSocket streaming for trades, news and press releases
    - Prometheus metrics through a unified collector

Quick Start:
    >>> from finnhub_client import FinnhubClient
    >>>
    >>> async with FinnhubClient(api_key="...") as client:
    ...     quote = await client.call("quote", symbol="AAPL")
    ...     print(quote.current_price)

Main Exports:
    - FinnhubClient, create_client: The client
    - ClientConfig, AuthMethod, RateLimitStrategy: Configuration
    - AdmissionController, CredentialInjector, ResponseNormalizer: Pipeline stages
    - NormalizedError and subclasses: Per-call failures
    - WebSocketClient: Streaming

Note: RedisBucketBackend requires the 'redis' extra. Install with:
    pip install finnhub-client[redis]

Version: 0.1.0
"""

__version__ = "0.1.0"

from typing import TYPE_CHECKING

from .admission import AdmissionController
from .auth import AuthMethod, CredentialInjector
from .backends import BaseBucketBackend, HealthCheckResult, MemoryBucketBackend
from .client import FinnhubClient, create_client
from .config import ClientConfig
from .endpoints import OPERATIONS, Operation, build_request
from .exceptions import (
    ApiError,
    BackendError,
    ConfigurationError,
    FinnhubError,
    InvalidParameterError,
    MalformedResponseError,
    NormalizedError,
    NotFoundError,
    RateLimitedError,
    TransportError,
    UnauthorizedError,
    WebSocketError,
)
from .normalizer import ResponseNormalizer
from .protocols import TransportProtocol, TransportResponse
from .transport import HttpxTransport
from .types import (
    AdmissionResult,
    BucketConfig,
    BucketState,
    PendingRequest,
    RateLimitStrategy,
)
from .websocket import WebSocketClient, WebSocketStream

if TYPE_CHECKING:
    from .backends.redis import RedisBucketBackend


def __getattr__(name: str) -> type:
    """Lazy import for the optional redis backend."""
    if name == "RedisBucketBackend":
        try:
            from .backends.redis import RedisBucketBackend
        except ImportError as e:  # pragma: no cover
            raise ImportError(  # pragma: no cover
                "'RedisBucketBackend' requires the 'redis' extra. "
                "Install with: pip install finnhub-client[redis]"
            ) from e
        return RedisBucketBackend
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "OPERATIONS",
    "AdmissionController",
    "AdmissionResult",
    "ApiError",
    "AuthMethod",
    "BackendError",
    "BaseBucketBackend",
    "BucketConfig",
    "BucketState",
    "ClientConfig",
    "ConfigurationError",
    "CredentialInjector",
    "FinnhubClient",
    "FinnhubError",
    "HealthCheckResult",
    "HttpxTransport",
    "InvalidParameterError",
    "MalformedResponseError",
    "MemoryBucketBackend",
    "NormalizedError",
    "NotFoundError",
    "Operation",
    "PendingRequest",
    "RateLimitStrategy",
    "RateLimitedError",
    "RedisBucketBackend",
    "ResponseNormalizer",
    "TransportError",
    "TransportProtocol",
    "TransportResponse",
    "UnauthorizedError",
    "WebSocketClient",
    "WebSocketError",
    "WebSocketStream",
    "__version__",
    "build_request",
    "create_client",
]
