# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Client Configuration for the Finnhub client

This module provides the immutable configuration shared by every call made
through a client instance: API origin, credential and its placement, and the
rate limit strategy.
"""

import os
from dataclasses import dataclass, field
from typing import Any

from .auth import AuthMethod
from .exceptions import ConfigurationError
from .types.rate_limit import BucketConfig, RateLimitStrategy

DEFAULT_BASE_URL = "https://finnhub.io/api/v1"
DEFAULT_WEBSOCKET_URL = "wss://ws.finnhub.io"
DEFAULT_TIMEOUT = 30.0
DEFAULT_RETRY_AFTER = 1.0
DEFAULT_USER_AGENT = "finnhub-client-python"

ENV_API_KEY = "FINNHUB_API_KEY"
ENV_BASE_URL = "FINNHUB_BASE_URL"
ENV_WEBSOCKET_URL = "FINNHUB_WEBSOCKET_URL"
ENV_TIMEOUT = "FINNHUB_TIMEOUT"
ENV_AUTH_METHOD = "FINNHUB_AUTH_METHOD"
ENV_RATE_LIMIT_STRATEGY = "FINNHUB_RATE_LIMIT_STRATEGY"


@dataclass(frozen=True)
class ClientConfig:
    """
    Configuration for a FinnhubClient.

    Fixed at construction; the rate limit strategy in particular cannot be
    changed per call.
    """

    # === Credentials ===

    api_key: str = field(repr=False)
    """API key. Never logged or included in repr."""

    auth_method: AuthMethod = AuthMethod.HEADER
    """Where the key is attached on each request."""

    # === Endpoints ===

    base_url: str = DEFAULT_BASE_URL
    """REST API origin including the version prefix."""

    websocket_url: str = DEFAULT_WEBSOCKET_URL
    """Streaming API origin."""

    timeout: float = DEFAULT_TIMEOUT
    """Per-request timeout in seconds."""

    user_agent: str = DEFAULT_USER_AGENT
    """User-Agent header sent with every request."""

    # === Rate Limiting ===

    rate_limit_strategy: RateLimitStrategy = RateLimitStrategy.PER_SECOND
    """Token bucket strategy for the admission controller."""

    capacity: int | None = None
    """Bucket capacity, required for the CUSTOM strategy."""

    refill_rate: float | None = None
    """Permits per second, required for the CUSTOM strategy."""

    default_retry_after: float = DEFAULT_RETRY_AFTER
    """Retry hint (seconds) used when a 429 response carries none."""

    # === Metrics ===

    metrics_enabled: bool = True
    """Record request metrics in the global collector."""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not isinstance(self.api_key, str) or not self.api_key.strip():
            raise ConfigurationError("api_key must be a non-empty string")
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")
        if self.default_retry_after < 0:
            raise ConfigurationError("default_retry_after must be non-negative")
        if not self.base_url:
            raise ConfigurationError("base_url must not be empty")
        if self.rate_limit_strategy is not RateLimitStrategy.CUSTOM and (
            self.capacity is not None or self.refill_rate is not None
        ):
            raise ConfigurationError(
                "capacity and refill_rate require the CUSTOM rate limit strategy, "
                f"got {self.rate_limit_strategy.value}"
            )
        try:
            self.bucket()
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    def bucket(self) -> BucketConfig:
        """Resolve the rate limit strategy into token bucket parameters."""
        return BucketConfig.for_strategy(
            self.rate_limit_strategy, self.capacity, self.refill_rate
        )

    @classmethod
    def from_env(cls, **overrides: Any) -> "ClientConfig":
        """
        Build a configuration from environment variables.

        Recognized variables: FINNHUB_API_KEY, FINNHUB_BASE_URL,
        FINNHUB_WEBSOCKET_URL, FINNHUB_TIMEOUT, FINNHUB_AUTH_METHOD
        (``header``/``query``) and FINNHUB_RATE_LIMIT_STRATEGY
        (``per_second``/``fifteen_second_window``). Keyword arguments take
        precedence over the environment.
        """
        values: dict[str, Any] = {
            "api_key": os.getenv(ENV_API_KEY, ""),
            "base_url": os.getenv(ENV_BASE_URL, DEFAULT_BASE_URL),
            "websocket_url": os.getenv(ENV_WEBSOCKET_URL, DEFAULT_WEBSOCKET_URL),
        }

        timeout = os.getenv(ENV_TIMEOUT)
        if timeout:
            try:
                values["timeout"] = float(timeout)
            except ValueError as e:
                raise ConfigurationError(
                    f"{ENV_TIMEOUT} must be a number, got {timeout!r}"
                ) from e

        auth_method = os.getenv(ENV_AUTH_METHOD)
        if auth_method:
            try:
                values["auth_method"] = AuthMethod(auth_method.lower())
            except ValueError as e:
                raise ConfigurationError(
                    f"Unknown auth method: {auth_method!r}"
                ) from e

        strategy = os.getenv(ENV_RATE_LIMIT_STRATEGY)
        if strategy:
            try:
                values["rate_limit_strategy"] = RateLimitStrategy(strategy.lower())
            except ValueError as e:
                raise ConfigurationError(
                    f"Unknown rate limit strategy: {strategy!r}"
                ) from e

        values.update(overrides)
        return cls(**values)


__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_RETRY_AFTER",
    "DEFAULT_TIMEOUT",
    "DEFAULT_WEBSOCKET_URL",
    "ClientConfig",
]
