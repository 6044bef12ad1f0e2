# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Exception classes for the Finnhub client.

This module defines the exception hierarchy used throughout the library.
All exceptions inherit from FinnhubError, making it easy to catch every
client-originated failure with a single except clause.

Errors raised by a completed (or failed) API call form a closed set rooted at
NormalizedError:

    - TransportError: the request never produced an HTTP response
    - RateLimitedError: the API answered 429
    - UnauthorizedError: the API answered 401 or 403
    - NotFoundError: the API answered 404
    - MalformedResponseError: the API answered 2xx but the payload did not
      match the expected shape
    - ApiError: any other non-2xx answer

The client never retries. Every NormalizedError is a terminal result handed
back to the caller, who decides what to do next.
"""

from __future__ import annotations

from typing import Any, ClassVar

# Suggested pause after a timed-out request, in seconds.
TIMEOUT_RETRY_AFTER = 5.0


class FinnhubError(Exception):
    """Base exception for all Finnhub client errors.

    Example:
        try:
            quote = await client.call("quote", symbol="AAPL")
        except FinnhubError as e:
            logger.error(f"Finnhub call failed: {e}")
    """

    pass


class NormalizedError(FinnhubError):
    """Base class for the closed set of per-call failures.

    Attributes:
        kind: Stable identifier for the error category. Safe to use as a
            metrics label or in structured logs.
        status_code: HTTP status code, or None when no response was received.
    """

    kind: ClassVar[str] = "error"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def is_retryable(self) -> bool:
        """Whether repeating the same call later may succeed."""
        return False

    @property
    def retry_after(self) -> float | None:
        """Suggested delay in seconds before repeating the call, if known."""
        return None

    def __repr__(self) -> str:  # pragma: no cover - trivial helper
        return (
            f"{self.__class__.__name__}(message={self.message!r}, "
            f"status_code={self.status_code!r})"
        )


class TransportError(NormalizedError):
    """Raised when the request failed before an HTTP response was received.

    Covers DNS failures, TLS errors, connection resets and timeouts. The
    underlying exception is available as ``cause`` and as ``__cause__``.

    Attributes:
        cause: The exception raised by the HTTP stack.
        is_timeout: True when the failure was a timeout.
    """

    kind = "transport"

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        is_timeout: bool = False,
    ) -> None:
        super().__init__(message)
        self.cause = cause
        self.is_timeout = is_timeout

    @property
    def is_retryable(self) -> bool:
        return True

    @property
    def retry_after(self) -> float | None:
        return TIMEOUT_RETRY_AFTER if self.is_timeout else None


class RateLimitedError(NormalizedError):
    """Raised when the API rejects a call with HTTP 429.

    The admission controller keeps the client under the documented rate, so
    this usually means several clients share one API key or the plan limit
    is lower than configured.

    Attributes:
        retry_after: Seconds to wait before retrying, parsed from the
            response or the configured default when the API supplied none.

    Example:
        try:
            quote = await client.call("quote", symbol="AAPL")
        except RateLimitedError as e:
            await asyncio.sleep(e.retry_after)
    """

    kind = "rate_limited"

    def __init__(self, message: str, retry_after: float) -> None:
        super().__init__(message, status_code=429)
        self._retry_after = retry_after

    @property
    def retry_after(self) -> float:
        return self._retry_after

    @property
    def is_retryable(self) -> bool:
        return True


class UnauthorizedError(NormalizedError):
    """Raised on HTTP 401 or 403: the API key is invalid or lacks access."""

    kind = "unauthorized"


class NotFoundError(NormalizedError):
    """Raised on HTTP 404: the resource or endpoint does not exist."""

    kind = "not_found"


class MalformedResponseError(NormalizedError):
    """Raised when a 2xx payload cannot be decoded into the expected shape.

    Attributes:
        diagnostic: Human-readable description of what did not match,
            including the offending field path and value where available.
        field: Dotted path of the first offending field, or None for
            payload-level problems such as invalid JSON.
    """

    kind = "malformed_response"

    def __init__(
        self,
        message: str,
        diagnostic: str,
        field: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.diagnostic = diagnostic
        self.field = field


class ApiError(NormalizedError):
    """Raised for any other non-2xx response.

    Attributes:
        status_code: HTTP status code returned by the API.
        api_message: Message extracted from the response body, best effort.
    """

    kind = "api_error"

    def __init__(self, status_code: int, api_message: str) -> None:
        super().__init__(
            f"API error (status {status_code}): {api_message}",
            status_code=status_code,
        )
        self.api_message = api_message

    @property
    def is_retryable(self) -> bool:
        return self.status_code is not None and self.status_code >= 500


class ConfigurationError(FinnhubError):
    """Raised when client configuration is invalid.

    Configuration errors are detected at construction time, never per call.

    Common causes include:
    - An empty API key
    - Non-positive timeout, capacity or refill rate
    - An unknown authentication method or rate limit strategy name
    """

    pass


class InvalidParameterError(FinnhubError):
    """Raised when an operation is called with unknown or missing parameters.

    Attributes:
        operation_id: The operation being built, if known.
        parameter: The offending parameter name, if known.
    """

    def __init__(
        self,
        message: str,
        operation_id: str | None = None,
        parameter: str | None = None,
    ) -> None:
        super().__init__(message)
        self.operation_id = operation_id
        self.parameter = parameter


class BackendError(FinnhubError):
    """Raised when a rate limit storage backend operation fails.

    Only shared backends (e.g. Redis) can raise this. The in-memory backend
    never fails.
    """

    pass


class WebSocketError(FinnhubError):
    """Raised for WebSocket connection and framing errors.

    Attributes:
        details: Extra context such as the undecodable frame.
    """

    def __init__(self, message: str, details: Any | None = None) -> None:
        super().__init__(message)
        self.details = details


__all__ = [
    "TIMEOUT_RETRY_AFTER",
    "ApiError",
    "BackendError",
    "ConfigurationError",
    "FinnhubError",
    "InvalidParameterError",
    "MalformedResponseError",
    "NormalizedError",
    "NotFoundError",
    "RateLimitedError",
    "TransportError",
    "UnauthorizedError",
    "WebSocketError",
]
