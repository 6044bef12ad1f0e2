# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Response normalization.

Every completed exchange with the API ends here. A 2xx response is decoded
into the caller's shape; anything else becomes one of the NormalizedError
subclasses. Decoding uses pydantic so that optional fields missing from the
payload become ``None`` instead of failing the whole call.
"""

import asyncio
import json
import logging
import math
import re
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from .config import DEFAULT_RETRY_AFTER
from .exceptions import (
    ApiError,
    MalformedResponseError,
    NotFoundError,
    RateLimitedError,
    TransportError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

# Units: ms (milliseconds), s (seconds), m (minutes), h (hours), d (days)
_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h|d)")
_DURATION_FULL = re.compile(r"(?:\d+(?:\.\d+)?(?:ms|s|m|h|d))+")
_UNIT_SECONDS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0, "d": 86400.0}

# Body fields that may carry a retry hint on 429 responses.
RETRY_AFTER_FIELDS = ("retryAfter", "retry_after")

# Body fields that may carry an error message on non-2xx responses.
MESSAGE_FIELDS = ("error", "message", "msg")

MAX_MESSAGE_LENGTH = 200


def parse_duration_string(value: str) -> float | None:
    """
    Parse a duration string into seconds.

    Handles formats like '500ms', '2s', '1m30s'.
    Returns None if parsing fails.
    """
    value = value.strip()
    if not _DURATION_FULL.fullmatch(value):
        return None
    return sum(
        float(amount) * _UNIT_SECONDS[unit]
        for amount, unit in _DURATION_PART.findall(value)
    )


def _finite_seconds(seconds: float) -> float | None:
    return seconds if math.isfinite(seconds) and seconds >= 0 else None


def parse_retry_after(value: Any, now: datetime | None = None) -> float | None:
    """
    Parse a retry hint into seconds.

    Accepts delta-seconds (``"5"``, ``5``, ``"1.5"``), an HTTP-date, or a
    duration string (``"2s"``, ``"500ms"``). Dates in the past yield 0.
    Returns None for anything unparseable, negative or non-finite.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return _finite_seconds(float(value))
        except OverflowError:
            return None
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    try:
        seconds = float(text)
    except ValueError:
        pass
    else:
        return _finite_seconds(seconds)

    try:
        when = parsedate_to_datetime(text)
    except (TypeError, ValueError):
        when = None
    if when is not None:
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        reference = now or datetime.now(timezone.utc)
        return max(0.0, (when - reference).total_seconds())

    duration = parse_duration_string(text)
    return _finite_seconds(duration) if duration is not None else None


def _lower_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    return {k.lower(): v for k, v in (headers or {}).items()}


def _parse_json_object(body: bytes) -> Any:
    """Best-effort JSON parse used only for error bodies."""
    if not body:
        return None
    try:
        return json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return None


class ResponseNormalizer:
    """
    Maps (status, headers, body) to a decoded value or a NormalizedError.

    Status mapping:
        - 2xx: decode into ``shape``; failure raises MalformedResponseError
        - 401, 403: UnauthorizedError regardless of body
        - 404: NotFoundError
        - 429: RateLimitedError with a retry hint
        - anything else: ApiError

    Example:
        >>> normalizer = ResponseNormalizer()
        >>> quote = normalizer.interpret(200, {}, b'{"c": 1.0}', Quote)
    """

    def __init__(self, default_retry_after: float = DEFAULT_RETRY_AFTER) -> None:
        if default_retry_after < 0:
            raise ValueError("default_retry_after must be non-negative")
        self.default_retry_after = default_retry_after
        self._adapters: dict[Any, TypeAdapter[Any]] = {}

    def _adapter(self, shape: Any) -> TypeAdapter[Any]:
        try:
            adapter = self._adapters.get(shape)
        except TypeError:
            # Unhashable shape, build a fresh adapter every time
            return TypeAdapter(shape)
        if adapter is None:
            adapter = TypeAdapter(shape)
            self._adapters[shape] = adapter
        return adapter

    def interpret(
        self,
        status_code: int,
        headers: Mapping[str, str] | None,
        body: bytes,
        shape: Any = Any,
    ) -> Any:
        """
        Interpret a completed HTTP exchange.

        Returns:
            The payload decoded into ``shape``

        Raises:
            NormalizedError: One of the closed set of call failures
        """
        if 200 <= status_code < 300:
            return self.decode(body, shape, status_code=status_code)

        lowered = _lower_headers(headers)
        if status_code in (401, 403):
            raise UnauthorizedError(
                "Invalid API key or insufficient permissions",
                status_code=status_code,
            )
        if status_code == 404:
            raise NotFoundError(
                self.extract_message(status_code, body), status_code=status_code
            )
        if status_code == 429:
            retry_after = self.retry_after_from(lowered, body)
            raise RateLimitedError(
                f"Rate limit exceeded: retry after {retry_after:g} seconds",
                retry_after=retry_after,
            )
        raise ApiError(status_code, self.extract_message(status_code, body))

    def decode(self, body: bytes, shape: Any, status_code: int | None = None) -> Any:
        """Decode a successful payload into ``shape``."""
        adapter = self._adapter(shape)

        if not body or not body.strip():
            try:
                return adapter.validate_python(None)
            except ValidationError as e:
                raise MalformedResponseError(
                    "Empty response body",
                    diagnostic="expected a JSON document, got an empty body",
                    status_code=status_code,
                ) from e

        try:
            return adapter.validate_json(body)
        except ValidationError as e:
            field, diagnostic = self._describe(e)
            logger.debug(f"Malformed response (status {status_code}): {diagnostic}")
            raise MalformedResponseError(
                f"Response did not match the expected shape: {diagnostic}",
                diagnostic=diagnostic,
                field=field,
                status_code=status_code,
            ) from e

    @staticmethod
    def _describe(error: ValidationError) -> tuple[str | None, str]:
        """Return (field path, diagnostic) for the first validation error."""
        details = error.errors(include_url=False)
        if not details:
            return None, str(error)

        first = details[0]
        if first["type"] == "json_invalid":
            reason = first.get("ctx", {}).get("error", first["msg"])
            return None, f"invalid JSON: {reason}"

        field = ".".join(str(part) for part in first["loc"]) or None
        fragment = repr(first.get("input"))
        if len(fragment) > 80:
            fragment = fragment[:77] + "..."
        diagnostic = f"{field or '<root>'}: {first['msg']} (input: {fragment})"
        if len(details) > 1:
            diagnostic += f" and {len(details) - 1} more error(s)"
        return field, diagnostic

    def retry_after_from(self, headers: Mapping[str, str], body: bytes) -> float:
        """
        Find the retry hint of a 429 response.

        Order: ``Retry-After`` header, then ``retryAfter``/``retry_after``
        body fields, then the configured default.
        """
        parsed = parse_retry_after(_lower_headers(headers).get("retry-after"))
        if parsed is not None:
            return parsed

        payload = _parse_json_object(body)
        if isinstance(payload, dict):
            for name in RETRY_AFTER_FIELDS:
                parsed = parse_retry_after(payload.get(name))
                if parsed is not None:
                    return parsed

        return self.default_retry_after

    @staticmethod
    def extract_message(status_code: int, body: bytes) -> str:
        """Best-effort human-readable message from an error body."""
        payload = _parse_json_object(body)
        if isinstance(payload, dict):
            for name in MESSAGE_FIELDS:
                value = payload.get(name)
                if isinstance(value, str) and value.strip():
                    return value.strip()

        text = body.decode("utf-8", errors="replace").strip() if body else ""
        if text:
            if len(text) > MAX_MESSAGE_LENGTH:
                text = text[: MAX_MESSAGE_LENGTH - 3] + "..."
            return text
        return f"HTTP error {status_code}"

    @staticmethod
    def from_transport_error(
        exc: BaseException,
        scrub: Callable[[str], str] | None = None,
    ) -> TransportError:
        """
        Wrap an exception raised by the HTTP stack.

        Args:
            exc: The original exception
            scrub: Optional function removing secrets from the message
        """
        is_timeout = isinstance(
            exc, (httpx.TimeoutException, TimeoutError, asyncio.TimeoutError)
        )
        detail = str(exc) or type(exc).__name__
        if scrub is not None:
            detail = scrub(detail)
        prefix = "Request timed out" if is_timeout else "Request failed"
        return TransportError(f"{prefix}: {detail}", cause=exc, is_timeout=is_timeout)


__all__ = [
    "MESSAGE_FIELDS",
    "RETRY_AFTER_FIELDS",
    "ResponseNormalizer",
    "parse_duration_string",
    "parse_retry_after",
]
