# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Request types for the dispatch pipeline.

This module defines the in-flight description of a single API call. A
PendingRequest is built by the endpoint layer, passed once through
admission, credential injection and transport, and then discarded.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any

# Query/header names that carry credentials and must never be logged.
SENSITIVE_QUERY_PARAMS = frozenset({"token"})
SENSITIVE_HEADERS = frozenset({"x-finnhub-token", "authorization"})

REDACTED = "***"


def format_query_value(value: Any) -> str:
    """
    Render a parameter value the way the API expects it in a query string.

    Booleans become ``true``/``false``, dates and datetimes use ISO format
    (date part only for dates), enums use their value.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


@dataclass(frozen=True, repr=False)
class PendingRequest:
    """
    An outgoing API call before it reaches the transport.

    Instances are immutable; helpers such as ``with_query`` return modified
    copies so that a request can be safely cloned and re-used in tests.

    Attributes:
        method: HTTP method (``GET`` or ``POST``)
        path: Endpoint path relative to the API base URL, e.g. ``/quote``
        query: Query parameters, already rendered to strings
        headers: Extra request headers
        body: JSON-serializable body for POST requests
        operation_id: Identifier of the operation in the endpoint table, used
            for logging and metrics only
    """

    method: str
    path: str
    query: Mapping[str, str] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any | None = None
    operation_id: str | None = None

    @classmethod
    def build(
        cls,
        method: str,
        path: str,
        query: Mapping[str, Any] | None = None,
        body: Any | None = None,
        operation_id: str | None = None,
    ) -> "PendingRequest":
        """Create a request, dropping ``None`` query values and rendering the rest."""
        rendered = {
            key: format_query_value(value)
            for key, value in (query or {}).items()
            if value is not None
        }
        if not path.startswith("/"):
            path = f"/{path}"
        return cls(
            method=method.upper(),
            path=path,
            query=rendered,
            body=body,
            operation_id=operation_id,
        )

    def with_query(self, **params: str) -> "PendingRequest":
        """Return a copy with the given query parameters added or replaced."""
        return replace(self, query={**self.query, **params})

    def without_query(self, *names: str) -> "PendingRequest":
        """Return a copy with the given query parameters removed."""
        return replace(
            self, query={k: v for k, v in self.query.items() if k not in names}
        )

    def with_headers(self, **headers: str) -> "PendingRequest":
        """Return a copy with the given headers added or replaced."""
        return replace(self, headers={**self.headers, **headers})

    def without_headers(self, *names: str) -> "PendingRequest":
        """Return a copy with the given headers removed (case-insensitive)."""
        lowered = {n.lower() for n in names}
        return replace(
            self,
            headers={k: v for k, v in self.headers.items() if k.lower() not in lowered},
        )

    def __repr__(self) -> str:
        return f"PendingRequest({self.redacted()!r})"

    def redacted(self) -> dict[str, Any]:
        """Loggable representation with credential values masked."""
        return {
            "method": self.method,
            "path": self.path,
            "query": {
                k: (REDACTED if k in SENSITIVE_QUERY_PARAMS else v)
                for k, v in self.query.items()
            },
            "headers": {
                k: (REDACTED if k.lower() in SENSITIVE_HEADERS else v)
                for k, v in self.headers.items()
            },
            "operation_id": self.operation_id,
        }


__all__ = [
    "REDACTED",
    "SENSITIVE_HEADERS",
    "SENSITIVE_QUERY_PARAMS",
    "PendingRequest",
    "format_query_value",
]
