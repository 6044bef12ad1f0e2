# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Protocol for HTTP transports."""

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from ..types.request import PendingRequest


@dataclass(frozen=True)
class TransportResponse:
    """
    A completed HTTP exchange.

    Attributes:
        status_code: HTTP status code
        headers: Response headers with lower-cased names
        content: Raw response body
    """

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    content: bytes = b""

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower())


@runtime_checkable
class TransportProtocol(Protocol):
    """
    Minimal protocol for sending a prepared request.

    The client only needs to send one request and get back status, headers
    and body. Anything that raises instead of returning a response is
    treated as a transport failure.
    """

    async def send(self, request: PendingRequest) -> TransportResponse:
        """Send ``request`` and return the raw response."""
        ...

    async def aclose(self) -> None:
        """Release connections."""
        ...
