# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
HTTP transport built on httpx.

The transport only moves bytes. It does not interpret status codes and does
not retry; httpx exceptions propagate to the client, which turns them into
TransportError.
"""

import logging
from typing import Any

import httpx

from .config import ClientConfig
from .protocols.transport import TransportProtocol, TransportResponse
from .types.request import PendingRequest

logger = logging.getLogger(__name__)


class HttpxTransport:
    """
    TransportProtocol implementation over ``httpx.AsyncClient``.

    GET parameters are sent as the query string; POST bodies as JSON.

    Args:
        base_url: API origin including the version prefix
        timeout: Per-request timeout in seconds
        user_agent: User-Agent header value
        client: Pre-built AsyncClient; takes precedence and is not closed
            by ``aclose`` unless ``owns_client`` is True
    """

    def __init__(
        self,
        base_url: str,
        timeout: float,
        user_agent: str,
        client: httpx.AsyncClient | None = None,
        owns_client: bool | None = None,
        **client_kwargs: Any,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        if client is None:
            client = httpx.AsyncClient(
                timeout=timeout,
                headers={"User-Agent": user_agent, "Accept": "application/json"},
                **client_kwargs,
            )
            owns_client = True if owns_client is None else owns_client
        self._client = client
        self._owns_client = bool(owns_client)

    @classmethod
    def from_config(
        cls, config: ClientConfig, **client_kwargs: Any
    ) -> "HttpxTransport":
        return cls(
            base_url=config.base_url,
            timeout=config.timeout,
            user_agent=config.user_agent,
            **client_kwargs,
        )

    def url_for(self, request: PendingRequest) -> str:
        return f"{self.base_url}{request.path}"

    async def send(self, request: PendingRequest) -> TransportResponse:
        """
        Send a prepared request.

        Raises:
            httpx.HTTPError: On connection, TLS, protocol or timeout failures
        """
        kwargs: dict[str, Any] = {
            "params": dict(request.query) or None,
            "headers": dict(request.headers) or None,
        }
        if request.body is not None:
            kwargs["json"] = request.body

        response = await self._client.request(
            request.method, self.url_for(request), **kwargs
        )
        return TransportResponse(
            status_code=response.status_code,
            headers={k.lower(): v for k, v in response.headers.items()},
            content=response.content,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
            logger.debug("Closed httpx transport")


__all__ = [
    "HttpxTransport",
    "TransportProtocol",
    "TransportResponse",
]
