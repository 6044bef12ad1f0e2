# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Streaming API client built on the ``websockets`` library.

One connection per credential. The client sends subscribe/unsubscribe
control frames and yields typed push messages (trades, news, press releases,
pings and errors).

Known limitation: there is no reconnection and no heartbeat. When the
connection drops, iteration ends (clean close) or raises WebSocketError;
reconnecting and re-subscribing is up to the caller.
"""

import logging
from collections.abc import AsyncIterator
from typing import Any

import websockets
from pydantic import ValidationError
from typing_extensions import Self
from websockets.exceptions import ConnectionClosedOK, WebSocketException

from .auth import CredentialInjector
from .config import DEFAULT_WEBSOCKET_URL
from .exceptions import WebSocketError
from .models.streaming import STREAM_MESSAGE_ADAPTER, ControlFrame, StreamMessage
from .observability.collector import UnifiedMetricsCollector
from .observability.constants import WEBSOCKET_MESSAGES_TOTAL

logger = logging.getLogger(__name__)


class WebSocketStream:
    """
    An open streaming connection.

    Usable as an async context manager and as an async iterator of
    StreamMessage values.

    Example:
        >>> async with await client.websocket().connect() as stream:
        ...     await stream.subscribe("AAPL")
        ...     async for message in stream:
        ...         if message.type == "trade":
        ...             print(message.data)
    """

    def __init__(
        self,
        connection: Any,
        metrics: UnifiedMetricsCollector | None = None,
    ) -> None:
        self._connection = connection
        self._metrics = metrics
        self._subscriptions: dict[str, set[str]] = {
            "trade": set(),
            "news": set(),
            "press-release": set(),
        }

    @property
    def subscriptions(self) -> dict[str, frozenset[str]]:
        """Symbols currently subscribed, per message type."""
        return {k: frozenset(v) for k, v in self._subscriptions.items()}

    # === Control frames ===

    async def _send_control(self, frame_type: str, symbol: str) -> None:
        frame = ControlFrame.model_validate({"type": frame_type, "symbol": symbol})
        try:
            await self._connection.send(frame.model_dump_json())
        except WebSocketException as e:
            raise WebSocketError(f"Failed to send '{frame_type}' frame: {e}") from e
        logger.debug(f"Sent {frame_type} for {symbol}")

    async def subscribe(self, symbol: str) -> None:
        """Subscribe to trades for ``symbol``."""
        await self._send_control("subscribe", symbol)
        self._subscriptions["trade"].add(symbol)

    async def unsubscribe(self, symbol: str) -> None:
        await self._send_control("unsubscribe", symbol)
        self._subscriptions["trade"].discard(symbol)

    async def subscribe_news(self, symbol: str) -> None:
        await self._send_control("subscribe-news", symbol)
        self._subscriptions["news"].add(symbol)

    async def unsubscribe_news(self, symbol: str) -> None:
        await self._send_control("unsubscribe-news", symbol)
        self._subscriptions["news"].discard(symbol)

    async def subscribe_press_releases(self, symbol: str) -> None:
        await self._send_control("subscribe-pr", symbol)
        self._subscriptions["press-release"].add(symbol)

    async def unsubscribe_press_releases(self, symbol: str) -> None:
        await self._send_control("unsubscribe-pr", symbol)
        self._subscriptions["press-release"].discard(symbol)

    # === Receiving ===

    @staticmethod
    def parse(raw: str | bytes) -> StreamMessage:
        """
        Parse one text frame.

        Raises:
            WebSocketError: If the frame is not a known message type
        """
        try:
            return STREAM_MESSAGE_ADAPTER.validate_json(raw)
        except ValidationError as e:
            raise WebSocketError("Unrecognized stream message", details=raw) from e

    async def next(self) -> StreamMessage | None:
        """
        Wait for the next push message.

        Returns:
            The parsed message, or None once the server closed cleanly

        Raises:
            WebSocketError: On abnormal closure or an unrecognized frame
        """
        try:
            raw = await self._connection.recv()
        except ConnectionClosedOK:
            return None
        except WebSocketException as e:
            raise WebSocketError(f"WebSocket connection failed: {e}") from e

        message = self.parse(raw)
        if self._metrics is not None:
            self._metrics.inc_counter(
                WEBSOCKET_MESSAGES_TOTAL, labels={"message_type": message.type}
            )
        return message

    def __aiter__(self) -> AsyncIterator[StreamMessage]:
        return self

    async def __anext__(self) -> StreamMessage:
        message = await self.next()
        if message is None:
            raise StopAsyncIteration
        return message

    async def close(self) -> None:
        await self._connection.close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


class WebSocketClient:
    """
    Factory for streaming connections.

    The stream only accepts the credential as a ``token`` query parameter,
    regardless of the REST client's auth method.
    """

    def __init__(
        self,
        api_key: str,
        url: str = DEFAULT_WEBSOCKET_URL,
        metrics: UnifiedMetricsCollector | None = None,
        **connect_kwargs: Any,
    ) -> None:
        self._injector = CredentialInjector(api_key)
        self.url = url
        self._metrics = metrics
        self._connect_kwargs = connect_kwargs

    async def connect(self) -> WebSocketStream:
        """
        Open a connection.

        Raises:
            WebSocketError: If the handshake fails
        """
        try:
            connection = await websockets.connect(
                self._injector.websocket_url(self.url), **self._connect_kwargs
            )
        except (OSError, WebSocketException) as e:
            # The handshake URL carries the token; do not chain the raw error
            raise WebSocketError(
                f"Failed to connect to {self.url}: "
                f"{type(e).__name__}: {self._injector.scrub(str(e))}"
            ) from None
        logger.debug(f"Connected to {self.url}")
        return WebSocketStream(connection, metrics=self._metrics)

    def __repr__(self) -> str:
        return f"WebSocketClient(url={self.url!r})"


__all__ = ["WebSocketClient", "WebSocketStream"]
