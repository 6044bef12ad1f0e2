# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
WebSocket push message models.

Messages are discriminated by their ``type`` field. Control frames sent by
the client use the same discriminator.
"""

from typing import Annotated, Literal

from pydantic import Field, TypeAdapter

from .base import FinnhubModel
from .news import NewsArticle


class TradeData(FinnhubModel):
    symbol: str = Field(alias="s")
    price: float = Field(alias="p")
    timestamp: int = Field(alias="t")
    volume: float = Field(alias="v")
    conditions: list[str] | None = Field(default=None, alias="c")


class TradeMessage(FinnhubModel):
    type: Literal["trade"]
    data: list[TradeData] = Field(default_factory=list)


class NewsMessage(FinnhubModel):
    type: Literal["news"]
    data: list[NewsArticle] = Field(default_factory=list)


class PressReleaseMessage(FinnhubModel):
    type: Literal["press-release"]
    data: list[NewsArticle] = Field(default_factory=list)


class PingMessage(FinnhubModel):
    type: Literal["ping"]


class ErrorMessage(FinnhubModel):
    type: Literal["error"]
    msg: str = ""


StreamMessage = Annotated[
    TradeMessage | NewsMessage | PressReleaseMessage | PingMessage | ErrorMessage,
    Field(discriminator="type"),
]

STREAM_MESSAGE_ADAPTER: TypeAdapter[StreamMessage] = TypeAdapter(StreamMessage)


class ControlFrame(FinnhubModel):
    """Subscription control frame sent to the stream."""

    type: Literal[
        "subscribe",
        "unsubscribe",
        "subscribe-news",
        "unsubscribe-news",
        "subscribe-pr",
        "unsubscribe-pr",
    ]
    symbol: str


__all__ = [
    "STREAM_MESSAGE_ADAPTER",
    "ControlFrame",
    "ErrorMessage",
    "NewsMessage",
    "PingMessage",
    "PressReleaseMessage",
    "StreamMessage",
    "TradeData",
    "TradeMessage",
]
