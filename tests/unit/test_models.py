# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Tests for response models: aliases, soft decoding and stream messages."""

import pytest
from pydantic import ValidationError

from finnhub_client.models import (
    STREAM_MESSAGE_ADAPTER,
    BasicFinancials,
    CompanyProfile,
    ControlFrame,
    EarningsCalendar,
    ErrorMessage,
    NewsArticle,
    NewsMessage,
    PingMessage,
    Quote,
    SymbolLookup,
    TradeMessage,
)


class TestAliases:
    def test_wire_names(self):
        profile = CompanyProfile.model_validate(
            {"name": "Apple Inc", "marketCapitalization": 2800000.5}
        )
        assert profile.market_capitalization == 2800000.5

    def test_python_names_accepted(self):
        quote = Quote(current_price=1.0, previous_close=0.5)
        assert quote.current_price == 1.0

    def test_dump_by_alias(self):
        assert Quote(current_price=1.0).model_dump(
            by_alias=True, exclude_none=True
        ) == {"c": 1.0}


class TestSoftDecode:
    """Only identifying fields are required."""

    def test_quote_requires_current_price(self):
        with pytest.raises(ValidationError):
            Quote.model_validate({"d": 1.0})

    def test_nested_defaults(self):
        lookup = SymbolLookup.model_validate({"count": 0})
        assert lookup.result == []

    def test_calendar_missing_list(self):
        assert EarningsCalendar.model_validate({}).earnings_calendar == []

    def test_basic_financials_keeps_metric_map(self):
        financials = BasicFinancials.model_validate(
            {"symbol": "AAPL", "metric": {"52WeekHigh": 199.6, "beta": None}}
        )
        assert financials.metric["52WeekHigh"] == 199.6
        assert financials.series is None


class TestNewsArticle:
    @pytest.mark.parametrize(
        ("related", "expected"),
        [
            ("AAPL", ["AAPL"]),
            ("AAPL, MSFT,", ["AAPL", "MSFT"]),
            ("", []),
            (None, []),
        ],
    )
    def test_related_symbols(self, related, expected):
        article = NewsArticle(id=1, headline="x", related=related)
        assert article.related_symbols == expected


class TestStreamMessages:
    """Push messages are discriminated on ``type``."""

    def test_trade(self):
        message = STREAM_MESSAGE_ADAPTER.validate_json(
            '{"type":"trade","data":[{"s":"AAPL","p":189.5,"t":1700000000000,'
            '"v":100,"c":["1","12"]}]}'
        )
        assert isinstance(message, TradeMessage)
        trade = message.data[0]
        assert trade.symbol == "AAPL"
        assert trade.price == 189.5
        assert trade.conditions == ["1", "12"]

    def test_trade_without_conditions(self):
        message = STREAM_MESSAGE_ADAPTER.validate_json(
            '{"type":"trade","data":[{"s":"BINANCE:BTCUSDT","p":1,"t":1,"v":0.1}]}'
        )
        assert message.data[0].conditions is None

    def test_news(self):
        message = STREAM_MESSAGE_ADAPTER.validate_json(
            '{"type":"news","data":[{"id":5,"headline":"Hello","related":"AAPL"}]}'
        )
        assert isinstance(message, NewsMessage)
        assert message.data[0].related_symbols == ["AAPL"]

    def test_ping(self):
        assert isinstance(
            STREAM_MESSAGE_ADAPTER.validate_json('{"type":"ping"}'), PingMessage
        )

    def test_error(self):
        message = STREAM_MESSAGE_ADAPTER.validate_json(
            '{"type":"error","msg":"Subscribing to too many symbols"}'
        )
        assert isinstance(message, ErrorMessage)
        assert message.msg == "Subscribing to too many symbols"

    def test_unknown_type(self):
        with pytest.raises(ValidationError):
            STREAM_MESSAGE_ADAPTER.validate_json('{"type":"heartbeat"}')


class TestControlFrame:
    def test_serialization(self):
        frame = ControlFrame(type="subscribe", symbol="AAPL")
        assert frame.model_dump_json() == '{"type":"subscribe","symbol":"AAPL"}'

    def test_rejects_unknown_type(self):
        with pytest.raises(ValidationError):
            ControlFrame(type="listen", symbol="AAPL")
