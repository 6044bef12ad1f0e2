# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Unit tests for response normalization.

Tests cover:
- Status code mapping to the closed error set
- Retry-after parsing (header, body, default)
- Soft decoding of optional fields
- Decode diagnostics for malformed payloads
- Transport failure wrapping
"""

import asyncio
import json
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from typing import Any

import httpx
import pytest

from finnhub_client.exceptions import (
    TIMEOUT_RETRY_AFTER,
    ApiError,
    MalformedResponseError,
    NotFoundError,
    RateLimitedError,
    TransportError,
    UnauthorizedError,
)
from finnhub_client.models import CompanyProfile, MarketNews, Quote, StockCandles
from finnhub_client.normalizer import (
    ResponseNormalizer,
    parse_duration_string,
    parse_retry_after,
)


def body(payload: Any) -> bytes:
    return json.dumps(payload).encode()


@pytest.fixture
def normalizer():
    return ResponseNormalizer()


class TestParseDurationString:
    """Test duration string parsing."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("500ms", 0.5),
            ("2s", 2.0),
            ("1.5s", 1.5),
            ("1m30s", 90.0),
            ("1h", 3600.0),
            ("1d", 86400.0),
        ],
    )
    def test_valid(self, value, expected):
        assert parse_duration_string(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", ["", "soon", "5 seconds", "s5", "5x"])
    def test_invalid(self, value):
        assert parse_duration_string(value) is None


class TestParseRetryAfter:
    """Test retry hint parsing."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("5", 5.0), ("1.5", 1.5), (5, 5.0), (2.5, 2.5), ("0", 0.0), ("2s", 2.0)],
    )
    def test_seconds_and_durations(self, value, expected):
        assert parse_retry_after(value) == expected

    def test_http_date(self):
        now = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
        header = format_datetime(now + timedelta(seconds=30), usegmt=True)

        assert parse_retry_after(header, now=now) == pytest.approx(30.0)

    def test_http_date_in_past(self):
        now = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
        header = format_datetime(now - timedelta(seconds=30), usegmt=True)

        assert parse_retry_after(header, now=now) == 0.0

    @pytest.mark.parametrize("value", [None, "", "later", -1, "-3", True, [5]])
    def test_unparseable(self, value):
        assert parse_retry_after(value) is None

    @pytest.mark.parametrize(
        "value",
        ["inf", "Infinity", "-inf", "nan", "1e400"]
        + [float("inf"), float("nan"), 10**400],
    )
    def test_non_finite(self, value):
        assert parse_retry_after(value) is None


class TestSuccessfulDecode:
    """2xx responses decode into the requested shape."""

    def test_model(self, normalizer):
        quote = normalizer.interpret(
            200, {}, body({"c": 189.5, "d": 1.2, "dp": 0.64, "t": 1700000000}), Quote
        )
        assert isinstance(quote, Quote)
        assert quote.current_price == 189.5
        assert quote.timestamp == 1700000000

    def test_any_returns_raw_json(self, normalizer):
        assert normalizer.interpret(200, {}, body({"a": [1, 2]})) == {"a": [1, 2]}

    def test_missing_optional_field_is_none(self, normalizer):
        """Ragged upstream records decode instead of failing the whole call."""
        quote = normalizer.interpret(200, {}, body({"c": 10.0}), Quote)
        assert quote.change is None
        assert quote.previous_close is None

    def test_null_optional_field_is_none(self, normalizer):
        quote = normalizer.interpret(200, {}, body({"c": 0, "d": None}), Quote)
        assert quote.change is None

    def test_ragged_list(self, normalizer):
        payload = [
            {"id": 1, "headline": "a", "related": "AAPL,MSFT", "source": "x"},
            {"id": 2, "headline": "b"},
        ]
        news = normalizer.interpret(200, {}, body(payload), list[MarketNews])

        assert news[0].related_symbols == ["AAPL", "MSFT"]
        assert news[1].related is None
        assert news[1].related_symbols == []

    def test_unknown_fields_are_kept(self, normalizer):
        quote = normalizer.interpret(200, {}, body({"c": 1.0, "new": "x"}), Quote)
        assert quote.model_extra == {"new": "x"}

    def test_empty_object_for_all_optional_model(self, normalizer):
        profile = normalizer.interpret(200, {}, b"{}", CompanyProfile)
        assert profile.name is None

    def test_no_data_candles(self, normalizer):
        candles = normalizer.interpret(200, {}, body({"s": "no_data"}), StockCandles)
        assert candles.has_data is False
        assert candles.close is None

    def test_empty_body_with_optional_shape(self, normalizer):
        assert normalizer.interpret(204, {}, b"", Quote | None) is None


class TestMalformedResponse:
    """Decode failures carry a diagnostic naming what went wrong."""

    def test_missing_required_field(self, normalizer):
        with pytest.raises(MalformedResponseError) as exc_info:
            normalizer.interpret(200, {}, body({"d": 1.0}), Quote)

        error = exc_info.value
        assert error.field == "c"
        assert "c" in error.diagnostic
        assert error.status_code == 200

    def test_wrong_type_reports_path_and_fragment(self, normalizer):
        payload = [{"id": 1, "headline": "ok"}, {"id": "not-a-number", "headline": 2}]

        with pytest.raises(MalformedResponseError) as exc_info:
            normalizer.interpret(200, {}, body(payload), list[MarketNews])

        error = exc_info.value
        assert error.field == "1.id"
        assert "'not-a-number'" in error.diagnostic
        assert "1 more error" in error.diagnostic

    def test_invalid_json(self, normalizer):
        with pytest.raises(MalformedResponseError) as exc_info:
            normalizer.interpret(200, {}, b'{"c": 1.0', Quote)

        assert exc_info.value.diagnostic.startswith("invalid JSON")
        assert exc_info.value.field is None

    def test_empty_body_for_required_shape(self, normalizer):
        with pytest.raises(MalformedResponseError, match="Empty response body"):
            normalizer.interpret(200, {}, b"", Quote)

    def test_not_retryable(self, normalizer):
        with pytest.raises(MalformedResponseError) as exc_info:
            normalizer.interpret(200, {}, b"[]", Quote)
        assert exc_info.value.is_retryable is False


class TestStatusMapping:
    """Non-2xx responses map onto the closed error set."""

    @pytest.mark.parametrize("status", [401, 403])
    @pytest.mark.parametrize(
        "payload", [b"", b'{"error": "Invalid API key"}', b"<html>nope</html>"]
    )
    def test_unauthorized_regardless_of_body(self, normalizer, status, payload):
        with pytest.raises(UnauthorizedError) as exc_info:
            normalizer.interpret(status, {}, payload, Quote)
        assert exc_info.value.status_code == status

    def test_not_found(self, normalizer):
        with pytest.raises(NotFoundError) as exc_info:
            normalizer.interpret(404, {}, body({"error": "No such symbol"}), Quote)
        assert exc_info.value.message == "No such symbol"

    def test_generic_api_error(self, normalizer):
        with pytest.raises(ApiError) as exc_info:
            normalizer.interpret(
                500, {}, body({"error": "Internal failure"}), Quote
            )
        assert exc_info.value.status_code == 500
        assert exc_info.value.api_message == "Internal failure"

    def test_redirect_is_api_error(self, normalizer):
        with pytest.raises(ApiError):
            normalizer.interpret(302, {"location": "/elsewhere"}, b"", Quote)


class TestRateLimited:
    """429 handling and retry hints."""

    def test_retry_after_header(self, normalizer):
        with pytest.raises(RateLimitedError) as exc_info:
            normalizer.interpret(429, {"Retry-After": "5"}, b"", Quote)
        assert exc_info.value.retry_after == 5.0

    def test_header_lookup_is_case_insensitive(self, normalizer):
        with pytest.raises(RateLimitedError) as exc_info:
            normalizer.interpret(429, {"retry-after": "7"}, b"", Quote)
        assert exc_info.value.retry_after == 7.0

    def test_body_retry_after(self, normalizer):
        with pytest.raises(RateLimitedError) as exc_info:
            normalizer.interpret(429, {}, body({"retryAfter": 3}), Quote)
        assert exc_info.value.retry_after == 3.0

    def test_header_wins_over_body(self, normalizer):
        with pytest.raises(RateLimitedError) as exc_info:
            normalizer.interpret(
                429, {"Retry-After": "2"}, body({"retry_after": 9}), Quote
            )
        assert exc_info.value.retry_after == 2.0

    def test_absent_hint_uses_default(self, normalizer):
        with pytest.raises(RateLimitedError) as exc_info:
            normalizer.interpret(
                429, {}, body({"error": "API limit reached"}), Quote
            )
        assert exc_info.value.retry_after == 1.0

    def test_unparseable_hint_uses_configured_default(self):
        normalizer = ResponseNormalizer(default_retry_after=2.5)
        with pytest.raises(RateLimitedError) as exc_info:
            normalizer.interpret(429, {"Retry-After": "whenever"}, b"", Quote)
        assert exc_info.value.retry_after == 2.5

    @pytest.mark.parametrize("hint", ["inf", "1e400", "nan"])
    def test_non_finite_hint_uses_default(self, normalizer, hint):
        with pytest.raises(RateLimitedError) as exc_info:
            normalizer.interpret(429, {"Retry-After": hint}, b"", Quote)
        assert exc_info.value.retry_after == 1.0

    def test_non_finite_body_hint_uses_default(self, normalizer):
        with pytest.raises(RateLimitedError) as exc_info:
            normalizer.interpret(429, {}, b'{"retryAfter": 1e400}', Quote)
        assert exc_info.value.retry_after == 1.0

    def test_negative_default_rejected(self):
        with pytest.raises(ValueError):
            ResponseNormalizer(default_retry_after=-1)


class TestExtractMessage:
    """Best-effort message extraction from error bodies."""

    @pytest.mark.parametrize("field", ["error", "message", "msg"])
    def test_json_fields(self, field):
        message = ResponseNormalizer.extract_message(400, body({field: " bad "}))
        assert message == "bad"

    def test_plain_text(self):
        assert ResponseNormalizer.extract_message(502, b"Bad Gateway") == "Bad Gateway"

    def test_long_text_truncated(self):
        message = ResponseNormalizer.extract_message(500, b"x" * 1000)
        assert len(message) == 200
        assert message.endswith("...")

    def test_empty_body(self):
        assert ResponseNormalizer.extract_message(503, b"") == "HTTP error 503"

    def test_json_without_message_falls_back_to_text(self):
        assert ResponseNormalizer.extract_message(400, b'{"code": 7}') == (
            '{"code": 7}'
        )


class TestTransportErrors:
    """Failures before a response arrive as TransportError."""

    def test_connect_error(self):
        cause = httpx.ConnectError("Name or service not known")

        error = ResponseNormalizer.from_transport_error(cause)

        assert isinstance(error, TransportError)
        assert error.cause is cause
        assert error.is_timeout is False
        assert error.retry_after is None
        assert "Name or service not known" in error.message

    @pytest.mark.parametrize(
        "cause",
        [httpx.ReadTimeout("timed out"), TimeoutError(), asyncio.TimeoutError()],
    )
    def test_timeout(self, cause):
        error = ResponseNormalizer.from_transport_error(cause)

        assert error.is_timeout is True
        assert error.retry_after == TIMEOUT_RETRY_AFTER
        assert error.message.startswith("Request timed out")

    def test_scrub_applied(self):
        cause = httpx.ConnectError("failed for https://x/quote?token=secret")

        error = ResponseNormalizer.from_transport_error(
            cause, scrub=lambda text: text.replace("secret", "***")
        )

        assert "secret" not in error.message
        assert "token=***" in error.message
