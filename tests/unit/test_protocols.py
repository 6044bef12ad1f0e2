# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Tests for the transport protocol and its httpx implementation."""

import json

import httpx
import pytest

from finnhub_client.config import ClientConfig
from finnhub_client.protocols import TransportProtocol, TransportResponse
from finnhub_client.transport import HttpxTransport
from finnhub_client.types.request import PendingRequest


def capture_transport(captured: list[httpx.Request], **response_kwargs):
    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(
            response_kwargs.get("status_code", 200),
            headers=response_kwargs.get("headers"),
            content=response_kwargs.get("content", b"{}"),
        )

    return httpx.MockTransport(handler)


class TestProtocols:
    def test_transport_protocol_runtime_checkable(self):
        """Verify TransportProtocol is runtime checkable."""

        class ValidTransport:
            async def send(self, request: PendingRequest) -> TransportResponse:
                return TransportResponse(200)

            async def aclose(self) -> None:
                pass

        assert isinstance(ValidTransport(), TransportProtocol)

    def test_incomplete_transport_rejected(self):
        class NoClose:
            async def send(self, request):
                return TransportResponse(200)

        assert not isinstance(NoClose(), TransportProtocol)

    def test_httpx_transport_satisfies_protocol(self):
        transport = HttpxTransport(
            "https://api.test/v1",
            timeout=1.0,
            user_agent="test",
            client=httpx.AsyncClient(),
        )
        assert isinstance(transport, TransportProtocol)


class TestTransportResponse:
    def test_header_lookup_is_case_insensitive(self):
        response = TransportResponse(429, headers={"retry-after": "3"})
        assert response.header("Retry-After") == "3"
        assert response.header("X-Missing") is None

    def test_defaults(self):
        response = TransportResponse(204)
        assert response.headers == {}
        assert response.content == b""


class TestHttpxTransport:
    """Tests for HttpxTransport against httpx.MockTransport."""

    @pytest.mark.asyncio
    async def test_get_sends_query_and_headers(self):
        captured: list[httpx.Request] = []
        client = httpx.AsyncClient(transport=capture_transport(captured))
        transport = HttpxTransport(
            "https://api.test/v1/", timeout=1.0, user_agent="t", client=client
        )
        request = PendingRequest.build(
            "GET", "/quote", {"symbol": "AAPL"}, operation_id="quote"
        ).with_headers(**{"X-Test": "1"})

        await transport.send(request)

        sent = captured[0]
        assert sent.method == "GET"
        assert sent.url.path == "/v1/quote"
        assert sent.url.params["symbol"] == "AAPL"
        assert sent.headers["x-test"] == "1"
        assert sent.content == b""
        await client.aclose()

    @pytest.mark.asyncio
    async def test_post_sends_json_body(self):
        captured: list[httpx.Request] = []
        client = httpx.AsyncClient(transport=capture_transport(captured))
        transport = HttpxTransport(
            "https://api.test/v1", timeout=1.0, user_agent="t", client=client
        )

        await transport.send(PendingRequest.build("post", "scan", body={"a": 1}))

        assert captured[0].method == "POST"
        assert captured[0].url.path == "/v1/scan"
        assert json.loads(captured[0].content) == {"a": 1}
        await client.aclose()

    @pytest.mark.asyncio
    async def test_response_headers_lower_cased(self):
        client = httpx.AsyncClient(
            transport=capture_transport(
                [], status_code=429, headers={"Retry-After": "2"}, content=b"x"
            )
        )
        transport = HttpxTransport(
            "https://api.test/v1", timeout=1.0, user_agent="t", client=client
        )

        response = await transport.send(PendingRequest.build("GET", "/quote"))

        assert response.status_code == 429
        assert response.headers["retry-after"] == "2"
        assert response.content == b"x"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_http_errors_propagate(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        transport = HttpxTransport(
            "https://api.test/v1", timeout=1.0, user_agent="t", client=client
        )

        with pytest.raises(httpx.ConnectError):
            await transport.send(PendingRequest.build("GET", "/quote"))
        await client.aclose()

    def test_url_for(self):
        transport = HttpxTransport(
            "https://api.test/v1/",
            timeout=1.0,
            user_agent="t",
            client=httpx.AsyncClient(),
        )
        request = PendingRequest.build("GET", "/stock/profile2")
        assert transport.url_for(request) == "https://api.test/v1/stock/profile2"

    @pytest.mark.asyncio
    async def test_borrowed_client_not_closed(self):
        client = httpx.AsyncClient()
        transport = HttpxTransport(
            "https://api.test/v1", timeout=1.0, user_agent="t", client=client
        )

        await transport.aclose()

        assert not client.is_closed
        await client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_closed(self):
        client = httpx.AsyncClient()
        transport = HttpxTransport(
            "https://api.test/v1",
            timeout=1.0,
            user_agent="t",
            client=client,
            owns_client=True,
        )

        await transport.aclose()

        assert client.is_closed

    @pytest.mark.asyncio
    async def test_from_config_builds_own_client(self):
        config = ClientConfig(api_key="k", base_url="https://api.test/v1", timeout=3.0)
        transport = HttpxTransport.from_config(config)

        assert transport.base_url == "https://api.test/v1"
        assert transport.timeout == 3.0
        assert transport._client.headers["user-agent"] == config.user_agent
        await transport.aclose()
        assert transport._client.is_closed
