# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
FinnhubClient: the request dispatch pipeline.

Every call, whether issued through the endpoint table or as a raw path,
funnels through ``FinnhubClient.send``:

    acquire permit -> inject credential -> send -> interpret

The only state shared between concurrent calls is the admission controller's
token bucket. Failures are raised as NormalizedError subclasses and never
retried.
"""

import asyncio
import logging
import time
from datetime import date
from typing import Any

import httpx
from typing_extensions import Self

from .admission import AdmissionController
from .auth import CredentialInjector
from .backends.base import BaseBucketBackend
from .config import ClientConfig
from .endpoints import get_operation
from .exceptions import ConfigurationError, FinnhubError, NormalizedError
from .models import (
    CandleResolution,
    CompanyNews,
    CompanyProfile,
    MarketNews,
    NewsCategory,
    Quote,
    StockCandles,
)
from .normalizer import ResponseNormalizer
from .observability.collector import UnifiedMetricsCollector, get_metrics_collector
from .observability.constants import (
    ACTIVE_REQUESTS,
    RATE_LIMITED_TOTAL,
    REQUEST_DURATION_SECONDS,
    REQUESTS_TOTAL,
)
from .protocols.transport import TransportProtocol
from .transport import HttpxTransport
from .types.rate_limit import BucketState, RateLimitStrategy
from .types.request import PendingRequest
from .websocket import WebSocketClient

logger = logging.getLogger(__name__)

# Metrics label for calls that do not come from the endpoint table.
RAW_OPERATION = "raw"


class FinnhubClient:
    """
    Async client for the Finnhub API.

    The client owns one admission controller; every call made through it,
    from any number of concurrent tasks, shares that budget. Two clients do
    not share budgets unless they share a backend.

    Example:
        >>> async with FinnhubClient(api_key="...") as client:
        ...     quote = await client.call("quote", symbol="AAPL")
        ...     profile = await client.company_profile(symbol="AAPL")
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        api_key: str | None = None,
        transport: TransportProtocol | None = None,
        backend: BaseBucketBackend | None = None,
        normalizer: ResponseNormalizer | None = None,
        metrics: UnifiedMetricsCollector | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: Client configuration. Built from ``api_key`` or from the
                environment when omitted.
            api_key: Shorthand for ``ClientConfig(api_key=...)``
            transport: HTTP transport; HttpxTransport by default
            backend: Token bucket storage; a private in-memory bucket by default
            normalizer: Response normalizer; built from config by default
            metrics: Metrics collector; the global collector by default when
                ``config.metrics_enabled`` is set

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        if config is not None and api_key is not None:
            raise ConfigurationError("Pass either config or api_key, not both")
        if config is None:
            config = (
                ClientConfig(api_key=api_key)
                if api_key is not None
                else ClientConfig.from_env()
            )
        self.config = config

        self._injector = CredentialInjector(config.api_key, config.auth_method)

        self._owns_transport = transport is None
        self._transport: TransportProtocol = (
            transport if transport is not None else HttpxTransport.from_config(config)
        )

        if metrics is None and config.metrics_enabled:
            metrics = get_metrics_collector()
        self._metrics = metrics

        self._owns_backend = backend is None
        self._admission = AdmissionController.from_config(
            config, backend=backend, metrics=metrics
        )
        self._normalizer = normalizer or ResponseNormalizer(config.default_retry_after)
        self._closed = False

        logger.debug(
            f"FinnhubClient initialized (base_url={config.base_url}, "
            f"auth={config.auth_method.value}, "
            f"strategy={config.rate_limit_strategy.value})"
        )

    @property
    def admission(self) -> AdmissionController:
        return self._admission

    @property
    def closed(self) -> bool:
        return self._closed

    # === Dispatch ===

    async def dispatch(
        self,
        method: str,
        path: str,
        query: dict[str, Any] | None = None,
        body: Any | None = None,
        shape: Any = Any,
        *,
        operation_id: str | None = None,
    ) -> Any:
        """
        Issue one API call and decode the result into ``shape``.

        Args:
            method: HTTP method
            path: Path relative to the base URL, e.g. ``/quote``
            query: Query parameters; ``None`` values are dropped
            body: JSON body for POST requests
            shape: Type the 2xx payload decodes into (``Any`` for raw JSON)
            operation_id: Label for logs and metrics

        Raises:
            NormalizedError: The call failed; see the exceptions module
            BackendError: A shared rate limit backend failed
        """
        request = PendingRequest.build(
            method, path, query=query, body=body, operation_id=operation_id
        )
        return await self.send(request, shape)

    async def send(self, request: PendingRequest, shape: Any = Any) -> Any:
        """Run a prepared request through the pipeline."""
        if self._closed:
            raise FinnhubError("Client is closed")

        operation = request.operation_id or RAW_OPERATION
        outcome = "success"
        start = time.monotonic()
        self._inc_active(1.0)
        try:
            waited = await self._admission.acquire()
            prepared = self._injector.apply(request)
            logger.debug(
                f"Dispatching {prepared.redacted()} (admission wait {waited:.3f}s)"
            )

            try:
                response = await self._transport.send(prepared)
            except (httpx.HTTPError, OSError, asyncio.TimeoutError) as e:
                raise self._normalizer.from_transport_error(
                    e, scrub=self._injector.scrub
                ) from e

            return self._normalizer.interpret(
                response.status_code, response.headers, response.content, shape
            )
        except NormalizedError as e:
            outcome = e.kind
            logger.debug(f"{request.method} {request.path} failed: {e.kind}")
            if e.kind == "rate_limited" and self._metrics is not None:
                self._metrics.inc_counter(
                    RATE_LIMITED_TOTAL, labels={"operation": operation}
                )
            raise
        except asyncio.CancelledError:
            outcome = "cancelled"
            raise
        except BaseException:
            outcome = "error"
            raise
        finally:
            self._inc_active(-1.0)
            if self._metrics is not None:
                self._metrics.inc_counter(
                    REQUESTS_TOTAL,
                    labels={"operation": operation, "outcome": outcome},
                )
                self._metrics.observe_histogram(
                    REQUEST_DURATION_SECONDS,
                    time.monotonic() - start,
                    labels={"operation": operation},
                )

    def _inc_active(self, delta: float) -> None:
        if self._metrics is not None:
            self._metrics.inc_gauge(ACTIVE_REQUESTS, delta)

    async def get(self, path: str, shape: Any = Any, **query: Any) -> Any:
        """GET ``path`` with keyword query parameters."""
        return await self.dispatch("GET", path, query=query, shape=shape)

    async def post(self, path: str, body: Any, shape: Any = Any) -> Any:
        return await self.dispatch("POST", path, body=body, shape=shape)

    async def call(self, operation_id: str, **params: Any) -> Any:
        """
        Call an operation from the endpoint table.

        Raises:
            InvalidParameterError: Unknown operation or bad parameters
            NormalizedError: The call failed
        """
        operation = get_operation(operation_id)
        return await self.send(operation.build_request(**params), operation.shape)

    # === Typed shortcuts ===

    async def quote(self, symbol: str) -> Quote:
        result: Quote = await self.call("quote", symbol=symbol)
        return result

    async def company_profile(
        self,
        symbol: str | None = None,
        isin: str | None = None,
        cusip: str | None = None,
    ) -> CompanyProfile:
        result: CompanyProfile = await self.call(
            "company_profile", symbol=symbol, isin=isin, cusip=cusip
        )
        return result

    async def stock_candles(
        self,
        symbol: str,
        resolution: CandleResolution,
        from_: int,
        to: int,
    ) -> StockCandles:
        """Candles between two UNIX timestamps (seconds)."""
        result: StockCandles = await self.call(
            "stock_candles", symbol=symbol, resolution=resolution, from_=from_, to=to
        )
        return result

    async def market_news(
        self,
        category: NewsCategory = NewsCategory.GENERAL,
        min_id: int | None = None,
    ) -> list[MarketNews]:
        result: list[MarketNews] = await self.call(
            "market_news", category=category, min_id=min_id
        )
        return result

    async def company_news(
        self, symbol: str, from_: date, to: date
    ) -> list[CompanyNews]:
        result: list[CompanyNews] = await self.call(
            "company_news", symbol=symbol, from_=from_, to=to
        )
        return result

    # === Streaming ===

    def websocket(self) -> WebSocketClient:
        """WebSocket client using this client's credential and stream URL."""
        return WebSocketClient(
            self.config.api_key, url=self.config.websocket_url, metrics=self._metrics
        )

    # === Diagnostics / lifecycle ===

    async def rate_limit_state(self) -> BucketState:
        """Refilled snapshot of the admission bucket."""
        return await self._admission.snapshot()

    async def aclose(self) -> None:
        """Close the transport and backend created by this client."""
        if self._closed:
            return
        self._closed = True
        if self._owns_transport:
            await self._transport.aclose()
        if self._owns_backend:
            await self._admission.close()
        logger.debug("FinnhubClient closed")

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return (
            f"FinnhubClient(base_url={self.config.base_url!r}, "
            f"auth={self.config.auth_method.value!r}, {self._admission!r})"
        )


def create_client(
    api_key: str | None = None,
    strategy: str | None = None,
    **config_overrides: Any,
) -> FinnhubClient:
    """
    Factory function to create a FinnhubClient.

    Args:
        api_key: API key; read from FINNHUB_API_KEY when omitted
        strategy: Rate limit strategy name (``per_second``,
            ``fifteen_second_window``, ``custom``)
        **config_overrides: Other ClientConfig fields

    Raises:
        ConfigurationError: If the strategy name or configuration is invalid
    """
    if strategy is not None:
        try:
            config_overrides["rate_limit_strategy"] = RateLimitStrategy(
                strategy.lower()
            )
        except ValueError as e:
            raise ConfigurationError(f"Unknown rate limit strategy: {strategy}") from e
    if api_key is not None:
        config_overrides["api_key"] = api_key
    return FinnhubClient(ClientConfig.from_env(**config_overrides))


__all__ = ["RAW_OPERATION", "FinnhubClient", "create_client"]
