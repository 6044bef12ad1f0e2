# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Endpoint table.

Each remote endpoint is one Operation entry: method, path, response shape
and parameter rules. ``build_request`` turns keyword arguments into a
PendingRequest for the dispatch pipeline, so adding an endpoint never
requires a new method.

Parameter names are Python names. Wire names that are keywords or
camelCase are mapped through ``aliases`` (``from_`` -> ``from``,
``min_id`` -> ``minId``).
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .exceptions import InvalidParameterError
from .models import (
    BasicFinancials,
    BidAsk,
    CompanyNews,
    CompanyProfile,
    Country,
    CryptoSymbol,
    Earnings,
    EarningsCalendar,
    EconomicCode,
    ETFProfileResponse,
    ForexRates,
    ForexSymbol,
    InsiderTransactions,
    IPOCalendar,
    MarketNews,
    MarketStatus,
    NewsSentiment,
    PriceTarget,
    Quote,
    RecommendationTrend,
    StockCandles,
    StockSymbol,
    SymbolLookup,
)
from .types.request import PendingRequest

DATE_RANGE_ALIASES: Mapping[str, str] = MappingProxyType({"from_": "from"})


@dataclass(frozen=True)
class Operation:
    """
    One remote endpoint.

    Attributes:
        operation_id: Stable identifier, also used as a metrics label
        method: HTTP method
        path: Path relative to the API base URL
        shape: Type the 2xx payload decodes into
        required: Parameters that must be supplied and non-None
        optional: Parameters that may be omitted
        one_of: Parameters of which at least one must be supplied
        aliases: Python name -> wire name
        defaults: Fixed query parameters always sent
        description: One-line summary
    """

    operation_id: str
    method: str
    path: str
    shape: Any
    required: tuple[str, ...] = ()
    optional: tuple[str, ...] = ()
    one_of: tuple[str, ...] = ()
    aliases: Mapping[str, str] = field(default_factory=dict)
    defaults: Mapping[str, str] = field(default_factory=dict)
    description: str = ""

    @property
    def parameters(self) -> tuple[str, ...]:
        return self.required + self.optional + self.one_of

    def wire_name(self, name: str) -> str:
        return self.aliases.get(name, name)

    def build_request(self, **params: Any) -> PendingRequest:
        """
        Validate ``params`` and build the request.

        Raises:
            InvalidParameterError: Unknown parameter, missing required
                parameter, or none of ``one_of`` supplied
        """
        allowed = set(self.parameters)
        for name in params:
            if name not in allowed:
                raise InvalidParameterError(
                    f"Unknown parameter '{name}' for operation '{self.operation_id}'",
                    operation_id=self.operation_id,
                    parameter=name,
                )

        for name in self.required:
            if params.get(name) is None:
                raise InvalidParameterError(
                    f"Missing required parameter '{name}' for operation "
                    f"'{self.operation_id}'",
                    operation_id=self.operation_id,
                    parameter=name,
                )

        if self.one_of and all(params.get(n) is None for n in self.one_of):
            raise InvalidParameterError(
                f"Operation '{self.operation_id}' requires one of: "
                f"{', '.join(self.one_of)}",
                operation_id=self.operation_id,
            )

        query: dict[str, Any] = dict(self.defaults)
        for name, value in params.items():
            if value is not None:
                query[self.wire_name(name)] = value

        if self.method == "GET":
            return PendingRequest.build(
                self.method, self.path, query=query, operation_id=self.operation_id
            )
        return PendingRequest.build(
            self.method, self.path, body=query, operation_id=self.operation_id
        )


def _op(
    operation_id: str,
    path: str,
    shape: Any,
    required: tuple[str, ...] = (),
    optional: tuple[str, ...] = (),
    *,
    one_of: tuple[str, ...] = (),
    aliases: Mapping[str, str] | None = None,
    defaults: Mapping[str, str] | None = None,
    method: str = "GET",
    description: str = "",
) -> Operation:
    return Operation(
        operation_id=operation_id,
        method=method,
        path=path,
        shape=shape,
        required=required,
        optional=optional,
        one_of=one_of,
        aliases=dict(aliases or {}),
        defaults=dict(defaults or {}),
        description=description,
    )


_CANDLE_PARAMS = ("symbol", "resolution", "from_", "to")

_OPERATIONS: tuple[Operation, ...] = (
    # === Stock price ===
    _op("quote", "/quote", Quote, ("symbol",), description="Real-time quote"),
    _op(
        "stock_candles",
        "/stock/candle",
        StockCandles,
        _CANDLE_PARAMS,
        aliases=DATE_RANGE_ALIASES,
        description="OHLCV candles",
    ),
    _op("bid_ask", "/stock/bidask", BidAsk, ("symbol",), description="Last bid/ask"),
    # === Company ===
    _op(
        "company_profile",
        "/stock/profile2",
        CompanyProfile,
        one_of=("symbol", "isin", "cusip"),
        description="Company profile",
    ),
    _op(
        "company_peers",
        "/stock/peers",
        list[str],
        ("symbol",),
        ("grouping",),
        description="Peer symbols",
    ),
    _op(
        "basic_financials",
        "/stock/metric",
        BasicFinancials,
        ("symbol",),
        defaults={"metric": "all"},
        description="Key metrics",
    ),
    _op(
        "recommendation_trends",
        "/stock/recommendation",
        list[RecommendationTrend],
        ("symbol",),
        description="Analyst recommendation trends",
    ),
    _op(
        "price_target",
        "/stock/price-target",
        PriceTarget,
        ("symbol",),
        description="Analyst price target consensus",
    ),
    _op(
        "company_earnings",
        "/stock/earnings",
        list[Earnings],
        ("symbol",),
        ("limit",),
        description="Earnings surprises",
    ),
    _op(
        "insider_transactions",
        "/stock/insider-transactions",
        InsiderTransactions,
        ("symbol",),
        ("from_", "to"),
        aliases=DATE_RANGE_ALIASES,
        description="Insider transactions",
    ),
    _op(
        "stock_symbols",
        "/stock/symbol",
        list[StockSymbol],
        ("exchange",),
        ("mic", "security_type", "currency"),
        aliases={"security_type": "securityType"},
        description="Supported stocks for an exchange",
    ),
    _op(
        "symbol_search",
        "/search",
        SymbolLookup,
        ("q",),
        ("exchange",),
        description="Symbol lookup",
    ),
    _op(
        "market_status",
        "/stock/market-status",
        MarketStatus,
        ("exchange",),
        description="Current market status",
    ),
    # === News ===
    _op(
        "market_news",
        "/news",
        list[MarketNews],
        ("category",),
        ("min_id",),
        aliases={"min_id": "minId"},
        description="Market news",
    ),
    _op(
        "company_news",
        "/company-news",
        list[CompanyNews],
        ("symbol", "from_", "to"),
        aliases=DATE_RANGE_ALIASES,
        description="Company news",
    ),
    _op(
        "news_sentiment",
        "/news-sentiment",
        NewsSentiment,
        ("symbol",),
        description="News sentiment and buzz",
    ),
    # === Calendars ===
    _op(
        "earnings_calendar",
        "/calendar/earnings",
        EarningsCalendar,
        optional=("from_", "to", "symbol", "international"),
        aliases=DATE_RANGE_ALIASES,
        description="Earnings calendar",
    ),
    _op(
        "ipo_calendar",
        "/calendar/ipo",
        IPOCalendar,
        ("from_", "to"),
        aliases=DATE_RANGE_ALIASES,
        description="IPO calendar",
    ),
    # === Forex ===
    _op("forex_rates", "/forex/rates", ForexRates, ("base",), description="FX rates"),
    _op(
        "forex_exchanges",
        "/forex/exchange",
        list[str],
        description="Supported forex exchanges",
    ),
    _op(
        "forex_symbols",
        "/forex/symbol",
        list[ForexSymbol],
        ("exchange",),
        description="Forex symbols for an exchange",
    ),
    _op(
        "forex_candles",
        "/forex/candle",
        StockCandles,
        _CANDLE_PARAMS,
        aliases=DATE_RANGE_ALIASES,
        description="Forex candles",
    ),
    # === Crypto ===
    _op(
        "crypto_exchanges",
        "/crypto/exchange",
        list[str],
        description="Supported crypto exchanges",
    ),
    _op(
        "crypto_symbols",
        "/crypto/symbol",
        list[CryptoSymbol],
        ("exchange",),
        description="Crypto symbols for an exchange",
    ),
    _op(
        "crypto_candles",
        "/crypto/candle",
        StockCandles,
        _CANDLE_PARAMS,
        aliases=DATE_RANGE_ALIASES,
        description="Crypto candles",
    ),
    # === ETF / economic / misc ===
    _op(
        "etf_profile",
        "/etf/profile",
        ETFProfileResponse,
        one_of=("symbol", "isin"),
        description="ETF profile",
    ),
    _op(
        "economic_codes",
        "/economic/code",
        list[EconomicCode],
        description="Economic data codes",
    ),
    _op("country_list", "/country", list[Country], description="Country metadata"),
)

OPERATIONS: Mapping[str, Operation] = MappingProxyType(
    {op.operation_id: op for op in _OPERATIONS}
)


def get_operation(operation_id: str) -> Operation:
    """
    Look up an operation.

    Raises:
        InvalidParameterError: If the operation is not in the table
    """
    try:
        return OPERATIONS[operation_id]
    except KeyError:
        raise InvalidParameterError(
            f"Unknown operation: '{operation_id}'", operation_id=operation_id
        ) from None


def build_request(operation_id: str, **params: Any) -> PendingRequest:
    """Build the PendingRequest for ``operation_id`` from keyword parameters."""
    return get_operation(operation_id).build_request(**params)


__all__ = [
    "OPERATIONS",
    "Operation",
    "build_request",
    "get_operation",
]
