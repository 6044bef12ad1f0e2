# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Stock price, company and fundamentals models."""

from typing import Any

from pydantic import Field

from .base import FinnhubModel


class Quote(FinnhubModel):
    """
    Real-time quote.

    Unknown symbols come back as a quote of zeros with null change fields,
    so only the current price is required.
    """

    current_price: float = Field(alias="c")
    change: float | None = Field(default=None, alias="d")
    percent_change: float | None = Field(default=None, alias="dp")
    high: float | None = Field(default=None, alias="h")
    low: float | None = Field(default=None, alias="l")
    open: float | None = Field(default=None, alias="o")
    previous_close: float | None = Field(default=None, alias="pc")
    timestamp: int | None = Field(default=None, alias="t")


class BidAsk(FinnhubModel):
    """Last bid/ask."""

    bid: float | None = Field(default=None, alias="b")
    ask: float | None = Field(default=None, alias="a")
    bid_volume: float | None = Field(default=None, alias="bv")
    ask_volume: float | None = Field(default=None, alias="av")
    timestamp: int | None = Field(default=None, alias="t")


class StockCandles(FinnhubModel):
    """
    OHLCV candles as parallel arrays.

    ``status`` is ``ok`` or ``no_data``; on ``no_data`` the arrays are absent.
    """

    status: str = Field(alias="s")
    close: list[float] | None = Field(default=None, alias="c")
    high: list[float] | None = Field(default=None, alias="h")
    low: list[float] | None = Field(default=None, alias="l")
    open: list[float] | None = Field(default=None, alias="o")
    timestamp: list[int] | None = Field(default=None, alias="t")
    volume: list[float] | None = Field(default=None, alias="v")

    @property
    def has_data(self) -> bool:
        return self.status == "ok"


class CompanyProfile(FinnhubModel):
    """Company profile (``/stock/profile2``). Every field may be missing."""

    country: str | None = None
    currency: str | None = None
    exchange: str | None = None
    name: str | None = None
    ticker: str | None = None
    ipo: str | None = None
    market_capitalization: float | None = Field(
        default=None, alias="marketCapitalization"
    )
    share_outstanding: float | None = Field(default=None, alias="shareOutstanding")
    logo: str | None = None
    phone: str | None = None
    weburl: str | None = None
    finnhub_industry: str | None = Field(default=None, alias="finnhubIndustry")


class StockSymbol(FinnhubModel):
    description: str
    display_symbol: str = Field(alias="displaySymbol")
    symbol: str
    symbol_type: str | None = Field(default=None, alias="type")
    mic: str | None = None
    figi: str | None = None
    share_class_figi: str | None = Field(default=None, alias="shareClassFIGI")
    currency: str | None = None


class SymbolLookupResult(FinnhubModel):
    description: str
    display_symbol: str = Field(alias="displaySymbol")
    symbol: str
    security_type: str | None = Field(default=None, alias="type")


class SymbolLookup(FinnhubModel):
    """Symbol search results (``/search``)."""

    count: int
    result: list[SymbolLookupResult] = Field(default_factory=list)


class MarketStatus(FinnhubModel):
    exchange: str
    is_open: bool = Field(alias="isOpen")
    holiday: str | None = None
    session: str | None = None
    timezone: str | None = None
    timestamp: int | None = Field(default=None, alias="t")


class BasicFinancials(FinnhubModel):
    """
    Key metrics (``/stock/metric``).

    ``metric`` is a flat mapping of metric name to value and ``series`` holds
    annual/quarterly time series; both vary by company and are kept untyped.
    """

    symbol: str
    metric: dict[str, Any] = Field(default_factory=dict)
    metric_type: str | None = Field(default=None, alias="metricType")
    series: dict[str, Any] | None = None


class RecommendationTrend(FinnhubModel):
    symbol: str
    period: str
    buy: int | None = None
    hold: int | None = None
    sell: int | None = None
    strong_buy: int | None = Field(default=None, alias="strongBuy")
    strong_sell: int | None = Field(default=None, alias="strongSell")


class PriceTarget(FinnhubModel):
    symbol: str
    target_high: float | None = Field(default=None, alias="targetHigh")
    target_low: float | None = Field(default=None, alias="targetLow")
    target_mean: float | None = Field(default=None, alias="targetMean")
    target_median: float | None = Field(default=None, alias="targetMedian")
    last_updated: str | None = Field(default=None, alias="lastUpdated")


class Earnings(FinnhubModel):
    """Historical earnings surprise."""

    period: str
    symbol: str
    actual: float | None = None
    estimate: float | None = None
    surprise: float | None = None
    surprise_percent: float | None = Field(default=None, alias="surprisePercent")
    year: int | None = None
    quarter: int | None = None


class InsiderTransaction(FinnhubModel):
    name: str
    share: int | None = None
    change: int | None = None
    filing_date: str | None = Field(default=None, alias="filingDate")
    transaction_date: str | None = Field(default=None, alias="transactionDate")
    transaction_price: float | None = Field(default=None, alias="transactionPrice")
    transaction_code: str | None = Field(default=None, alias="transactionCode")


class InsiderTransactions(FinnhubModel):
    symbol: str
    data: list[InsiderTransaction] = Field(default_factory=list)


__all__ = [
    "BasicFinancials",
    "BidAsk",
    "CompanyProfile",
    "Earnings",
    "InsiderTransaction",
    "InsiderTransactions",
    "MarketStatus",
    "PriceTarget",
    "Quote",
    "RecommendationTrend",
    "StockCandles",
    "StockSymbol",
    "SymbolLookup",
    "SymbolLookupResult",
]
