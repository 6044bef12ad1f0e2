# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Response models.

All models derive from FinnhubModel: wire-name aliases, optional fields
defaulting to ``None`` and unknown fields preserved.
"""

from .base import FinnhubModel
from .calendar import EarningsCalendar, EarningsRelease, IPOCalendar, IPOEvent
from .enums import CandleResolution, NewsCategory
from .market import (
    Country,
    CryptoSymbol,
    EconomicCode,
    ETFProfile,
    ETFProfileResponse,
    ForexRates,
    ForexSymbol,
)
from .news import (
    CompanyNews,
    MarketNews,
    NewsArticle,
    NewsBuzz,
    NewsSentiment,
    SentimentScore,
)
from .stock import (
    BasicFinancials,
    BidAsk,
    CompanyProfile,
    Earnings,
    InsiderTransaction,
    InsiderTransactions,
    MarketStatus,
    PriceTarget,
    Quote,
    RecommendationTrend,
    StockCandles,
    StockSymbol,
    SymbolLookup,
    SymbolLookupResult,
)
from .streaming import (
    STREAM_MESSAGE_ADAPTER,
    ControlFrame,
    ErrorMessage,
    NewsMessage,
    PingMessage,
    PressReleaseMessage,
    StreamMessage,
    TradeData,
    TradeMessage,
)

__all__ = [
    "STREAM_MESSAGE_ADAPTER",
    "BasicFinancials",
    "BidAsk",
    "CandleResolution",
    "CompanyNews",
    "CompanyProfile",
    "ControlFrame",
    "Country",
    "CryptoSymbol",
    "ETFProfile",
    "ETFProfileResponse",
    "Earnings",
    "EarningsCalendar",
    "EarningsRelease",
    "EconomicCode",
    "ErrorMessage",
    "FinnhubModel",
    "ForexRates",
    "ForexSymbol",
    "IPOCalendar",
    "IPOEvent",
    "InsiderTransaction",
    "InsiderTransactions",
    "MarketNews",
    "MarketStatus",
    "NewsArticle",
    "NewsBuzz",
    "NewsCategory",
    "NewsMessage",
    "NewsSentiment",
    "PingMessage",
    "PressReleaseMessage",
    "PriceTarget",
    "Quote",
    "RecommendationTrend",
    "SentimentScore",
    "StockCandles",
    "StockSymbol",
    "StreamMessage",
    "SymbolLookup",
    "SymbolLookupResult",
    "TradeData",
    "TradeMessage",
]
