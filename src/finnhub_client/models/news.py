# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""News and sentiment models."""

from pydantic import Field

from .base import FinnhubModel


class NewsArticle(FinnhubModel):
    """
    A news item.

    Shared by market news, company news and the news/press-release
    WebSocket pushes. ``related`` is a comma-separated symbol list and is
    frequently empty or missing.
    """

    id: int
    headline: str
    datetime: int | None = None
    category: str | None = None
    image: str | None = None
    related: str | None = None
    source: str | None = None
    summary: str | None = None
    url: str | None = None

    @property
    def related_symbols(self) -> list[str]:
        if not self.related:
            return []
        return [s.strip() for s in self.related.split(",") if s.strip()]


# Same payload, kept as distinct names for readability at call sites.
MarketNews = NewsArticle
CompanyNews = NewsArticle


class NewsBuzz(FinnhubModel):
    articles_in_last_week: int | None = Field(default=None, alias="articlesInLastWeek")
    buzz: float | None = None
    weekly_average: float | None = Field(default=None, alias="weeklyAverage")


class SentimentScore(FinnhubModel):
    bearish_percent: float | None = Field(default=None, alias="bearishPercent")
    bullish_percent: float | None = Field(default=None, alias="bullishPercent")


class NewsSentiment(FinnhubModel):
    symbol: str
    buzz: NewsBuzz | None = None
    company_news_score: float | None = Field(default=None, alias="companyNewsScore")
    sector_average_bullish_percent: float | None = Field(
        default=None, alias="sectorAverageBullishPercent"
    )
    sector_average_news_score: float | None = Field(
        default=None, alias="sectorAverageNewsScore"
    )
    sentiment: SentimentScore | None = None


__all__ = [
    "CompanyNews",
    "MarketNews",
    "NewsArticle",
    "NewsBuzz",
    "NewsSentiment",
    "SentimentScore",
]
