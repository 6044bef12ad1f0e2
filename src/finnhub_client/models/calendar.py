# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Earnings and IPO calendar models."""

from pydantic import Field

from .base import FinnhubModel


class EarningsRelease(FinnhubModel):
    symbol: str | None = None
    date: str | None = None
    hour: str | None = None
    year: int | None = None
    quarter: int | None = None
    eps_estimate: float | None = Field(default=None, alias="epsEstimate")
    eps_actual: float | None = Field(default=None, alias="epsActual")
    revenue_estimate: float | None = Field(default=None, alias="revenueEstimate")
    revenue_actual: float | None = Field(default=None, alias="revenueActual")


class EarningsCalendar(FinnhubModel):
    earnings_calendar: list[EarningsRelease] = Field(
        default_factory=list, alias="earningsCalendar"
    )


class IPOEvent(FinnhubModel):
    symbol: str | None = None
    date: str | None = None
    exchange: str | None = None
    name: str | None = None
    number_of_shares: float | None = Field(default=None, alias="numberOfShares")
    price: str | None = None
    status: str | None = None
    total_shares_value: float | None = Field(default=None, alias="totalSharesValue")


class IPOCalendar(FinnhubModel):
    ipo_calendar: list[IPOEvent] = Field(default_factory=list, alias="ipoCalendar")


__all__ = [
    "EarningsCalendar",
    "EarningsRelease",
    "IPOCalendar",
    "IPOEvent",
]
