# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Forex, crypto, ETF and economic data models."""

from pydantic import Field

from .base import FinnhubModel


class ForexRates(FinnhubModel):
    base: str
    quote: dict[str, float] = Field(default_factory=dict)


class ForexSymbol(FinnhubModel):
    description: str
    display_symbol: str = Field(alias="displaySymbol")
    symbol: str


class CryptoSymbol(FinnhubModel):
    description: str
    display_symbol: str = Field(alias="displaySymbol")
    symbol: str


class ETFProfile(FinnhubModel):
    name: str | None = None
    asset_class: str | None = Field(default=None, alias="assetClass")
    investment_segment: str | None = Field(default=None, alias="investmentSegment")
    aum: float | None = None
    nav: float | None = None
    nav_currency: str | None = Field(default=None, alias="navCurrency")
    expense_ratio: float | None = Field(default=None, alias="expenseRatio")
    tracking_index: str | None = Field(default=None, alias="trackingIndex")
    etf_company: str | None = Field(default=None, alias="etfCompany")
    domicile: str | None = None
    inception_date: str | None = Field(default=None, alias="inceptionDate")
    website: str | None = None
    isin: str | None = None
    cusip: str | None = None
    description: str | None = None
    is_inverse: bool | None = Field(default=None, alias="isInverse")
    is_leveraged: bool | None = Field(default=None, alias="isLeveraged")
    leverage_factor: float | None = Field(default=None, alias="leverageFactor")
    dividend_yield: float | None = Field(default=None, alias="dividendYield")


class ETFProfileResponse(FinnhubModel):
    """``/etf/profile`` wraps the profile in a ``profile`` object."""

    symbol: str | None = None
    profile: ETFProfile | None = None


class EconomicCode(FinnhubModel):
    code: str
    country: str | None = None
    name: str | None = None
    unit: str | None = None


class Country(FinnhubModel):
    country: str
    code2: str | None = None
    code3: str | None = None
    code_no: str | None = Field(default=None, alias="codeNo")
    currency: str | None = None
    currency_code: str | None = Field(default=None, alias="currencyCode")
    region: str | None = None
    sub_region: str | None = Field(default=None, alias="subRegion")
    rating: str | None = None
    default_spread: float | None = Field(default=None, alias="defaultSpread")
    country_risk_premium: float | None = Field(
        default=None, alias="countryRiskPremium"
    )
    equity_risk_premium: float | None = Field(default=None, alias="equityRiskPremium")


__all__ = [
    "Country",
    "CryptoSymbol",
    "ETFProfile",
    "ETFProfileResponse",
    "EconomicCode",
    "ForexRates",
    "ForexSymbol",
]
