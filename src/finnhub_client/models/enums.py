# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Enumerations accepted as request parameters."""

from enum import Enum


class CandleResolution(str, Enum):
    """Candle width. Values are the wire representation."""

    ONE_MINUTE = "1"
    FIVE_MINUTES = "5"
    FIFTEEN_MINUTES = "15"
    THIRTY_MINUTES = "30"
    SIXTY_MINUTES = "60"
    DAILY = "D"
    WEEKLY = "W"
    MONTHLY = "M"


class NewsCategory(str, Enum):
    """Market news category."""

    GENERAL = "general"
    FOREX = "forex"
    CRYPTO = "crypto"
    MERGER = "merger"


__all__ = ["CandleResolution", "NewsCategory"]
