# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Protocol definitions for pluggable client components.

Available protocols:
- TransportProtocol: Interface for HTTP transports used by FinnhubClient

Supporting types:
- TransportResponse: Status, headers and body of a completed exchange
"""

from .transport import TransportProtocol, TransportResponse

__all__ = [
    "TransportProtocol",
    "TransportResponse",
]
