# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Credential injection for outgoing requests.

The API accepts the key either as the ``X-Finnhub-Token`` header or as the
``token`` query parameter. The injector attaches it in exactly one of those
places and strips any copy from the other, so a request never carries the
credential twice.
"""

from enum import Enum
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from .exceptions import ConfigurationError
from .types.request import REDACTED, PendingRequest

TOKEN_HEADER = "X-Finnhub-Token"
TOKEN_QUERY_PARAM = "token"


class AuthMethod(Enum):
    """Where the API key is placed on each request.

    - HEADER: ``X-Finnhub-Token`` request header. Default; keeps the key out
      of URLs, proxy logs and server access logs.
    - QUERY: ``token`` query parameter.
    """

    HEADER = "header"
    QUERY = "query"


class CredentialInjector:
    """
    Attaches the API key to a PendingRequest.

    ``apply`` is a pure function of its input: it never mutates the request
    and never fails. An empty key is rejected at construction time.

    Example:
        >>> injector = CredentialInjector("secret", AuthMethod.HEADER)
        >>> request = injector.apply(PendingRequest.build("GET", "/quote"))
        >>> request.headers["X-Finnhub-Token"]
        'secret'
    """

    def __init__(self, api_key: str, method: AuthMethod = AuthMethod.HEADER) -> None:
        if not isinstance(api_key, str) or not api_key.strip():
            raise ConfigurationError("api_key must be a non-empty string")
        if not isinstance(method, AuthMethod):
            raise ConfigurationError(f"Unknown auth method: {method!r}")
        self._api_key = api_key
        self._method = method

    @property
    def method(self) -> AuthMethod:
        return self._method

    def apply(self, request: PendingRequest) -> PendingRequest:
        """Return a copy of ``request`` carrying the credential exactly once."""
        if self._method is AuthMethod.HEADER:
            return (
                request.without_query(TOKEN_QUERY_PARAM)
                .without_headers(TOKEN_HEADER)
                .with_headers(**{TOKEN_HEADER: self._api_key})
            )
        return request.without_headers(TOKEN_HEADER).with_query(
            **{TOKEN_QUERY_PARAM: self._api_key}
        )

    def websocket_url(self, base_url: str) -> str:
        """Build the streaming URL; the WebSocket endpoint only accepts ``?token=``."""
        parts = urlsplit(base_url)
        query = [
            (k, v) for k, v in parse_qsl(parts.query) if k != TOKEN_QUERY_PARAM
        ]
        query.append((TOKEN_QUERY_PARAM, self._api_key))
        return urlunsplit(parts._replace(query=urlencode(query)))

    def scrub(self, text: str) -> str:
        """Mask every occurrence of the key in ``text``."""
        return text.replace(self._api_key, REDACTED)

    def __repr__(self) -> str:
        return f"CredentialInjector(method={self._method.value!r}, api_key='***')"


__all__ = [
    "TOKEN_HEADER",
    "TOKEN_QUERY_PARAM",
    "AuthMethod",
    "CredentialInjector",
]
