"""
Shared fixtures for benchmark tests.
"""

import httpx
import pytest

from finnhub_client import ClientConfig, FinnhubClient, HttpxTransport
from finnhub_client.types.rate_limit import BucketConfig, RateLimitStrategy

QUOTE_BODY = b'{"c":189.5,"d":1.2,"dp":0.64,"h":190.1,"l":187.9,"o":188.0,"pc":188.3}'


def instant_handler(request: httpx.Request) -> httpx.Response:
    """Answer every request immediately with a quote payload."""
    return httpx.Response(200, content=QUOTE_BODY)


@pytest.fixture
def unbounded_bucket():
    """Bucket large enough that admission never waits."""
    return BucketConfig(capacity=1_000_000, refill_rate=1_000_000.0)


@pytest.fixture
async def benchmark_client():
    """Client over an in-process transport with a practically unlimited bucket."""
    config = ClientConfig(
        api_key="benchmark-key",
        rate_limit_strategy=RateLimitStrategy.CUSTOM,
        capacity=1_000_000,
        refill_rate=1_000_000.0,
        metrics_enabled=False,
    )
    transport = HttpxTransport.from_config(
        config, transport=httpx.MockTransport(instant_handler)
    )
    client = FinnhubClient(config, transport=transport)
    yield client
    await client.aclose()
    await transport.aclose()
