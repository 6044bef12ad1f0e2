# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
RedisBucketBackend for the admission controller

This module provides a token bucket backend stored in Redis, so that several
client instances (or processes) using the same API key can share one quota.

Key Features:
- Atomic refill + decrement in a single Lua script
- Server-side clock (``TIME``) so clients with skewed clocks agree
- Automatic script reload when Redis loses its script cache
- Keys expire once a bucket would have refilled completely
"""

import logging
import os
import time
from typing import Any, ClassVar

from redis.asyncio import Redis
from redis.exceptions import NoScriptError, RedisError

from ..exceptions import BackendError
from ..types.rate_limit import AdmissionResult, BucketConfig, BucketState
from .base import BaseBucketBackend, HealthCheckResult

logger = logging.getLogger(__name__)


# KEYS[1] = bucket hash
# ARGV[1] = capacity, ARGV[2] = refill rate (permits/s), ARGV[3] = consume (0|1)
# Returns {admitted, wait, permits, now} with floats as strings
TOKEN_BUCKET_SCRIPT = """
local key = KEYS[1]
local capacity = tonumber(ARGV[1])
local rate = tonumber(ARGV[2])
local consume = tonumber(ARGV[3])

local t = redis.call('TIME')
local now = tonumber(t[1]) + tonumber(t[2]) / 1000000

local stored = redis.call('HMGET', key, 'permits', 'ts')
local permits = tonumber(stored[1])
local ts = tonumber(stored[2])
if permits == nil or ts == nil then
  permits = capacity
  ts = now
end

local elapsed = now - ts
if elapsed < 0 then
  elapsed = 0
end
permits = math.min(capacity, permits + elapsed * rate)
if now > ts then
  ts = now
end

local admitted = 0
local wait = 0
if consume == 1 then
  if permits >= 1 - 1e-9 then
    permits = math.max(0, permits - 1)
    admitted = 1
  else
    wait = (1 - permits) / rate
  end
end

redis.call('HSET', key, 'permits', tostring(permits), 'ts', tostring(ts))
redis.call('EXPIRE', key, math.ceil(capacity / rate) + 1)

return {admitted, tostring(wait), tostring(permits), tostring(ts)}
"""


class RedisBucketBackend(BaseBucketBackend):
    """
    Token bucket storage backed by Redis.

    Every client pointed at the same Redis and namespace draws from the same
    buckets. The bucket parameters travel with each call, so all participants
    must agree on capacity and refill rate.
    """

    _lua_scripts: ClassVar[dict[str, str]] = {
        "token_bucket": TOKEN_BUCKET_SCRIPT,
    }

    def __init__(
        self,
        redis_url: str | None = None,
        redis_client: Any | None = None,
        namespace: str = "finnhub",
        max_connections: int = 10,
    ) -> None:
        """
        Initialize the Redis backend.

        Args:
            redis_url: Redis connection URL (env var fallback: REDIS_URL)
            redis_client: Pre-built async Redis client; takes precedence
            namespace: Key prefix for isolation
            max_connections: Connection pool size when building a client
        """
        super().__init__(namespace)
        self.redis_url = (
            redis_url or os.environ.get("REDIS_URL") or "redis://localhost:6379"
        )
        self.max_connections = max_connections
        self._redis: Any | None = redis_client
        self._owns_client = redis_client is None
        self._script_shas: dict[str, str] = {}

    def _bucket_key(self, key: str) -> str:
        return f"{self.namespace}:bucket:{key}"

    async def _ensure_connected(self) -> Any:
        """Return the Redis client, creating it on first use."""
        if self._redis is None:
            self._redis = Redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                max_connections=self.max_connections,
            )
            logger.debug(f"Connected RedisBucketBackend to {self.redis_url}")
        return self._redis

    async def _load_scripts(self) -> None:
        """Load Lua scripts into Redis."""
        if not self._redis:
            raise RuntimeError("Redis client not initialized")

        for script_name, script_source in self._lua_scripts.items():
            self._script_shas[script_name] = await self._redis.script_load(
                script_source
            )

    async def _evalsha_with_reload(
        self,
        redis_client: Any,
        script_name: str,
        num_keys: int,
        *args: Any,
    ) -> Any:
        """
        Execute EVALSHA with automatic script reload on NoScriptError.

        A Redis restart or ``SCRIPT FLUSH`` drops cached scripts. The scripts
        are reloaded and the call retried once.
        """
        script_sha = self._script_shas.get(script_name)
        if not script_sha:
            await self._load_scripts()
            script_sha = self._script_shas[script_name]

        try:
            return await redis_client.evalsha(script_sha, num_keys, *args)
        except NoScriptError:
            logger.warning(
                f"Script '{script_name}' not found in Redis (SHA: {script_sha}). "
                f"Reloading Lua scripts..."
            )
            self._script_shas.clear()
            await self._load_scripts()

            new_sha = self._script_shas[script_name]
            return await redis_client.evalsha(new_sha, num_keys, *args)

    async def _run_bucket(
        self, key: str, bucket: BucketConfig, consume: bool
    ) -> tuple[bool, float, float, float]:
        try:
            redis_client = await self._ensure_connected()
            result = await self._evalsha_with_reload(
                redis_client,
                "token_bucket",
                1,
                self._bucket_key(key),
                bucket.capacity,
                bucket.refill_rate,
                1 if consume else 0,
            )
        except RedisError as e:
            raise BackendError(f"Redis token bucket operation failed: {e}") from e

        admitted, wait, permits, ts = result
        return int(admitted) == 1, float(wait), float(permits), float(ts)

    async def try_acquire(self, key: str, bucket: BucketConfig) -> AdmissionResult:
        admitted, wait, permits, _ = await self._run_bucket(key, bucket, consume=True)
        return AdmissionResult(
            admitted=admitted, wait_time=wait, permits_remaining=permits
        )

    async def get_state(self, key: str, bucket: BucketConfig) -> BucketState:
        _, _, permits, ts = await self._run_bucket(key, bucket, consume=False)
        return BucketState(permits=permits, capacity=bucket.capacity, last_refill=ts)

    async def reset(self, key: str) -> None:
        try:
            redis_client = await self._ensure_connected()
            await redis_client.delete(self._bucket_key(key))
        except RedisError as e:
            raise BackendError(f"Failed to reset bucket '{key}': {e}") from e

    async def clear(self) -> None:
        """Delete every bucket under this namespace."""
        try:
            redis_client = await self._ensure_connected()
            keys = [
                k async for k in redis_client.scan_iter(match=self._bucket_key("*"))
            ]
            if keys:
                await redis_client.delete(*keys)
        except RedisError as e:
            raise BackendError(f"Failed to clear buckets: {e}") from e

    async def health_check(self) -> HealthCheckResult:
        """Perform health check on the backend."""
        try:
            redis_client = await self._ensure_connected()

            test_key = f"{self.namespace}:health_check_{int(time.time())}"
            await redis_client.set(test_key, "test", ex=60)
            result = await redis_client.get(test_key)
            await redis_client.delete(test_key)

            info = await redis_client.info()

            return HealthCheckResult(
                healthy=result == "test",
                backend_type="redis",
                namespace=self.namespace,
                metadata={
                    "redis_url": self.redis_url,
                    "redis_version": info.get("redis_version"),
                    "connected_clients": info.get("connected_clients"),
                },
            )
        except RedisError as e:
            return HealthCheckResult(
                healthy=False,
                backend_type="redis",
                namespace=self.namespace,
                error=str(e),
            )

    async def close(self) -> None:
        """Close the Redis client if this backend created it."""
        if self._redis is not None and self._owns_client:
            await self._redis.aclose()
            self._redis = None
        self._script_shas.clear()

    async def __aenter__(self) -> "RedisBucketBackend":
        await self._ensure_connected()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


__all__ = ["TOKEN_BUCKET_SCRIPT", "RedisBucketBackend"]
