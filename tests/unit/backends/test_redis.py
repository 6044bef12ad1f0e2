# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Unit tests for the Redis token bucket backend with a mocked client."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import NoScriptError

from finnhub_client.backends.redis import TOKEN_BUCKET_SCRIPT, RedisBucketBackend
from finnhub_client.exceptions import BackendError
from finnhub_client.types.rate_limit import BucketConfig

BUCKET = BucketConfig(capacity=30, refill_rate=30.0)


async def _aiter(items):
    for item in items:
        yield item


class TestRedisBucketBackend:
    @pytest.fixture
    def mock_redis(self):
        mock = AsyncMock()
        # Mock script_load to return a SHA
        mock.script_load.return_value = "mock_sha"
        # Lua return: [admitted, wait, permits, ts]
        mock.evalsha.return_value = [1, "0", "29", "1700000000.5"]
        return mock

    @pytest.fixture
    def backend(self, mock_redis):
        with patch(
            "finnhub_client.backends.redis.Redis.from_url",
            return_value=mock_redis,
        ):
            backend = RedisBucketBackend(
                redis_url="redis://localhost:6379",
                namespace="test",
            )
            # Inject mock redis directly to avoid connection logic in tests
            backend._redis = mock_redis
            return backend

    def test_init(self):
        backend = RedisBucketBackend(redis_url="redis://cache:6379", namespace="ns")
        assert backend.redis_url == "redis://cache:6379"
        assert backend.namespace == "ns"
        assert backend._redis is None

    def test_redis_url_from_env(self, monkeypatch):
        monkeypatch.setenv("REDIS_URL", "redis://from-env:6379/2")
        assert RedisBucketBackend().redis_url == "redis://from-env:6379/2"

    def test_redis_url_default(self, monkeypatch):
        monkeypatch.delenv("REDIS_URL", raising=False)
        assert RedisBucketBackend().redis_url == "redis://localhost:6379"

    @pytest.mark.asyncio
    async def test_ensure_connected_builds_client_once(self, mock_redis):
        with patch(
            "finnhub_client.backends.redis.Redis.from_url",
            return_value=mock_redis,
        ) as from_url:
            backend = RedisBucketBackend(redis_url="redis://localhost:6379")
            first = await backend._ensure_connected()
            second = await backend._ensure_connected()

        assert first is second is mock_redis
        from_url.assert_called_once()
        assert from_url.call_args.kwargs["decode_responses"] is True

    @pytest.mark.asyncio
    async def test_try_acquire_admitted(self, backend, mock_redis):
        """Test successful admission loads the script and passes bucket args."""
        result = await backend.try_acquire("default", BUCKET)

        assert result.admitted is True
        assert result.wait_time == 0.0
        assert result.permits_remaining == 29.0

        mock_redis.script_load.assert_awaited_once_with(TOKEN_BUCKET_SCRIPT)
        mock_redis.evalsha.assert_awaited_once_with(
            "mock_sha", 1, "test:bucket:default", 30, 30.0, 1
        )

    @pytest.mark.asyncio
    async def test_try_acquire_refused(self, backend, mock_redis):
        mock_redis.evalsha.return_value = [0, "0.0333", "0", "1700000000.5"]

        result = await backend.try_acquire("default", BUCKET)

        assert result.admitted is False
        assert result.wait_time == pytest.approx(0.0333)
        assert result.permits_remaining == 0.0

    @pytest.mark.asyncio
    async def test_get_state_does_not_consume(self, backend, mock_redis):
        mock_redis.evalsha.return_value = [0, "0", "12.5", "1700000000.25"]

        state = await backend.get_state("default", BUCKET)

        assert state.permits == 12.5
        assert state.capacity == 30
        assert state.last_refill == 1700000000.25
        assert mock_redis.evalsha.call_args.args[-1] == 0

    @pytest.mark.asyncio
    async def test_scripts_loaded_once(self, backend, mock_redis):
        await backend.try_acquire("default", BUCKET)
        await backend.try_acquire("default", BUCKET)
        assert mock_redis.script_load.await_count == 1

    @pytest.mark.asyncio
    async def test_reload_on_noscript(self, backend, mock_redis):
        """Test that a flushed script cache triggers a reload and one retry."""
        backend._script_shas = {"token_bucket": "stale_sha"}
        mock_redis.evalsha.side_effect = [
            NoScriptError("NOSCRIPT No matching script"),
            [1, "0", "29", "1700000000.5"],
        ]

        result = await backend.try_acquire("default", BUCKET)

        assert result.admitted is True
        assert mock_redis.evalsha.await_count == 2
        assert mock_redis.evalsha.call_args_list[0].args[0] == "stale_sha"
        assert mock_redis.evalsha.call_args_list[1].args[0] == "mock_sha"
        mock_redis.script_load.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_redis_error_becomes_backend_error(self, backend, mock_redis):
        mock_redis.evalsha.side_effect = RedisConnectionError("connection refused")

        with pytest.raises(BackendError, match="connection refused"):
            await backend.try_acquire("default", BUCKET)

    @pytest.mark.asyncio
    async def test_load_scripts_requires_client(self):
        backend = RedisBucketBackend()
        with pytest.raises(RuntimeError, match="not initialized"):
            await backend._load_scripts()

    @pytest.mark.asyncio
    async def test_reset(self, backend, mock_redis):
        await backend.reset("default")
        mock_redis.delete.assert_awaited_once_with("test:bucket:default")

    @pytest.mark.asyncio
    async def test_reset_failure(self, backend, mock_redis):
        mock_redis.delete.side_effect = RedisConnectionError("down")
        with pytest.raises(BackendError):
            await backend.reset("default")

    @pytest.mark.asyncio
    async def test_clear(self, backend, mock_redis):
        mock_redis.scan_iter = MagicMock(
            return_value=_aiter(["test:bucket:a", "test:bucket:b"])
        )

        await backend.clear()

        mock_redis.scan_iter.assert_called_once_with(match="test:bucket:*")
        mock_redis.delete.assert_awaited_once_with("test:bucket:a", "test:bucket:b")

    @pytest.mark.asyncio
    async def test_clear_empty(self, backend, mock_redis):
        mock_redis.scan_iter = MagicMock(return_value=_aiter([]))
        await backend.clear()
        mock_redis.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_health_check_healthy(self, backend, mock_redis):
        mock_redis.get.return_value = "test"
        mock_redis.info.return_value = {
            "redis_version": "7.2.4",
            "connected_clients": 3,
        }

        health = await backend.health_check()

        assert health.healthy is True
        assert health.backend_type == "redis"
        assert health.metadata["redis_version"] == "7.2.4"

    @pytest.mark.asyncio
    async def test_health_check_unhealthy(self, backend, mock_redis):
        mock_redis.set.side_effect = RedisConnectionError("down")

        health = await backend.health_check()

        assert health.healthy is False
        assert health.error == "down"

    @pytest.mark.asyncio
    async def test_close_owned_client(self, backend, mock_redis):
        await backend.close()
        mock_redis.aclose.assert_awaited_once()
        assert backend._redis is None

    @pytest.mark.asyncio
    async def test_close_leaves_injected_client_open(self, mock_redis):
        backend = RedisBucketBackend(redis_client=mock_redis)
        await backend.close()
        mock_redis.aclose.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_async_context_manager(self, mock_redis):
        with patch(
            "finnhub_client.backends.redis.Redis.from_url",
            return_value=mock_redis,
        ):
            async with RedisBucketBackend() as backend:
                assert backend._redis is mock_redis
        mock_redis.aclose.assert_awaited_once()
