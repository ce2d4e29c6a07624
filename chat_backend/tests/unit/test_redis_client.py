# chat_backend/tests/unit/test_redis_client.py

import logging
from unittest.mock import AsyncMock, patch

import pytest
import redis
from fakeredis import aioredis

from chat_backend.infrastructure.redis_client import RedisClient


@pytest.fixture
def test_logger():
    logger = logging.getLogger('test_redis')
    logger.setLevel(logging.DEBUG)
    return logger


@pytest.fixture
def client(test_logger):
    return RedisClient(host="localhost", port=6379, logger=test_logger)


@pytest.mark.asyncio
async def test_redis_connect(client, caplog):
    caplog.set_level(logging.DEBUG)
    with patch('redis.asyncio.Redis', return_value=AsyncMock()) as mock_redis:
        mock_redis.return_value.ping.return_value = True
        await client.connect()

    assert client.client is not None
    assert f"Connected to Redis at {client.host}:{client.port}" in caplog.text


@pytest.mark.asyncio
async def test_redis_connect_failure_resets_client(client, caplog):
    broken = AsyncMock()
    broken.ping.side_effect = redis.ConnectionError("refused")

    with pytest.raises(redis.ConnectionError):
        await client.connect(broken)

    assert client.client is None
    assert "Failed to connect to Redis" in caplog.text


@pytest.mark.asyncio
async def test_ping_and_disconnect(client):
    await client.connect(aioredis.FakeRedis(decode_responses=True))
    assert await client.ping() is True

    await client.disconnect()

    assert client.client is None
    assert await client.ping() is False


def test_get_client_requires_connection(client):
    with pytest.raises(RuntimeError, match="not connected"):
        client.get_client()
