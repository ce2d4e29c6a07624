# chat_backend/infrastructure/redis_client.py
import logging

import redis.asyncio as redis


class RedisClient:
    """Owns the redis connection used by the redis presence backend."""

    def __init__(self, host: str, port: int, logger: logging.Logger, db: int = 0):
        self.host = host
        self.port = port
        self.db = db
        self.client: redis.Redis | None = None
        self.logger = logger

    @classmethod
    def from_config(cls, config, logger: logging.Logger) -> "RedisClient":
        return cls(config.REDIS_HOST, config.REDIS_PORT, logger)

    async def connect(self, client: redis.Redis | None = None):
        self.client = client or redis.Redis(
            host=self.host,
            port=self.port,
            db=self.db,
            decode_responses=True,
        )
        try:
            await self.client.ping()
        except redis.ConnectionError as e:
            self.logger.error(
                f"Failed to connect to Redis at {self.host}:{self.port}: {e!s}"
            )
            self.client = None
            raise
        self.logger.info(f"Connected to Redis at {self.host}:{self.port}")

    async def ping(self) -> bool:
        if self.client is None:
            return False
        try:
            return bool(await self.client.ping())
        except redis.RedisError as e:
            self.logger.warning(f"Redis ping failed: {e!s}")
            return False

    async def disconnect(self):
        if self.client:
            await self.client.aclose()
            self.client = None
            self.logger.info("Disconnected from Redis")

    def get_client(self) -> redis.Redis:
        if self.client is None:
            raise RuntimeError("Redis client not connected")
        return self.client
