# chat_backend/infrastructure/presence.py
from abc import ABC, abstractmethod
from typing import Optional

from redis.exceptions import WatchError

from chat_backend.infrastructure.redis_client import RedisClient


class PresenceRegistry(ABC):
    """user id -> the live connection currently representing that user."""

    @abstractmethod
    async def connect(self, user_id: int, connection_id: str) -> Optional[str]:
        """Record the connection, returning the one it replaced, if any."""

    @abstractmethod
    async def disconnect(self, user_id: int, connection_id: str) -> bool:
        """Drop the entry only while it still maps to ``connection_id``."""

    @abstractmethod
    async def lookup(self, user_id: int) -> Optional[str]:
        pass

    @abstractmethod
    async def clear(self) -> None:
        pass


class InMemoryPresenceRegistry(PresenceRegistry):
    def __init__(self) -> None:
        self.entries: dict[int, str] = {}

    async def connect(self, user_id: int, connection_id: str) -> Optional[str]:
        previous = self.entries.get(user_id)
        self.entries[user_id] = connection_id
        return previous

    async def disconnect(self, user_id: int, connection_id: str) -> bool:
        if self.entries.get(user_id) != connection_id:
            return False
        del self.entries[user_id]
        return True

    async def lookup(self, user_id: int) -> Optional[str]:
        return self.entries.get(user_id)

    async def clear(self) -> None:
        self.entries.clear()


class RedisPresenceRegistry(PresenceRegistry):
    def __init__(self, redis_client: RedisClient, key: str = "presence:users"):
        self.redis_client = redis_client
        self.key = key

    async def connect(self, user_id: int, connection_id: str) -> Optional[str]:
        client = self.redis_client.get_client()
        async with client.pipeline(transaction=True) as pipe:
            pipe.hget(self.key, str(user_id))
            pipe.hset(self.key, str(user_id), connection_id)
            previous, _ = await pipe.execute()
        return previous

    async def disconnect(self, user_id: int, connection_id: str) -> bool:
        client = self.redis_client.get_client()
        async with client.pipeline(transaction=True) as pipe:
            try:
                await pipe.watch(self.key)
                current = await pipe.hget(self.key, str(user_id))
                if current != connection_id:
                    return False
                pipe.multi()
                pipe.hdel(self.key, str(user_id))
                await pipe.execute()
            except WatchError:
                # a newer connection claimed the entry in between
                return False
        return True

    async def lookup(self, user_id: int) -> Optional[str]:
        return await self.redis_client.get_client().hget(self.key, str(user_id))

    async def clear(self) -> None:
        await self.redis_client.get_client().delete(self.key)
