# chat_backend/infrastructure/data_mappers.py
from typing import Generic, Protocol, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

ModelT = TypeVar("ModelT")
ModelT_contra = TypeVar("ModelT_contra", contravariant=True)


class DataMapper(Protocol[ModelT_contra]):
    async def insert(self, model: ModelT_contra):
        raise NotImplementedError

    async def delete(self, model: ModelT_contra):
        raise NotImplementedError

    async def update(self, model: ModelT_contra):
        raise NotImplementedError


class SessionMapper(Generic[ModelT]):
    """Maps pending unit-of-work changes onto an AsyncSession."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert(self, model: ModelT):
        self.session.add(model)
        # flush so generated ids are available to the caller
        await self.session.flush()

    async def delete(self, model: ModelT):
        await self.session.delete(model)
        await self.session.flush()

    async def update(self, model: ModelT):
        await self.session.merge(model)
        await self.session.flush()


class UserMapper(SessionMapper):
    pass


class ChatMapper(SessionMapper):
    pass


class MessageMapper(SessionMapper):
    pass
