# chat_backend/gateways/message_gateway.py
from typing import List, Optional

from sqlalchemy import DateTime, delete, func, literal, select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from chat_backend.gateways.interfaces import IMessageGateway
from chat_backend.infrastructure import models, schemas
from chat_backend.infrastructure.data_mappers import MessageMapper
from chat_backend.infrastructure.uow import UnitOfWork, UoWModel

_INSERT_BY_DIALECT = {
    "sqlite": sqlite_insert,
    "postgresql": postgresql_insert,
}


class MessageGateway(IMessageGateway):
    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        self.session = session
        self.uow = uow
        uow.register_mapper(models.Message, MessageMapper(session))

    def _insert_ignoring_duplicates(self, table):
        dialect = self.session.get_bind().dialect.name
        try:
            insert = _INSERT_BY_DIALECT[dialect]
        except KeyError:
            raise NotImplementedError(f"Read receipts are not supported on {dialect}")
        return insert(table)

    async def get_message(self, message_id: int) -> Optional[UoWModel]:
        stmt = (
            select(models.Message)
            .filter(models.Message.id == message_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        message = result.scalar_one_or_none()
        return UoWModel(message, self.uow) if message else None

    async def get_page(
        self, chat_id: int, skip: int, limit: int
    ) -> tuple[List[UoWModel], int]:
        visible = (
            models.Message.chat_id == chat_id,
            models.Message.is_deleted.is_(False),
        )
        total = (
            await self.session.execute(
                select(func.count(models.Message.id)).filter(*visible)
            )
        ).scalar_one()
        stmt = (
            select(models.Message)
            .filter(*visible)
            .order_by(models.Message.created_at.desc(), models.Message.id.desc())
            .offset(skip)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        # newest page first, oldest message first within the page
        messages = list(reversed(result.scalars().all()))
        return [UoWModel(message, self.uow) for message in messages], total

    async def create_message(
        self, message: schemas.MessageCreate, sender_id: int
    ) -> UoWModel:
        db_message = models.Message(
            chat_id=message.chat_id,
            sender_id=sender_id,
            message_type=message.message_type.value,
            content=message.content,
            file_url=message.file_url,
            file_name=message.file_name,
            file_size=message.file_size,
            is_edited=False,
            is_deleted=False,
        )
        self.uow.register_new(db_message)
        await self.uow.commit()
        await self.add_reader(db_message.id, sender_id)
        return await self.get_message(db_message.id)

    async def save(self, message: UoWModel) -> UoWModel:
        await self.uow.commit()
        return await self.get_message(message.id)

    async def add_reader(self, message_id: int, user_id: int) -> bool:
        """Add ``user_id`` to the message's readers; False if already present."""
        stmt = (
            self._insert_ignoring_duplicates(models.MessageRead.__table__)
            .values(message_id=message_id, user_id=user_id, read_at=models.utcnow())
            .on_conflict_do_nothing(index_elements=["message_id", "user_id"])
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def mark_chat_read(self, chat_id: int, user_id: int) -> int:
        unread = select(
            models.Message.id,
            literal(user_id),
            literal(models.utcnow(), DateTime(timezone=True)),
        ).where(
            models.Message.chat_id == chat_id,
            models.Message.sender_id != user_id,
        )
        stmt = (
            self._insert_ignoring_duplicates(models.MessageRead.__table__)
            .from_select(["message_id", "user_id", "read_at"], unread)
            .on_conflict_do_nothing(index_elements=["message_id", "user_id"])
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def get_latest_message_id(self, chat_id: int) -> Optional[int]:
        stmt = select(func.max(models.Message.id)).where(
            models.Message.chat_id == chat_id
        )
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def delete_by_sender(self, sender_id: int) -> List[int]:
        """Hard-delete every message of ``sender_id``; returns the chats touched."""
        own_messages = select(models.Message.id).where(
            models.Message.sender_id == sender_id
        )
        chat_ids = list(
            (
                await self.session.execute(
                    select(models.Message.chat_id)
                    .where(models.Message.sender_id == sender_id)
                    .distinct()
                )
            )
            .scalars()
            .all()
        )
        await self.session.execute(
            update(models.Chat)
            .where(models.Chat.last_message_id.in_(own_messages))
            .values(last_message_id=None)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(
            delete(models.MessageRead)
            .where(models.MessageRead.message_id.in_(own_messages))
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(
            delete(models.Message).where(models.Message.sender_id == sender_id)
        )
        return chat_ids

    async def count(self) -> int:
        return (
            await self.session.execute(select(func.count(models.Message.id)))
        ).scalar_one()
