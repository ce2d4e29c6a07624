# chat_backend/gateways/chat_gateway.py
from typing import List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from chat_backend.gateways.interfaces import IChatGateway
from chat_backend.infrastructure import models
from chat_backend.infrastructure.data_mappers import ChatMapper
from chat_backend.infrastructure.uow import UnitOfWork, UoWModel


class ChatGateway(IChatGateway):
    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        self.session = session
        self.uow = uow
        uow.register_mapper(models.Chat, ChatMapper(session))

    @staticmethod
    def _participant_filter(user_id: int):
        return models.Chat.participants.any(models.User.id == user_id)

    async def _one(self, stmt) -> Optional[UoWModel]:
        result = await self.session.execute(
            stmt.execution_options(populate_existing=True)
        )
        chat = result.scalar_one_or_none()
        return UoWModel(chat, self.uow) if chat else None

    async def get_chat(self, chat_id: int) -> Optional[UoWModel]:
        return await self._one(select(models.Chat).filter(models.Chat.id == chat_id))

    async def get_chat_for_participant(
        self, chat_id: int, user_id: int
    ) -> Optional[UoWModel]:
        return await self._one(
            select(models.Chat).filter(
                models.Chat.id == chat_id, self._participant_filter(user_id)
            )
        )

    async def is_participant(self, chat_id: int, user_id: int) -> bool:
        stmt = select(models.chat_participants.c.chat_id).where(
            models.chat_participants.c.chat_id == chat_id,
            models.chat_participants.c.user_id == user_id,
        )
        return (await self.session.execute(stmt)).first() is not None

    async def get_direct_chat(self, direct_key: str) -> Optional[UoWModel]:
        return await self._one(
            select(models.Chat).filter(models.Chat.direct_key == direct_key)
        )

    async def get_all(self, user_id: int) -> List[UoWModel]:
        stmt = (
            select(models.Chat)
            .filter(self._participant_filter(user_id))
            .order_by(models.Chat.updated_at.desc(), models.Chat.id.desc())
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return [UoWModel(chat, self.uow) for chat in result.scalars().all()]

    async def get_chat_ids(self, user_id: int) -> List[int]:
        stmt = (
            select(models.chat_participants.c.chat_id)
            .where(models.chat_participants.c.user_id == user_id)
            .order_by(models.chat_participants.c.chat_id)
        )
        return list((await self.session.execute(stmt)).scalars().all())

    async def get_participant_ids(self, chat_id: int) -> List[int]:
        stmt = (
            select(models.chat_participants.c.user_id)
            .where(models.chat_participants.c.chat_id == chat_id)
            .order_by(models.chat_participants.c.user_id)
        )
        return list((await self.session.execute(stmt)).scalars().all())

    async def get_page(self, skip: int, limit: int) -> tuple[List[UoWModel], int]:
        total = await self.count()
        stmt = (
            select(models.Chat)
            .order_by(models.Chat.updated_at.desc(), models.Chat.id.desc())
            .offset(skip)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return [UoWModel(chat, self.uow) for chat in result.scalars().all()], total

    async def create_chat(
        self,
        participants: List[UoWModel],
        is_group_chat: bool,
        name: Optional[str] = None,
        admin_id: Optional[int] = None,
        direct_key: Optional[str] = None,
    ) -> UoWModel:
        db_chat = models.Chat(
            name=name,
            is_group_chat=is_group_chat,
            admin_id=admin_id,
            direct_key=direct_key,
            participants=[user._model for user in participants],
        )
        self.uow.register_new(db_chat)
        await self.uow.commit()
        # reload so relationships are populated for serialization
        return await self.get_chat(db_chat.id)

    async def save(self, chat: UoWModel) -> UoWModel:
        await self.uow.commit()
        return await self.get_chat(chat.id)

    async def add_participant(self, chat: UoWModel, user: UoWModel) -> UoWModel:
        chat._model.participants.append(user._model)
        self.uow.register_dirty(chat)
        return await self.save(chat)

    async def remove_participant(self, chat_id: int, user_id: int) -> None:
        await self.session.execute(
            delete(models.chat_participants).where(
                models.chat_participants.c.chat_id == chat_id,
                models.chat_participants.c.user_id == user_id,
            )
        )
        await self._touch(chat_id)

    async def set_admin(self, chat_id: int, admin_id: int) -> None:
        await self.session.execute(
            update(models.Chat)
            .where(models.Chat.id == chat_id)
            .values(admin_id=admin_id)
        )

    async def set_last_message(self, chat_id: int, message_id: Optional[int]) -> None:
        await self.session.execute(
            update(models.Chat)
            .where(models.Chat.id == chat_id)
            .values(last_message_id=message_id)
        )

    async def _touch(self, chat_id: int) -> None:
        await self.session.execute(
            update(models.Chat)
            .where(models.Chat.id == chat_id)
            .values(updated_at=models.utcnow())
        )

    async def delete_chat(self, chat_id: int) -> None:
        message_ids = select(models.Message.id).where(models.Message.chat_id == chat_id)
        await self.set_last_message(chat_id, None)
        await self.session.execute(
            delete(models.MessageRead)
            .where(models.MessageRead.message_id.in_(message_ids))
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(
            delete(models.Message).where(models.Message.chat_id == chat_id)
        )
        await self.session.execute(
            delete(models.chat_participants).where(
                models.chat_participants.c.chat_id == chat_id
            )
        )
        await self.session.execute(
            delete(models.Chat).where(models.Chat.id == chat_id)
        )

    async def count(self, is_group_chat: Optional[bool] = None) -> int:
        stmt = select(func.count(models.Chat.id))
        if is_group_chat is not None:
            stmt = stmt.filter(models.Chat.is_group_chat.is_(is_group_chat))
        return (await self.session.execute(stmt)).scalar_one()
