# chat_backend/interactors/chat_interactor.py
from chat_backend.domain.entities import DEFAULT_GROUP_NAME, direct_chat_key
from chat_backend.domain.exceptions import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from chat_backend.gateways.interfaces import IChatGateway, IUserGateway
from chat_backend.infrastructure import schemas
from chat_backend.infrastructure.uow import UoWModel

MIN_DIRECT_PARTICIPANTS = 2
MIN_GROUP_PARTICIPANTS = 3


def min_participants(is_group_chat: bool) -> int:
    return MIN_GROUP_PARTICIPANTS if is_group_chat else MIN_DIRECT_PARTICIPANTS


class ChatInteractor:
    def __init__(self, chat_gateway: IChatGateway, user_gateway: IUserGateway):
        self.chat_gateway = chat_gateway
        self.user_gateway = user_gateway

    async def _participant_chat(self, chat_id: int, user_id: int) -> UoWModel:
        chat = await self.chat_gateway.get_chat_for_participant(chat_id, user_id)
        if not chat:
            raise NotFoundError("Chat not found")
        return chat

    async def create_chat(
        self, chat: schemas.ChatCreate, user_id: int
    ) -> tuple[schemas.Chat, bool]:
        """Returns the chat and whether it was newly created."""
        participant_ids = list(dict.fromkeys([user_id, *chat.participant_ids]))
        participants = await self.user_gateway.get_users_by_ids(participant_ids)
        if len(participants) != len(participant_ids):
            raise NotFoundError("One or more participants not found")

        if not chat.is_group_chat:
            if len(participant_ids) != MIN_DIRECT_PARTICIPANTS:
                raise ValidationError(
                    "One-on-one chats require exactly one other participant"
                )
            key = direct_chat_key(*participant_ids)
            existing = await self.chat_gateway.get_direct_chat(key)
            if existing:
                return schemas.Chat.model_validate(existing._model), False
            new_chat = await self.chat_gateway.create_chat(
                participants, is_group_chat=False, name=chat.name, direct_key=key
            )
            return schemas.Chat.model_validate(new_chat._model), True

        if len(participant_ids) < MIN_GROUP_PARTICIPANTS:
            raise ValidationError("Group chats require at least 3 participants")
        new_chat = await self.chat_gateway.create_chat(
            participants,
            is_group_chat=True,
            name=chat.name or DEFAULT_GROUP_NAME,
            admin_id=user_id,
        )
        return schemas.Chat.model_validate(new_chat._model), True

    async def get_chats(self, user_id: int) -> list[schemas.Chat]:
        chats = await self.chat_gateway.get_all(user_id)
        return [schemas.Chat.model_validate(chat._model) for chat in chats]

    async def get_chat(self, chat_id: int, user_id: int) -> schemas.Chat:
        chat = await self._participant_chat(chat_id, user_id)
        return schemas.Chat.model_validate(chat._model)

    async def is_participant(self, chat_id: int, user_id: int) -> bool:
        return await self.chat_gateway.is_participant(chat_id, user_id)

    async def get_chat_ids(self, user_id: int) -> list[int]:
        return await self.chat_gateway.get_chat_ids(user_id)

    async def update_chat(
        self, chat_id: int, chat_update: schemas.ChatUpdate, user_id: int
    ) -> schemas.Chat:
        chat = await self._participant_chat(chat_id, user_id)
        if chat.is_group_chat and chat.admin_id != user_id:
            raise AuthorizationError("Only group admin can update chat")
        if chat_update.name:
            chat.name = chat_update.name.strip()
        updated_chat = await self.chat_gateway.save(chat)
        return schemas.Chat.model_validate(updated_chat._model)

    async def delete_chat(self, chat_id: int, user_id: int) -> None:
        chat = await self._participant_chat(chat_id, user_id)
        if chat.is_group_chat and chat.admin_id != user_id:
            raise AuthorizationError("Only group admin can delete chat")
        await self.chat_gateway.delete_chat(chat_id)

    async def add_participant(
        self, chat_id: int, new_user_id: int, current_user_id: int
    ) -> schemas.Chat:
        chat = await self._participant_chat(chat_id, current_user_id)
        if not chat.is_group_chat:
            raise ValidationError("Cannot add participants to one-on-one chat")
        if chat.admin_id != current_user_id:
            raise AuthorizationError("Only group admin can add participants")
        if new_user_id in chat.participant_ids:
            raise ValidationError("User is already a participant")
        user = await self.user_gateway.get_user(new_user_id)
        if not user:
            raise NotFoundError("User not found")
        updated_chat = await self.chat_gateway.add_participant(chat, user)
        return schemas.Chat.model_validate(updated_chat._model)

    async def remove_participant(
        self, chat_id: int, removed_user_id: int, current_user_id: int
    ) -> schemas.Chat:
        chat = await self._participant_chat(chat_id, current_user_id)
        if not chat.is_group_chat:
            raise ValidationError("Cannot remove participants from one-on-one chat")
        if chat.admin_id != current_user_id and removed_user_id != current_user_id:
            raise AuthorizationError("Only group admin can remove participants")
        if removed_user_id == chat.admin_id:
            raise ValidationError("Cannot remove group admin")
        if removed_user_id not in chat.participant_ids:
            raise NotFoundError("User is not a participant")
        if len(chat.participant_ids) - 1 < MIN_GROUP_PARTICIPANTS:
            raise ValidationError("Group chats require at least 3 participants")
        await self.chat_gateway.remove_participant(chat_id, removed_user_id)
        updated_chat = await self.chat_gateway.get_chat(chat_id)
        return schemas.Chat.model_validate(updated_chat._model)
