# chat_backend/interactors/message_interactor.py
from chat_backend.domain.entities import DELETED_MESSAGE_PLACEHOLDER, MessageType
from chat_backend.domain.exceptions import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from chat_backend.gateways.interfaces import IChatGateway, IMessageGateway
from chat_backend.infrastructure import schemas
from chat_backend.infrastructure.uow import UoWModel


class MessageInteractor:
    def __init__(self, message_gateway: IMessageGateway, chat_gateway: IChatGateway):
        self.message_gateway = message_gateway
        self.chat_gateway = chat_gateway

    async def _require_participant(self, chat_id: int, user_id: int) -> None:
        if not await self.chat_gateway.is_participant(chat_id, user_id):
            raise NotFoundError("Chat not found or you are not a participant")

    async def _own_message(self, message_id: int, user_id: int, action: str) -> UoWModel:
        message = await self.message_gateway.get_message(message_id)
        if not message:
            raise NotFoundError("Message not found")
        if message.sender_id != user_id:
            raise AuthorizationError(f"You can only {action} your own messages")
        return message

    async def send_message(
        self, message: schemas.MessageCreate, user_id: int
    ) -> schemas.Message:
        await self._require_participant(message.chat_id, user_id)
        new_message = await self.message_gateway.create_message(message, user_id)
        await self.chat_gateway.set_last_message(message.chat_id, new_message.id)
        return schemas.Message.model_validate(new_message._model)

    async def get_messages(
        self, chat_id: int, user_id: int, page: int = 1, limit: int = 50
    ) -> schemas.MessagePage:
        await self._require_participant(chat_id, user_id)
        messages, total = await self.message_gateway.get_page(
            chat_id, (page - 1) * limit, limit
        )
        return schemas.MessagePage(
            messages=[schemas.Message.model_validate(m._model) for m in messages],
            pagination=schemas.Pagination.build(page, limit, total),
        )

    async def edit_message(
        self, message_id: int, content: str, user_id: int
    ) -> schemas.Message:
        message = await self.message_gateway.get_message(message_id)
        if not message or message.is_deleted:
            raise NotFoundError("Message not found")
        if message.sender_id != user_id:
            raise AuthorizationError("You can only edit your own messages")
        if message.message_type != MessageType.TEXT.value:
            raise ValidationError("Only text messages can be edited")

        message.content = content
        message.is_edited = True
        updated_message = await self.message_gateway.save(message)
        return schemas.Message.model_validate(updated_message._model)

    async def delete_message(self, message_id: int, user_id: int) -> schemas.Message:
        message = await self._own_message(message_id, user_id, "delete")
        message.is_deleted = True
        message.content = DELETED_MESSAGE_PLACEHOLDER
        deleted_message = await self.message_gateway.save(message)
        return schemas.Message.model_validate(deleted_message._model)

    async def mark_read(
        self, message_id: int, user_id: int
    ) -> tuple[schemas.Message, bool]:
        """Returns the message and whether this call added the reader."""
        message = await self.message_gateway.get_message(message_id)
        if not message:
            raise NotFoundError("Message not found")
        if not await self.chat_gateway.is_participant(message.chat_id, user_id):
            raise AuthorizationError("You are not a participant of this chat")

        newly_read = await self.message_gateway.add_reader(message_id, user_id)
        if newly_read:
            message = await self.message_gateway.get_message(message_id)
        return schemas.Message.model_validate(message._model), newly_read

    async def mark_chat_read(self, chat_id: int, user_id: int) -> int:
        await self._require_participant(chat_id, user_id)
        return await self.message_gateway.mark_chat_read(chat_id, user_id)
