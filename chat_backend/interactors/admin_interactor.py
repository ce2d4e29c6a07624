# chat_backend/interactors/admin_interactor.py
from chat_backend.domain.exceptions import NotFoundError, ValidationError
from chat_backend.gateways.interfaces import IChatGateway, IMessageGateway, IUserGateway
from chat_backend.infrastructure import schemas
from chat_backend.interactors.chat_interactor import min_participants


class AdminInteractor:
    def __init__(
        self,
        user_gateway: IUserGateway,
        chat_gateway: IChatGateway,
        message_gateway: IMessageGateway,
    ):
        self.user_gateway = user_gateway
        self.chat_gateway = chat_gateway
        self.message_gateway = message_gateway

    async def get_users(self, page: int, limit: int) -> schemas.UserPage:
        users, total = await self.user_gateway.get_page((page - 1) * limit, limit)
        return schemas.UserPage(
            users=[schemas.User.model_validate(user._model) for user in users],
            pagination=schemas.Pagination.build(page, limit, total),
        )

    async def get_chats(self, page: int, limit: int) -> schemas.ChatPage:
        chats, total = await self.chat_gateway.get_page((page - 1) * limit, limit)
        return schemas.ChatPage(
            chats=[schemas.Chat.model_validate(chat._model) for chat in chats],
            pagination=schemas.Pagination.build(page, limit, total),
        )

    async def delete_user(self, user_id: int, admin_id: int) -> None:
        """Remove a user along with their messages and chat memberships.

        Chats that drop below their participant minimum are deleted; a group
        whose admin is removed is handed to the lowest remaining user id.
        """
        if user_id == admin_id:
            raise ValidationError("You cannot delete your own account")
        if not await self.user_gateway.get_user(user_id):
            raise NotFoundError("User not found")

        touched_chat_ids = set(await self.message_gateway.delete_by_sender(user_id))
        deleted_chat_ids = set()

        for chat_id in await self.chat_gateway.get_chat_ids(user_id):
            chat = await self.chat_gateway.get_chat(chat_id)
            is_group_chat, admin = chat.is_group_chat, chat.admin_id
            await self.chat_gateway.remove_participant(chat_id, user_id)
            remaining = await self.chat_gateway.get_participant_ids(chat_id)
            if len(remaining) < min_participants(is_group_chat):
                await self.chat_gateway.delete_chat(chat_id)
                deleted_chat_ids.add(chat_id)
            elif is_group_chat and admin == user_id:
                await self.chat_gateway.set_admin(chat_id, remaining[0])

        for chat_id in touched_chat_ids - deleted_chat_ids:
            latest = await self.message_gateway.get_latest_message_id(chat_id)
            await self.chat_gateway.set_last_message(chat_id, latest)

        await self.user_gateway.delete_user(user_id)

    async def delete_chat(self, chat_id: int) -> None:
        if not await self.chat_gateway.get_chat(chat_id):
            raise NotFoundError("Chat not found")
        await self.chat_gateway.delete_chat(chat_id)

    async def get_stats(self) -> schemas.Stats:
        total_chats = await self.chat_gateway.count()
        group_chats = await self.chat_gateway.count(is_group_chat=True)
        return schemas.Stats(
            total_users=await self.user_gateway.count(),
            online_users=await self.user_gateway.count(online_only=True),
            total_chats=total_chats,
            total_messages=await self.message_gateway.count(),
            group_chats=group_chats,
            one_on_one_chats=total_chats - group_chats,
        )
