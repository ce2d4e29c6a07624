# chat_backend/realtime/room_membership.py
import logging

from chat_backend.domain.entities import room_name
from chat_backend.infrastructure.connection_hub import ConnectionHub
from chat_backend.infrastructure.database import Database
from chat_backend.infrastructure.security import SecurityService
from chat_backend.realtime.scope import interactor_scope


class RoomMembershipManager:
    def __init__(
        self,
        hub: ConnectionHub,
        database: Database,
        security_service: SecurityService,
        logger: logging.Logger,
    ):
        self.hub = hub
        self.database = database
        self.security_service = security_service
        self.logger = logger

    async def join_all_chats(self, connection_id: str, user_id: int) -> list[int]:
        """Subscribe the connection to every chat the user participates in.

        Raises PersistenceError when the chats cannot be listed; the caller is
        expected to drop the connection.
        """
        async with interactor_scope(self.database, self.security_service) as scope:
            chat_ids = await scope.chats.get_chat_ids(user_id)
        for chat_id in chat_ids:
            self.hub.join(connection_id, room_name(chat_id))
        self.logger.debug(f"Connection {connection_id} joined {len(chat_ids)} rooms")
        return chat_ids

    def join(self, connection_id: str, chat_id: int) -> None:
        self.hub.join(connection_id, room_name(chat_id))

    def leave(self, connection_id: str, chat_id: int) -> None:
        self.hub.leave(connection_id, room_name(chat_id))
