# chat_backend/realtime/session_registry.py
import logging
from typing import Optional

from chat_backend.domain.entities import Identity
from chat_backend.domain.events import UserOffline, UserOnline
from chat_backend.domain.exceptions import AuthError
from chat_backend.infrastructure.database import Database
from chat_backend.infrastructure.event_dispatcher import EventDispatcher
from chat_backend.infrastructure.presence import PresenceRegistry
from chat_backend.infrastructure.security import SecurityService
from chat_backend.realtime.scope import interactor_scope


class SessionRegistry:
    """Authenticates live connections and tracks which one represents each user."""

    def __init__(
        self,
        security_service: SecurityService,
        presence: PresenceRegistry,
        database: Database,
        event_dispatcher: EventDispatcher,
        logger: logging.Logger,
    ):
        self.security_service = security_service
        self.presence = presence
        self.database = database
        self.event_dispatcher = event_dispatcher
        self.logger = logger

    def authenticate(self, credential: Optional[str]) -> Identity:
        try:
            return self.security_service.verify_access_token(credential)
        except AuthError as e:
            self.logger.warning(f"Rejected live connection: {e.message}")
            raise

    async def on_connect(self, user_id: int, connection_id: str) -> None:
        # last connection wins
        previous = await self.presence.connect(user_id, connection_id)
        if previous and previous != connection_id:
            self.logger.info(
                f"User {user_id} superseded connection {previous} with {connection_id}"
            )
        async with interactor_scope(self.database, self.security_service) as scope:
            await scope.users.set_presence(user_id, is_online=True)
        self.logger.info(f"User {user_id} connected as {connection_id}")
        await self.event_dispatcher.dispatch(
            UserOnline(user_id=user_id, socket_id=connection_id)
        )

    async def on_disconnect(self, user_id: int, connection_id: str) -> bool:
        """False when this connection no longer represents the user."""
        if not await self.presence.disconnect(user_id, connection_id):
            self.logger.debug(
                f"Ignoring disconnect of {connection_id}, not current for user {user_id}"
            )
            return False
        async with interactor_scope(self.database, self.security_service) as scope:
            # a newer connection registered meanwhile keeps the user online
            replacement = await self.presence.lookup(user_id)
            if replacement is not None:
                self.logger.info(
                    f"User {user_id} reconnected as {replacement} before "
                    f"{connection_id} was released"
                )
                return True
            await scope.users.set_presence(user_id, is_online=False)
        self.logger.info(f"User {user_id} disconnected ({connection_id})")
        await self.event_dispatcher.dispatch(UserOffline(user_id=user_id))
        return True

    async def lookup(self, user_id: int) -> Optional[str]:
        return await self.presence.lookup(user_id)
