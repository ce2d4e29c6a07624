# chat_backend/realtime/event_router.py
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from pydantic import BaseModel, Field
from pydantic import ValidationError as PayloadError

from chat_backend.domain.entities import LiveConnection
from chat_backend.domain.events import (
    MessageCreated,
    MessageDeleted,
    MessageEdited,
    MessageRead,
    TypingChanged,
)
from chat_backend.domain.exceptions import (
    AuthorizationError,
    ChatError,
    PersistenceError,
    ValidationError,
)
from chat_backend.infrastructure import schemas
from chat_backend.infrastructure.connection_hub import ConnectionHub
from chat_backend.infrastructure.database import Database
from chat_backend.infrastructure.event_dispatcher import EventDispatcher
from chat_backend.infrastructure.security import SecurityService
from chat_backend.realtime.room_membership import RoomMembershipManager
from chat_backend.realtime.scope import interactor_scope

PayloadT = TypeVar("PayloadT", bound=BaseModel)
Handler = Callable[[LiveConnection, dict[str, Any]], Awaitable[None]]


class LiveFrame(BaseModel):
    event: str
    data: dict[str, Any] = Field(default_factory=dict)


def parse_payload(model: type[PayloadT], data: dict[str, Any]) -> PayloadT:
    try:
        return model.model_validate(data)
    except PayloadError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"])
        detail = error["msg"].removeprefix("Value error, ")
        raise ValidationError(f"{field}: {detail}" if field else detail) from e


class RealtimeEventRouter:
    """Validates inbound live events, persists their effect, then fans out.

    Broadcasts happen only after the transaction commits; every failure is
    reported to the originating connection alone.
    """

    def __init__(
        self,
        hub: ConnectionHub,
        database: Database,
        security_service: SecurityService,
        event_dispatcher: EventDispatcher,
        membership: RoomMembershipManager,
        logger: logging.Logger,
    ):
        self.hub = hub
        self.database = database
        self.security_service = security_service
        self.event_dispatcher = event_dispatcher
        self.membership = membership
        self.logger = logger
        self.handlers: dict[str, Handler] = {
            "message:send": self.on_message_send,
            "message:edit": self.on_message_edit,
            "message:delete": self.on_message_delete,
            "message:read": self.on_message_read,
            "typing:start": self.on_typing_start,
            "typing:stop": self.on_typing_stop,
            "chat:join": self.on_chat_join,
            "chat:leave": self.on_chat_leave,
        }

    def scope(self):
        return interactor_scope(self.database, self.security_service)

    async def handle(self, connection: LiveConnection, raw: str) -> None:
        try:
            frame = LiveFrame.model_validate_json(raw)
        except PayloadError:
            await self.emit_error(connection, "Malformed event frame")
            return
        await self.dispatch(connection, frame.event, frame.data)

    async def dispatch(
        self, connection: LiveConnection, event: str, data: dict[str, Any]
    ) -> None:
        handler = self.handlers.get(event)
        if handler is None:
            await self.emit_error(connection, f"Unknown event: {event}")
            return
        try:
            await handler(connection, data)
        except PersistenceError as e:
            self.logger.exception(
                f"Storage failure while handling {event} for user {connection.user_id}"
            )
            await self.emit_error(connection, e.message)
        except ChatError as e:
            self.logger.info(
                f"Rejected {event} from user {connection.user_id}: {e.message}"
            )
            await self.emit_error(connection, e.message)

    async def emit_error(self, connection: LiveConnection, message: str) -> None:
        await self.hub.emit_to_connection(
            connection.connection_id, "error", {"message": message}
        )

    async def on_message_send(self, connection: LiveConnection, data: dict[str, Any]):
        payload = parse_payload(schemas.MessageCreate, data)
        async with self.scope() as scope:
            message = await scope.messages.send_message(payload, connection.user_id)
        await self.event_dispatcher.dispatch(
            MessageCreated(
                chat_id=message.chat_id,
                message=message.model_dump(mode="json", by_alias=True),
            )
        )

    async def on_message_edit(self, connection: LiveConnection, data: dict[str, Any]):
        payload = parse_payload(schemas.EditMessagePayload, data)
        async with self.scope() as scope:
            message = await scope.messages.edit_message(
                payload.message_id, payload.content, connection.user_id
            )
        await self.event_dispatcher.dispatch(
            MessageEdited(
                chat_id=message.chat_id,
                message=message.model_dump(mode="json", by_alias=True),
            )
        )

    async def on_message_delete(
        self, connection: LiveConnection, data: dict[str, Any]
    ):
        payload = parse_payload(schemas.MessageRefPayload, data)
        async with self.scope() as scope:
            message = await scope.messages.delete_message(
                payload.message_id, connection.user_id
            )
        await self.event_dispatcher.dispatch(
            MessageDeleted(chat_id=message.chat_id, message_id=message.id)
        )

    async def on_message_read(self, connection: LiveConnection, data: dict[str, Any]):
        payload = parse_payload(schemas.MessageRefPayload, data)
        async with self.scope() as scope:
            message, newly_read = await scope.messages.mark_read(
                payload.message_id, connection.user_id
            )
        if newly_read:
            await self.event_dispatcher.dispatch(
                MessageRead(
                    chat_id=message.chat_id,
                    message_id=message.id,
                    user_id=connection.user_id,
                )
            )

    async def _typing(
        self, connection: LiveConnection, data: dict[str, Any], is_typing: bool
    ):
        payload = parse_payload(schemas.ChatRefPayload, data)
        await self.event_dispatcher.dispatch(
            TypingChanged(
                chat_id=payload.chat_id,
                user_id=connection.user_id,
                is_typing=is_typing,
                origin_connection_id=connection.connection_id,
            )
        )

    async def on_typing_start(self, connection: LiveConnection, data: dict[str, Any]):
        await self._typing(connection, data, is_typing=True)

    async def on_typing_stop(self, connection: LiveConnection, data: dict[str, Any]):
        await self._typing(connection, data, is_typing=False)

    async def on_chat_join(self, connection: LiveConnection, data: dict[str, Any]):
        payload = parse_payload(schemas.ChatRefPayload, data)
        async with self.scope() as scope:
            allowed = await scope.chats.is_participant(
                payload.chat_id, connection.user_id
            )
        if not allowed:
            raise AuthorizationError("You are not a participant of this chat")
        self.membership.join(connection.connection_id, payload.chat_id)

    async def on_chat_leave(self, connection: LiveConnection, data: dict[str, Any]):
        payload = parse_payload(schemas.ChatRefPayload, data)
        self.membership.leave(connection.connection_id, payload.chat_id)
