# chat_backend/infrastructure/event_handlers.py
from chat_backend.domain.entities import room_name
from chat_backend.domain.events import (
    ChatEvent,
    MessageCreated,
    MessageDeleted,
    MessageEdited,
    MessageRead,
    TypingChanged,
    UserOffline,
    UserOnline,
)
from chat_backend.infrastructure.connection_hub import ConnectionHub


class EventHandlers:
    def __init__(self, hub: ConnectionHub):
        self.hub = hub

    async def publish_chat_event(
        self, event_name: str, event: ChatEvent, skip: str | None = None
    ):
        await self.hub.emit_to_room(
            room_name(event.chat_id), event_name, event.payload(), skip=skip
        )

    async def publish_message_created(self, event: MessageCreated):
        await self.publish_chat_event("message:new", event)

    async def publish_message_edited(self, event: MessageEdited):
        await self.publish_chat_event("message:edited", event)

    async def publish_message_deleted(self, event: MessageDeleted):
        await self.publish_chat_event("message:deleted", event)

    async def publish_message_read(self, event: MessageRead):
        await self.publish_chat_event("message:read", event)

    async def publish_typing_changed(self, event: TypingChanged):
        await self.publish_chat_event(
            "typing:user", event, skip=event.origin_connection_id
        )

    async def publish_user_online(self, event: UserOnline):
        await self.hub.emit_all("user:online", event.payload())

    async def publish_user_offline(self, event: UserOffline):
        await self.hub.emit_all("user:offline", event.payload())

    def register(self, dispatcher) -> None:
        dispatcher.register(MessageCreated, self.publish_message_created)
        dispatcher.register(MessageEdited, self.publish_message_edited)
        dispatcher.register(MessageDeleted, self.publish_message_deleted)
        dispatcher.register(MessageRead, self.publish_message_read)
        dispatcher.register(TypingChanged, self.publish_typing_changed)
        dispatcher.register(UserOnline, self.publish_user_online)
        dispatcher.register(UserOffline, self.publish_user_offline)
