# chat_backend/domain/events.py
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Event(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ChatEvent(Event):
    chat_id: int


class MessageCreated(ChatEvent):
    message: dict[str, Any]

    def payload(self) -> dict[str, Any]:
        return self.message


class MessageEdited(MessageCreated):
    pass


class MessageDeleted(ChatEvent):
    message_id: int


class MessageRead(ChatEvent):
    message_id: int
    user_id: int


class TypingChanged(ChatEvent):
    user_id: int
    is_typing: bool
    origin_connection_id: str | None = Field(None, exclude=True)


class UserOnline(Event):
    user_id: int
    socket_id: str


class UserOffline(Event):
    user_id: int
