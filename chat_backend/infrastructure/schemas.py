# chat_backend/infrastructure/schemas.py
from datetime import datetime

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from chat_backend.domain.entities import (
    MAX_CHAT_NAME_LENGTH,
    MAX_FILE_SIZE,
    MAX_MESSAGE_LENGTH,
    MessageType,
)

USERNAME_PATTERN = r"^[a-z0-9_]+$"


class CamelModel(BaseModel):
    """Wire models use camelCase keys and accept snake_case on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserBasic(CamelModel):
    id: int
    username: str
    display_name: str
    avatar: str | None = None

    model_config = ConfigDict(from_attributes=True)


class User(UserBasic):
    email: EmailStr
    is_online: bool
    last_seen: datetime | None = None
    is_admin: bool = False
    created_at: datetime


class UserCreate(CamelModel):
    display_name: str = Field(..., min_length=2, max_length=50)
    username: str = Field(..., min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    email: EmailStr
    password: str = Field(..., min_length=6)

    @field_validator("display_name")
    @classmethod
    def strip_display_name(cls, value: str) -> str:
        return value.strip()

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class UserUpdate(CamelModel):
    display_name: str | None = Field(None, min_length=2, max_length=50)
    username: str | None = Field(
        None, min_length=3, max_length=30, pattern=USERNAME_PATTERN
    )
    avatar: str | None = None


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime


class AuthResponse(TokenResponse):
    user: User


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=-(-total // limit))


class MessageCreate(CamelModel):
    chat_id: int
    content: str | None = Field(None, max_length=MAX_MESSAGE_LENGTH)
    message_type: MessageType = MessageType.TEXT
    file_url: str | None = None
    file_name: str | None = None
    file_size: int | None = Field(None, ge=0, le=MAX_FILE_SIZE)

    @model_validator(mode="after")
    def check_type_fields(self) -> "MessageCreate":
        has_file = any(
            value is not None for value in (self.file_url, self.file_name, self.file_size)
        )
        if self.message_type == MessageType.TEXT:
            if not self.content or not self.content.strip():
                raise ValueError("Message content is required")
            if has_file:
                raise ValueError("Text messages cannot carry file attachments")
        elif not (self.file_url and self.file_name and self.file_size is not None):
            raise ValueError("fileUrl, fileName and fileSize are required for file messages")
        return self


class MessageUpdate(CamelModel):
    content: str = Field(..., min_length=1, max_length=MAX_MESSAGE_LENGTH)


class Message(CamelModel):
    id: int
    chat_id: int
    sender_id: int
    sender: UserBasic
    message_type: MessageType
    content: str | None = None
    file_url: str | None = None
    file_name: str | None = None
    file_size: int | None = None
    is_edited: bool
    is_deleted: bool
    read_by: list[int] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class MessagePage(CamelModel):
    messages: list[Message]
    pagination: Pagination


class ChatCreate(CamelModel):
    participant_ids: list[int] = Field(..., min_length=1)
    is_group_chat: bool = False
    name: str | None = Field(None, max_length=MAX_CHAT_NAME_LENGTH)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str | None) -> str | None:
        return value.strip() if value else value


class ChatUpdate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=MAX_CHAT_NAME_LENGTH)


class ParticipantAdd(CamelModel):
    user_id: int


class Chat(CamelModel):
    id: int
    name: str | None = None
    is_group_chat: bool
    admin_id: int | None = None
    participants: list[UserBasic] = Field(default_factory=list)
    last_message: Message | None = None
    created_at: datetime
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class ChatPage(CamelModel):
    chats: list[Chat]
    pagination: Pagination


class UserPage(CamelModel):
    users: list[User]
    pagination: Pagination


class Stats(CamelModel):
    total_users: int
    online_users: int
    total_chats: int
    total_messages: int
    group_chats: int
    one_on_one_chats: int


# Inbound live-channel payloads


class EditMessagePayload(CamelModel):
    message_id: int
    content: str = Field(..., min_length=1, max_length=MAX_MESSAGE_LENGTH)
    chat_id: int | None = None


class MessageRefPayload(CamelModel):
    message_id: int
    chat_id: int | None = None


class ChatRefPayload(CamelModel):
    chat_id: int
