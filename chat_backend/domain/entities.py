# chat_backend/domain/entities.py
from dataclasses import dataclass
from enum import Enum

DELETED_MESSAGE_PLACEHOLDER = "This message was deleted"
MAX_MESSAGE_LENGTH = 5000
MAX_FILE_SIZE = 10 * 1024 * 1024
MAX_CHAT_NAME_LENGTH = 100
DEFAULT_GROUP_NAME = "New Group"


class MessageType(str, Enum):
    TEXT = "text"
    FILE = "file"
    IMAGE = "image"


@dataclass(frozen=True)
class Identity:
    """Claims carried by a verified bearer token."""

    user_id: int
    username: str
    email: str


@dataclass(frozen=True)
class LiveConnection:
    connection_id: str
    identity: Identity

    @property
    def user_id(self) -> int:
        return self.identity.user_id


def room_name(chat_id: int) -> str:
    return f"chat:{chat_id}"


def direct_chat_key(first_user_id: int, second_user_id: int) -> str:
    low, high = sorted((first_user_id, second_user_id))
    return f"{low}:{high}"
