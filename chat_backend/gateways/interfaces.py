# chat_backend/gateways/interfaces.py
from abc import ABC, abstractmethod
from typing import List, Optional

from chat_backend.infrastructure import schemas
from chat_backend.infrastructure.uow import UoWModel


class IUserGateway(ABC):
    @abstractmethod
    async def get_user(self, user_id: int) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def get_by_login(self, login: str) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def get_users_by_ids(self, user_ids: List[int]) -> List[UoWModel]:
        pass

    @abstractmethod
    async def get_all(
        self, exclude_user_id: int, search: Optional[str] = None, limit: int = 50
    ) -> List[UoWModel]:
        pass

    @abstractmethod
    async def search_users(
        self, query: str, exclude_user_id: int, limit: int = 20
    ) -> List[UoWModel]:
        pass

    @abstractmethod
    async def get_page(self, skip: int, limit: int) -> tuple[List[UoWModel], int]:
        pass

    @abstractmethod
    async def create_user(
        self, user: schemas.UserCreate, hashed_password: str
    ) -> UoWModel:
        pass

    @abstractmethod
    async def save(self, user: UoWModel) -> UoWModel:
        pass

    @abstractmethod
    async def set_presence(self, user_id: int, is_online: bool) -> None:
        pass

    @abstractmethod
    async def delete_user(self, user_id: int) -> None:
        pass

    @abstractmethod
    async def count(self, online_only: bool = False) -> int:
        pass


class IChatGateway(ABC):
    @abstractmethod
    async def get_chat(self, chat_id: int) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def get_chat_for_participant(
        self, chat_id: int, user_id: int
    ) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def is_participant(self, chat_id: int, user_id: int) -> bool:
        pass

    @abstractmethod
    async def get_direct_chat(self, direct_key: str) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def get_all(self, user_id: int) -> List[UoWModel]:
        pass

    @abstractmethod
    async def get_chat_ids(self, user_id: int) -> List[int]:
        pass

    @abstractmethod
    async def get_participant_ids(self, chat_id: int) -> List[int]:
        pass

    @abstractmethod
    async def get_page(self, skip: int, limit: int) -> tuple[List[UoWModel], int]:
        pass

    @abstractmethod
    async def create_chat(
        self,
        participants: List[UoWModel],
        is_group_chat: bool,
        name: Optional[str] = None,
        admin_id: Optional[int] = None,
        direct_key: Optional[str] = None,
    ) -> UoWModel:
        pass

    @abstractmethod
    async def save(self, chat: UoWModel) -> UoWModel:
        pass

    @abstractmethod
    async def add_participant(self, chat: UoWModel, user: UoWModel) -> UoWModel:
        pass

    @abstractmethod
    async def remove_participant(self, chat_id: int, user_id: int) -> None:
        pass

    @abstractmethod
    async def set_admin(self, chat_id: int, admin_id: int) -> None:
        pass

    @abstractmethod
    async def set_last_message(self, chat_id: int, message_id: Optional[int]) -> None:
        pass

    @abstractmethod
    async def delete_chat(self, chat_id: int) -> None:
        pass

    @abstractmethod
    async def count(self, is_group_chat: Optional[bool] = None) -> int:
        pass


class IMessageGateway(ABC):
    @abstractmethod
    async def get_message(self, message_id: int) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def get_page(
        self, chat_id: int, skip: int, limit: int
    ) -> tuple[List[UoWModel], int]:
        pass

    @abstractmethod
    async def create_message(
        self, message: schemas.MessageCreate, sender_id: int
    ) -> UoWModel:
        pass

    @abstractmethod
    async def save(self, message: UoWModel) -> UoWModel:
        pass

    @abstractmethod
    async def add_reader(self, message_id: int, user_id: int) -> bool:
        pass

    @abstractmethod
    async def mark_chat_read(self, chat_id: int, user_id: int) -> int:
        pass

    @abstractmethod
    async def get_latest_message_id(self, chat_id: int) -> Optional[int]:
        pass

    @abstractmethod
    async def delete_by_sender(self, sender_id: int) -> List[int]:
        pass

    @abstractmethod
    async def count(self) -> int:
        pass
