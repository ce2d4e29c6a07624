# chat_backend/realtime/scope.py
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from chat_backend.domain.exceptions import PersistenceError
from chat_backend.gateways.chat_gateway import ChatGateway
from chat_backend.gateways.message_gateway import MessageGateway
from chat_backend.gateways.user_gateway import UserGateway
from chat_backend.infrastructure.database import Database
from chat_backend.infrastructure.security import SecurityService
from chat_backend.infrastructure.uow import UnitOfWork
from chat_backend.interactors.chat_interactor import ChatInteractor
from chat_backend.interactors.message_interactor import MessageInteractor
from chat_backend.interactors.user_interactor import UserInteractor

STORAGE_FAILURE_MESSAGE = "Could not complete the request, please try again"


class InteractorScope:
    """Interactors sharing one session and unit of work."""

    def __init__(self, session: AsyncSession, security_service: SecurityService):
        uow = UnitOfWork()
        user_gateway = UserGateway(session, uow)
        chat_gateway = ChatGateway(session, uow)
        message_gateway = MessageGateway(session, uow)
        self.users = UserInteractor(security_service, user_gateway)
        self.chats = ChatInteractor(chat_gateway, user_gateway)
        self.messages = MessageInteractor(message_gateway, chat_gateway)


@asynccontextmanager
async def interactor_scope(
    database: Database, security_service: SecurityService
) -> AsyncGenerator[InteractorScope, None]:
    """Commits when the block succeeds; storage failures surface as PersistenceError."""
    try:
        async with database.transaction() as session:
            yield InteractorScope(session, security_service)
    except SQLAlchemyError as e:
        raise PersistenceError(STORAGE_FAILURE_MESSAGE) from e
