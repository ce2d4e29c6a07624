# chat_backend/api/dependencies.py
from typing import AsyncGenerator

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from chat_backend.config import AppConfig
from chat_backend.domain.exceptions import AuthorizationError
from chat_backend.gateways.chat_gateway import ChatGateway
from chat_backend.gateways.message_gateway import MessageGateway
from chat_backend.gateways.user_gateway import UserGateway
from chat_backend.infrastructure import schemas
from chat_backend.infrastructure.security import SecurityService
from chat_backend.infrastructure.uow import UnitOfWork
from chat_backend.interactors.admin_interactor import AdminInteractor
from chat_backend.interactors.chat_interactor import ChatInteractor
from chat_backend.interactors.message_interactor import MessageInteractor
from chat_backend.interactors.user_interactor import UserInteractor

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_security_service(request: Request) -> SecurityService:
    return request.app.state.security_service


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    async with request.app.state.database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_uow() -> UnitOfWork:
    return UnitOfWork()


async def get_user_gateway(
    session: AsyncSession = Depends(get_session), uow: UnitOfWork = Depends(get_uow)
) -> UserGateway:
    return UserGateway(session, uow)


async def get_chat_gateway(
    session: AsyncSession = Depends(get_session), uow: UnitOfWork = Depends(get_uow)
) -> ChatGateway:
    return ChatGateway(session, uow)


async def get_message_gateway(
    session: AsyncSession = Depends(get_session), uow: UnitOfWork = Depends(get_uow)
) -> MessageGateway:
    return MessageGateway(session, uow)


async def get_user_interactor(
    security_service: SecurityService = Depends(get_security_service),
    user_gateway: UserGateway = Depends(get_user_gateway),
) -> UserInteractor:
    return UserInteractor(security_service, user_gateway)


async def get_chat_interactor(
    chat_gateway: ChatGateway = Depends(get_chat_gateway),
    user_gateway: UserGateway = Depends(get_user_gateway),
) -> ChatInteractor:
    return ChatInteractor(chat_gateway, user_gateway)


async def get_message_interactor(
    message_gateway: MessageGateway = Depends(get_message_gateway),
    chat_gateway: ChatGateway = Depends(get_chat_gateway),
) -> MessageInteractor:
    return MessageInteractor(message_gateway, chat_gateway)


async def get_admin_interactor(
    user_gateway: UserGateway = Depends(get_user_gateway),
    chat_gateway: ChatGateway = Depends(get_chat_gateway),
    message_gateway: MessageGateway = Depends(get_message_gateway),
) -> AdminInteractor:
    return AdminInteractor(user_gateway, chat_gateway, message_gateway)


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    security_service: SecurityService = Depends(get_security_service),
    user_interactor: UserInteractor = Depends(get_user_interactor),
) -> schemas.User:
    identity = security_service.verify_access_token(token)
    return await user_interactor.get_current_user(identity)


async def get_current_admin(
    current_user: schemas.User = Depends(get_current_user),
) -> schemas.User:
    if not current_user.is_admin:
        raise AuthorizationError("Admin access required")
    return current_user
