# chat_backend/api/messages.py
from fastapi import APIRouter, Depends, Query, status

from chat_backend.api.dependencies import (
    get_config,
    get_current_user,
    get_message_interactor,
)
from chat_backend.config import AppConfig
from chat_backend.infrastructure import schemas
from chat_backend.interactors.message_interactor import MessageInteractor


def create_router():
    router = APIRouter()

    # REST mutations persist only; live delivery is the websocket's job

    @router.post(
        "", response_model=schemas.Message, status_code=status.HTTP_201_CREATED
    )
    async def create_message(
        message: schemas.MessageCreate,
        current_user: schemas.User = Depends(get_current_user),
        message_interactor: MessageInteractor = Depends(get_message_interactor),
    ):
        return await message_interactor.send_message(message, current_user.id)

    @router.get("/chat/{chat_id}", response_model=schemas.MessagePage)
    async def read_messages(
        chat_id: int,
        page: int = Query(1, ge=1),
        limit: int | None = Query(None, ge=1, le=100),
        config: AppConfig = Depends(get_config),
        current_user: schemas.User = Depends(get_current_user),
        message_interactor: MessageInteractor = Depends(get_message_interactor),
    ):
        return await message_interactor.get_messages(
            chat_id, current_user.id, page, limit or config.MESSAGES_PAGE_SIZE
        )

    @router.put("/chat/{chat_id}/read")
    async def mark_chat_read(
        chat_id: int,
        current_user: schemas.User = Depends(get_current_user),
        message_interactor: MessageInteractor = Depends(get_message_interactor),
    ):
        marked = await message_interactor.mark_chat_read(chat_id, current_user.id)
        return {"marked": marked}

    @router.put("/{message_id}", response_model=schemas.Message)
    async def update_message(
        message_id: int,
        message_update: schemas.MessageUpdate,
        current_user: schemas.User = Depends(get_current_user),
        message_interactor: MessageInteractor = Depends(get_message_interactor),
    ):
        return await message_interactor.edit_message(
            message_id, message_update.content, current_user.id
        )

    @router.delete("/{message_id}", response_model=schemas.Message)
    async def delete_message(
        message_id: int,
        current_user: schemas.User = Depends(get_current_user),
        message_interactor: MessageInteractor = Depends(get_message_interactor),
    ):
        return await message_interactor.delete_message(message_id, current_user.id)

    @router.put("/{message_id}/read", response_model=schemas.Message)
    async def mark_message_read(
        message_id: int,
        current_user: schemas.User = Depends(get_current_user),
        message_interactor: MessageInteractor = Depends(get_message_interactor),
    ):
        message, _ = await message_interactor.mark_read(message_id, current_user.id)
        return message

    return router
