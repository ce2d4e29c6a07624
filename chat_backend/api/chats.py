# chat_backend/api/chats.py
from typing import List

from fastapi import APIRouter, Depends, Response, status

from chat_backend.api.dependencies import get_chat_interactor, get_current_user
from chat_backend.infrastructure import schemas
from chat_backend.interactors.chat_interactor import ChatInteractor

router = APIRouter()


@router.post("", response_model=schemas.Chat, status_code=status.HTTP_201_CREATED)
async def create_chat(
    chat: schemas.ChatCreate,
    response: Response,
    current_user: schemas.User = Depends(get_current_user),
    chat_interactor: ChatInteractor = Depends(get_chat_interactor),
):
    new_chat, created = await chat_interactor.create_chat(chat, current_user.id)
    if not created:
        response.status_code = status.HTTP_200_OK
    return new_chat


@router.get("", response_model=List[schemas.Chat])
async def read_chats(
    current_user: schemas.User = Depends(get_current_user),
    chat_interactor: ChatInteractor = Depends(get_chat_interactor),
):
    return await chat_interactor.get_chats(current_user.id)


@router.get("/{chat_id}", response_model=schemas.Chat)
async def read_chat(
    chat_id: int,
    current_user: schemas.User = Depends(get_current_user),
    chat_interactor: ChatInteractor = Depends(get_chat_interactor),
):
    return await chat_interactor.get_chat(chat_id, current_user.id)


@router.put("/{chat_id}", response_model=schemas.Chat)
async def update_chat(
    chat_id: int,
    chat_update: schemas.ChatUpdate,
    current_user: schemas.User = Depends(get_current_user),
    chat_interactor: ChatInteractor = Depends(get_chat_interactor),
):
    return await chat_interactor.update_chat(chat_id, chat_update, current_user.id)


@router.delete("/{chat_id}")
async def delete_chat(
    chat_id: int,
    current_user: schemas.User = Depends(get_current_user),
    chat_interactor: ChatInteractor = Depends(get_chat_interactor),
):
    await chat_interactor.delete_chat(chat_id, current_user.id)
    return {"message": "Chat deleted successfully"}


@router.post("/{chat_id}/participants", response_model=schemas.Chat)
async def add_participant(
    chat_id: int,
    participant: schemas.ParticipantAdd,
    current_user: schemas.User = Depends(get_current_user),
    chat_interactor: ChatInteractor = Depends(get_chat_interactor),
):
    return await chat_interactor.add_participant(
        chat_id, participant.user_id, current_user.id
    )


@router.delete("/{chat_id}/participants/{user_id}", response_model=schemas.Chat)
async def remove_participant(
    chat_id: int,
    user_id: int,
    current_user: schemas.User = Depends(get_current_user),
    chat_interactor: ChatInteractor = Depends(get_chat_interactor),
):
    return await chat_interactor.remove_participant(chat_id, user_id, current_user.id)
