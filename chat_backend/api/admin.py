# chat_backend/api/admin.py
from fastapi import APIRouter, Depends, Query

from chat_backend.api.dependencies import (
    get_admin_interactor,
    get_config,
    get_current_admin,
)
from chat_backend.config import AppConfig
from chat_backend.infrastructure import schemas
from chat_backend.interactors.admin_interactor import AdminInteractor

router = APIRouter()


@router.get("/users", response_model=schemas.UserPage)
async def read_users(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    config: AppConfig = Depends(get_config),
    admin: schemas.User = Depends(get_current_admin),
    admin_interactor: AdminInteractor = Depends(get_admin_interactor),
):
    return await admin_interactor.get_users(page, limit or config.ADMIN_PAGE_SIZE)


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: int,
    admin: schemas.User = Depends(get_current_admin),
    admin_interactor: AdminInteractor = Depends(get_admin_interactor),
):
    await admin_interactor.delete_user(user_id, admin.id)
    return {"message": "User deleted successfully"}


@router.get("/chats", response_model=schemas.ChatPage)
async def read_chats(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    config: AppConfig = Depends(get_config),
    admin: schemas.User = Depends(get_current_admin),
    admin_interactor: AdminInteractor = Depends(get_admin_interactor),
):
    return await admin_interactor.get_chats(page, limit or config.ADMIN_PAGE_SIZE)


@router.delete("/chats/{chat_id}")
async def delete_chat(
    chat_id: int,
    admin: schemas.User = Depends(get_current_admin),
    admin_interactor: AdminInteractor = Depends(get_admin_interactor),
):
    await admin_interactor.delete_chat(chat_id)
    return {"message": "Chat deleted successfully"}


@router.get("/stats", response_model=schemas.Stats)
async def read_stats(
    admin: schemas.User = Depends(get_current_admin),
    admin_interactor: AdminInteractor = Depends(get_admin_interactor),
):
    return await admin_interactor.get_stats()
