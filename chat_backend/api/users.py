# chat_backend/api/users.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from chat_backend.api.dependencies import get_current_user, get_user_interactor
from chat_backend.infrastructure import schemas
from chat_backend.interactors.user_interactor import UserInteractor

router = APIRouter()


@router.get("", response_model=List[schemas.User])
async def read_users(
    search: Optional[str] = Query(None, description="Filter by name, username or email"),
    current_user: schemas.User = Depends(get_current_user),
    user_interactor: UserInteractor = Depends(get_user_interactor),
):
    return await user_interactor.get_users(current_user.id, search)


@router.get("/search", response_model=List[schemas.User])
async def search_users(
    q: str = Query("", description="Matches username or display name"),
    current_user: schemas.User = Depends(get_current_user),
    user_interactor: UserInteractor = Depends(get_user_interactor),
):
    return await user_interactor.search_users(q, current_user.id)


@router.put("/profile", response_model=schemas.User)
async def update_profile(
    user_update: schemas.UserUpdate,
    current_user: schemas.User = Depends(get_current_user),
    user_interactor: UserInteractor = Depends(get_user_interactor),
):
    return await user_interactor.update_profile(current_user.id, user_update)


@router.get("/{user_id}", response_model=schemas.User)
async def read_user(
    user_id: int,
    current_user: schemas.User = Depends(get_current_user),
    user_interactor: UserInteractor = Depends(get_user_interactor),
):
    return await user_interactor.get_user(user_id)
