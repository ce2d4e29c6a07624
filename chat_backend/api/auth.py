# chat_backend/api/auth.py
from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm

from chat_backend.api.dependencies import get_current_user, get_user_interactor
from chat_backend.infrastructure import schemas
from chat_backend.interactors.user_interactor import UserInteractor

router = APIRouter()


@router.post(
    "/register",
    response_model=schemas.AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_user(
    user: schemas.UserCreate,
    user_interactor: UserInteractor = Depends(get_user_interactor),
):
    return await user_interactor.register(user)


@router.post("/login", response_model=schemas.AuthResponse)
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    user_interactor: UserInteractor = Depends(get_user_interactor),
):
    # the form's username field accepts either a username or an email
    return await user_interactor.login(form_data.username, form_data.password)


@router.post("/logout")
async def logout(
    current_user: schemas.User = Depends(get_current_user),
    user_interactor: UserInteractor = Depends(get_user_interactor),
):
    await user_interactor.logout(current_user.id)
    return {"message": "Logout successful"}


@router.get("/me", response_model=schemas.User)
async def read_current_user(current_user: schemas.User = Depends(get_current_user)):
    return current_user
