# chat_backend/interactors/user_interactor.py
from chat_backend.domain.entities import Identity
from chat_backend.domain.exceptions import AuthError, NotFoundError, ValidationError
from chat_backend.gateways.interfaces import IUserGateway
from chat_backend.infrastructure import schemas
from chat_backend.infrastructure.security import SecurityService
from chat_backend.infrastructure.uow import UoWModel


class UserInteractor:
    def __init__(self, security_service: SecurityService, user_gateway: IUserGateway):
        self.security_service = security_service
        self.user_gateway = user_gateway

    def _issue_token(self, user: UoWModel) -> schemas.AuthResponse:
        identity = Identity(user_id=user.id, username=user.username, email=user.email)
        token, expires_at = self.security_service.create_access_token(identity)
        return schemas.AuthResponse(
            user=schemas.User.model_validate(user._model),
            access_token=token,
            expires_at=expires_at,
        )

    async def register(self, user: schemas.UserCreate) -> schemas.AuthResponse:
        if await self.user_gateway.get_by_email(user.email):
            raise ValidationError("User with this email already exists")
        if await self.user_gateway.get_by_username(user.username):
            raise ValidationError("Username is already taken")
        hashed_password = self.security_service.get_password_hash(user.password)
        new_user = await self.user_gateway.create_user(user, hashed_password)
        return self._issue_token(new_user)

    async def login(self, login: str, password: str) -> schemas.AuthResponse:
        user = await self.user_gateway.get_by_login(login)
        if not user or not self.security_service.verify_password(
            password, user.hashed_password
        ):
            raise AuthError("Invalid username/email or password")
        return self._issue_token(user)

    async def logout(self, user_id: int) -> None:
        await self.user_gateway.set_presence(user_id, is_online=False)

    async def set_presence(self, user_id: int, is_online: bool) -> None:
        await self.user_gateway.set_presence(user_id, is_online=is_online)

    async def get_current_user(self, identity: Identity) -> schemas.User:
        user = await self.user_gateway.get_user(identity.user_id)
        if not user:
            raise AuthError("User for this token no longer exists")
        return schemas.User.model_validate(user._model)

    async def get_user(self, user_id: int) -> schemas.User:
        user = await self.user_gateway.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        return schemas.User.model_validate(user._model)

    async def get_users(
        self, current_user_id: int, search: str | None = None
    ) -> list[schemas.User]:
        users = await self.user_gateway.get_all(current_user_id, search)
        return [schemas.User.model_validate(user._model) for user in users]

    async def search_users(self, query: str, current_user_id: int) -> list[schemas.User]:
        query = (query or "").strip()
        if not query:
            raise ValidationError("Search query is required")
        users = await self.user_gateway.search_users(query, current_user_id)
        return [schemas.User.model_validate(user._model) for user in users]

    async def update_profile(
        self, user_id: int, user_update: schemas.UserUpdate
    ) -> schemas.User:
        user = await self.user_gateway.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")

        changes = user_update.model_dump(exclude_unset=True, exclude_none=True)
        if "username" in changes and changes["username"] != user.username:
            existing = await self.user_gateway.get_by_username(changes["username"])
            if existing and existing.id != user_id:
                raise ValidationError("Username is already taken")
        if "display_name" in changes:
            changes["display_name"] = changes["display_name"].strip()

        for key, value in changes.items():
            setattr(user, key, value)
        updated_user = await self.user_gateway.save(user)
        return schemas.User.model_validate(updated_user._model)
