# chat_backend/gateways/user_gateway.py
from datetime import datetime, timezone

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from chat_backend.gateways.interfaces import IUserGateway
from chat_backend.infrastructure import models, schemas
from chat_backend.infrastructure.data_mappers import UserMapper
from chat_backend.infrastructure.uow import UnitOfWork, UoWModel


class UserGateway(IUserGateway):
    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        self.session = session
        self.uow = uow
        uow.register_mapper(models.User, UserMapper(session))

    async def _one(self, stmt) -> UoWModel | None:
        result = await self.session.execute(stmt)
        user = result.scalar_one_or_none()
        return UoWModel(user, self.uow) if user else None

    async def get_user(self, user_id: int) -> UoWModel | None:
        stmt = (
            select(models.User)
            .filter(models.User.id == user_id)
            .execution_options(populate_existing=True)
        )
        return await self._one(stmt)

    async def get_by_email(self, email: str) -> UoWModel | None:
        return await self._one(
            select(models.User).filter(func.lower(models.User.email) == email.lower())
        )

    async def get_by_username(self, username: str) -> UoWModel | None:
        return await self._one(
            select(models.User).filter(
                func.lower(models.User.username) == username.lower()
            )
        )

    async def get_by_login(self, login: str) -> UoWModel | None:
        login = login.strip().lower()
        return await self._one(
            select(models.User).filter(
                or_(
                    func.lower(models.User.username) == login,
                    func.lower(models.User.email) == login,
                )
            )
        )

    async def get_users_by_ids(self, user_ids: list[int]) -> list[UoWModel]:
        stmt = (
            select(models.User)
            .filter(models.User.id.in_(user_ids))
            .order_by(models.User.id)
        )
        result = await self.session.execute(stmt)
        return [UoWModel(user, self.uow) for user in result.scalars().all()]

    async def get_all(
        self, exclude_user_id: int, search: str | None = None, limit: int = 50
    ) -> list[UoWModel]:
        stmt = select(models.User).filter(models.User.id != exclude_user_id)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.filter(
                or_(
                    models.User.username.ilike(pattern),
                    models.User.display_name.ilike(pattern),
                    models.User.email.ilike(pattern),
                )
            )
        stmt = stmt.order_by(models.User.display_name, models.User.id).limit(limit)
        result = await self.session.execute(stmt)
        return [UoWModel(user, self.uow) for user in result.scalars().all()]

    async def search_users(
        self, query: str, exclude_user_id: int, limit: int = 20
    ) -> list[UoWModel]:
        pattern = f"%{query}%"
        stmt = (
            select(models.User)
            .filter(
                models.User.id != exclude_user_id,
                or_(
                    models.User.username.ilike(pattern),
                    models.User.display_name.ilike(pattern),
                ),
            )
            .order_by(models.User.username)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [UoWModel(user, self.uow) for user in result.scalars().all()]

    async def get_page(self, skip: int, limit: int) -> tuple[list[UoWModel], int]:
        total = await self.count()
        stmt = (
            select(models.User)
            .order_by(models.User.created_at.desc(), models.User.id.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [UoWModel(user, self.uow) for user in result.scalars().all()], total

    async def create_user(
        self, user: schemas.UserCreate, hashed_password: str
    ) -> UoWModel:
        db_user = models.User(
            username=user.username,
            email=user.email,
            display_name=user.display_name,
            hashed_password=hashed_password,
            is_online=False,
            is_admin=False,
        )
        uow_user = self.uow.register_new(db_user)
        await self.uow.commit()
        return uow_user

    async def save(self, user: UoWModel) -> UoWModel:
        await self.uow.commit()
        return user

    async def set_presence(self, user_id: int, is_online: bool) -> None:
        values = {"is_online": is_online}
        if not is_online:
            values["last_seen"] = datetime.now(timezone.utc)
        await self.session.execute(
            update(models.User).where(models.User.id == user_id).values(**values)
        )

    async def delete_user(self, user_id: int) -> None:
        await self.session.execute(
            delete(models.MessageRead).where(models.MessageRead.user_id == user_id)
        )
        await self.session.execute(
            delete(models.User).where(models.User.id == user_id)
        )

    async def count(self, online_only: bool = False) -> int:
        stmt = select(func.count(models.User.id))
        if online_only:
            stmt = stmt.filter(models.User.is_online.is_(True))
        return (await self.session.execute(stmt)).scalar_one()
