# chat_backend/tests/conftest.py
import itertools
import logging

import pytest
from fakeredis import aioredis
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from chat_backend.config import AppConfig
from chat_backend.domain.entities import Identity, LiveConnection
from chat_backend.gateways.user_gateway import UserGateway
from chat_backend.infrastructure import schemas
from chat_backend.infrastructure.database import Base, create_database
from chat_backend.infrastructure.redis_client import RedisClient
from chat_backend.infrastructure.security import SecurityService
from chat_backend.infrastructure.uow import UnitOfWork
from chat_backend.main import Application
from chat_backend.realtime.scope import interactor_scope
from chat_backend.tests.fakes import TEST_PASSWORD, FakeSocket

_user_counter = itertools.count(1)


@pytest.fixture(scope="function")
def app_config():
    return AppConfig(
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        SECRET_KEY="test_secret_key",
        PROJECT_NAME="Test Chat API",
        API_V1_STR="/api/v1",
        ALGORITHM="HS256",
        ACCESS_TOKEN_EXPIRE_MINUTES=30,
        PRESENCE_BACKEND="memory",
    )


@pytest.fixture(scope="session")
def password_hash():
    # hashing once keeps bcrypt out of every seeded user
    config = AppConfig(SECRET_KEY="test_secret_key")
    return SecurityService(config).get_password_hash(TEST_PASSWORD)


@pytest.fixture(scope="function")
def security_service(app_config):
    return SecurityService(app_config)


@pytest.fixture(scope="function")
async def mock_redis():
    redis = aioredis.FakeRedis(decode_responses=True)
    yield redis
    await redis.flushall()
    await redis.aclose()


@pytest.fixture(scope="function")
async def redis_client(mock_redis, logger):
    client = RedisClient("localhost", 6379, logger)
    await client.connect(mock_redis)
    yield client


@pytest.fixture(scope="function")
async def engine(app_config):
    engine = create_async_engine(
        app_config.DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    async with engine.begin() as conn:
        from chat_backend.infrastructure import models  # noqa: F401

        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture(scope="function")
def database(engine):
    return create_database(engine)


@pytest.fixture(scope="function")
def application(app_config, database):
    application = Application(config=app_config)
    application.database = database
    return application


@pytest.fixture(scope="function")
def app(application):
    return application.create_app()


@pytest.fixture(scope="function")
def logger():
    return logging.getLogger("ChatAPI.tests")


@pytest.fixture(scope="function")
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac


@pytest.fixture(scope="function")
def create_user(database, password_hash):
    """Factory persisting a user whose password is TEST_PASSWORD."""

    async def _create_user(
        username: str | None = None, is_admin: bool = False
    ) -> schemas.User:
        username = username or f"user_{next(_user_counter)}"
        async with database.transaction() as session:
            gateway = UserGateway(session, UnitOfWork())
            user = await gateway.create_user(
                schemas.UserCreate(
                    username=username,
                    email=f"{username}@example.com",
                    display_name=username.replace("_", " ").title(),
                    password=TEST_PASSWORD,
                ),
                password_hash,
            )
            if is_admin:
                user.is_admin = True
                await gateway.save(user)
            return schemas.User.model_validate(user._model)

    return _create_user


@pytest.fixture(scope="function")
def create_chat(database, security_service):
    async def _create_chat(
        creator: schemas.User, *others: schemas.User, name: str | None = None
    ) -> schemas.Chat:
        async with interactor_scope(database, security_service) as scope:
            chat, _ = await scope.chats.create_chat(
                schemas.ChatCreate(
                    participant_ids=[user.id for user in others],
                    is_group_chat=len(others) > 1,
                    name=name,
                ),
                creator.id,
            )
        return chat

    return _create_chat


@pytest.fixture(scope="function")
def token_for(security_service):
    def _token_for(user: schemas.User) -> str:
        token, _ = security_service.create_access_token(
            Identity(user_id=user.id, username=user.username, email=user.email)
        )
        return token

    return _token_for


@pytest.fixture(scope="function")
def auth_headers(token_for):
    def _auth_headers(user: schemas.User) -> dict[str, str]:
        return {"Authorization": f"Bearer {token_for(user)}"}

    return _auth_headers


@pytest.fixture(scope="function")
async def alice(create_user):
    return await create_user("alice")


@pytest.fixture(scope="function")
async def bob(create_user):
    return await create_user("bob")


@pytest.fixture(scope="function")
async def carol(create_user):
    return await create_user("carol")


@pytest.fixture(scope="function")
def connect(app, token_for):
    """Open a live session for a user the way the websocket endpoint does."""
    counter = itertools.count(1)

    async def _connect(user: schemas.User) -> tuple[LiveConnection, FakeSocket]:
        state = app.state
        identity = state.session_registry.authenticate(token_for(user))
        connection = LiveConnection(f"conn-{user.id}-{next(counter)}", identity)
        socket = FakeSocket()
        state.connection_hub.add(connection.connection_id, socket)
        await state.session_registry.on_connect(
            identity.user_id, connection.connection_id
        )
        await state.room_membership.join_all_chats(
            connection.connection_id, identity.user_id
        )
        return connection, socket

    return _connect
