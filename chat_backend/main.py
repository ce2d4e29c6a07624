# chat_backend/main.py
import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import create_async_engine

from chat_backend.api import admin, auth, chats, messages, socket, users
from chat_backend.config import AppConfig
from chat_backend.domain.exceptions import (
    AuthError,
    AuthorizationError,
    ChatError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from chat_backend.infrastructure.connection_hub import ConnectionHub
from chat_backend.infrastructure.database import create_database
from chat_backend.infrastructure.event_dispatcher import EventDispatcher
from chat_backend.infrastructure.event_handlers import EventHandlers
from chat_backend.infrastructure.presence import (
    InMemoryPresenceRegistry,
    PresenceRegistry,
    RedisPresenceRegistry,
)
from chat_backend.infrastructure.redis_client import RedisClient
from chat_backend.infrastructure.security import SecurityService
from chat_backend.realtime.event_router import RealtimeEventRouter
from chat_backend.realtime.room_membership import RoomMembershipManager
from chat_backend.realtime.session_registry import SessionRegistry

ERROR_STATUS = {
    AuthError: status.HTTP_401_UNAUTHORIZED,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ValidationError: status.HTTP_400_BAD_REQUEST,
    PersistenceError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class Application:
    def __init__(self, config: AppConfig):
        self.config = config
        self.logger = self.setup_logger()
        engine = create_async_engine(config.DATABASE_URL, echo=False)
        self.database = create_database(engine)
        self.redis_client = RedisClient.from_config(config, self.logger)
        self.security_service = SecurityService(config)
        self.event_dispatcher = EventDispatcher()
        self.connection_hub = ConnectionHub(self.logger)
        self.event_handlers = EventHandlers(self.connection_hub)
        self.event_handlers.register(self.event_dispatcher)

    def create_presence_registry(self) -> PresenceRegistry:
        if self.config.PRESENCE_BACKEND == "redis":
            return RedisPresenceRegistry(self.redis_client)
        return InMemoryPresenceRegistry()

    @asynccontextmanager
    async def lifespan(self, app: FastAPI):
        await self.database.connect()
        if self.config.PRESENCE_BACKEND == "redis":
            await self.redis_client.connect()
        yield
        await app.state.presence.clear()
        await self.redis_client.disconnect()
        await self.database.disconnect()

    def setup_logger(self):
        logger = logging.getLogger("ChatAPI")
        logger.setLevel(self.config.LOG_LEVEL.upper())

        if not logger.handlers:
            c_handler = logging.StreamHandler(sys.stdout)
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )
            c_handler.setFormatter(formatter)
            logger.addHandler(c_handler)

        return logger

    def install_exception_handlers(self, app: FastAPI) -> None:
        @app.exception_handler(ChatError)
        async def chat_error_handler(request: Request, exc: ChatError):
            status_code = ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
            headers = (
                {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
            )
            if isinstance(exc, PersistenceError):
                self.logger.error(f"Storage failure on {request.url.path}: {exc.message}")
            return JSONResponse(
                status_code=status_code,
                content={"detail": exc.message},
                headers=headers,
            )

        @app.exception_handler(Exception)
        async def global_exception_handler(request: Request, exc: Exception):
            self.logger.exception(f"Unhandled error on {request.url.path}")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"message": f"An unexpected error occurred: {exc!s}"},
            )

    def create_app(self) -> FastAPI:
        app = FastAPI(
            title=self.config.PROJECT_NAME,
            version=self.config.PROJECT_VERSION,
            description=self.config.PROJECT_DESCRIPTION,
            openapi_url=f"{self.config.API_V1_STR}/openapi.json",
            lifespan=self.lifespan,
        )

        presence = self.create_presence_registry()
        session_registry = SessionRegistry(
            self.security_service,
            presence,
            self.database,
            self.event_dispatcher,
            self.logger,
        )
        room_membership = RoomMembershipManager(
            self.connection_hub, self.database, self.security_service, self.logger
        )
        event_router = RealtimeEventRouter(
            self.connection_hub,
            self.database,
            self.security_service,
            self.event_dispatcher,
            room_membership,
            self.logger,
        )

        app.state.config = self.config
        app.state.logger = self.logger
        app.state.database = self.database
        app.state.security_service = self.security_service
        app.state.event_dispatcher = self.event_dispatcher
        app.state.connection_hub = self.connection_hub
        app.state.presence = presence
        app.state.session_registry = session_registry
        app.state.room_membership = room_membership
        app.state.event_router = event_router

        api = self.config.API_V1_STR
        app.include_router(auth.router, prefix=f"{api}/auth", tags=["auth"])
        app.include_router(users.router, prefix=f"{api}/users", tags=["users"])
        app.include_router(chats.router, prefix=f"{api}/chats", tags=["chats"])
        app.include_router(
            messages.create_router(), prefix=f"{api}/messages", tags=["messages"]
        )
        app.include_router(admin.router, prefix=f"{api}/admin", tags=["admin"])
        app.include_router(socket.router, prefix=api, tags=["live"])

        self.install_exception_handlers(app)

        @app.get("/")
        async def root():
            return {"message": f"Welcome to the {self.config.PROJECT_NAME}"}

        @app.get("/health")
        async def health():
            report = {
                "status": "ok",
                "presenceBackend": self.config.PRESENCE_BACKEND,
                "liveConnections": len(self.connection_hub.connections),
            }
            if self.config.PRESENCE_BACKEND == "redis":
                report["redis"] = await self.redis_client.ping()
                if not report["redis"]:
                    report["status"] = "degraded"
            return report

        return app


def create():
    config = AppConfig()
    application = Application(config)
    app = application.create_app()
    application.logger.info("Application created and configured")

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("chat_backend.main:create", factory=True, host="127.0.0.1", port=8000)
