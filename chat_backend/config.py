# chat_backend/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    PROJECT_NAME: str = "Chat Backend"
    PROJECT_VERSION: str = "1.0.0"
    PROJECT_DESCRIPTION: str = "Real-time chat backend with REST and websocket delivery"
    API_V1_STR: str = "/api/v1"
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    DATABASE_URL: str = "sqlite+aiosqlite:///:memory:"
    LOG_LEVEL: str = "INFO"

    # "memory" keeps presence in-process, "redis" stores it in a redis hash
    PRESENCE_BACKEND: str = "memory"
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379

    MESSAGES_PAGE_SIZE: int = 50
    ADMIN_PAGE_SIZE: int = 20

    model_config = SettingsConfigDict(env_file=".env", extra="allow")
