"""Application configuration powered by Pydantic settings."""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Global application settings loaded from environment variables."""

    PROJECT_NAME: str = Field(default="Message Service")
    VERSION: str = Field(default="0.1.0")
    APP_NAME: str = Field(default="messageserviceApp")

    DATABASE_URL: str = Field(default="postgresql+psycopg://postgres:postgres@db:5432/messageservice")
    DATABASE_ECHO: bool = Field(default=False)

    ACCOUNT_SERVICE_URL: str = Field(default="http://account-service:8080")
    ACCOUNT_SERVICE_TIMEOUT: float = Field(default=5.0)

    CORS_ALLOWED_ORIGINS: tuple[str, ...] = Field(default=("http://localhost:3000",))

    SESSION_SECRET: str = Field(default="change-me")
    SESSION_COOKIE_NAME: str = Field(default="message_session")
    SESSION_COOKIE_SECURE: bool = Field(default=False)

    RATE_LIMIT_MESSAGE_WRITE: str = Field(default="60/minute")

    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance to avoid repeated parsing."""

    return Settings()


settings = get_settings()
