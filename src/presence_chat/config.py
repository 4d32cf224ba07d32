"""Application configuration."""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    APP_NAME: str = "Presence Chat API"
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    # Presence: a silent participant goes after 10s and is caught by the
    # next 15s sweep, i.e. between 10s and 25s after its last heartbeat.
    INACTIVITY_THRESHOLD: float = 10.0
    SWEEP_INTERVAL: float = 15.0
    SWEEPER_ENABLED: bool = True

    # Messages
    DEFAULT_MESSAGE_LIMIT: int = 100
    BROADCAST_TARGET: str = "Todos"
    JOIN_NOTICE: str = "joined the room..."
    LEAVE_NOTICE: str = "left the room..."

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    CORS_ORIGINS: List[str] = ["*"]


@lru_cache
def get_settings() -> Settings:
    return Settings()
