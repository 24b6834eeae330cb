from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class StoreBackend(str, Enum):
    """Chat store backends."""

    MEMORY = "memory"
    FILE = "file"
    SQL = "sql"


class MessageFormat(str, Enum):
    """Alert rendering flavours."""

    HTML = "html"
    MARKDOWN = "markdown"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Alertmanager
    alertmanager_url: str = Field(default="http://localhost:9093/")

    # Webhook listener
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8080, ge=1, le=65535)
    webhook_queue_size: int = Field(default=32, ge=1)
    shutdown_timeout_seconds: float = Field(default=5.0, gt=0)

    # Telegram
    telegram_token: str | None = Field(default=None)
    telegram_admins: Annotated[list[int], NoDecode] = []
    telegram_api_url: str = Field(default="https://api.telegram.org")
    telegram_poll_timeout: int = Field(default=10, ge=0)
    message_format: MessageFormat = MessageFormat.HTML

    # Alert templates, HTML format only
    template_paths: Annotated[list[str], NoDecode] = []
    template_name: str = Field(default="default.j2")

    # Storage
    store: StoreBackend = StoreBackend.FILE
    store_key_prefix: str = Field(default="telegram/chats")
    store_file_path: str = Field(default="/tmp/alertbridge-chats.json")
    database_url: str = Field(default="sqlite+aiosqlite:///./alertbridge.db")

    # Logging
    log_level: str = Field(default="INFO")
    log_json: bool = False

    # Reported by /status
    revision: str = Field(default="unknown")

    @field_validator("telegram_admins", mode="before")
    @classmethod
    def parse_telegram_admins(cls, v):
        """Parse comma-separated admin ID list from env."""
        if isinstance(v, str):
            return [admin.strip() for admin in v.split(",") if admin.strip()]
        if isinstance(v, int):
            return [v]
        return v

    @field_validator("template_paths", mode="before")
    @classmethod
    def parse_template_paths(cls, v):
        """Parse comma-separated template globs from env."""
        if isinstance(v, str):
            return [path.strip() for path in v.split(",") if path.strip()]
        return v

    @field_validator("log_level", mode="after")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR"}:
            raise ValueError(f"unsupported log level {v}")
        return level


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
