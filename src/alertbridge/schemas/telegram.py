"""Minimal Telegram Bot API schemas."""
from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from alertbridge.schemas.chat import Chat

# Message fields that mark a service message rather than user text.
_SERVICE_FIELDS = (
    "new_chat_members",
    "left_chat_member",
    "new_chat_title",
    "new_chat_photo",
    "delete_chat_photo",
    "group_chat_created",
    "supergroup_chat_created",
    "channel_chat_created",
    "migrate_to_chat_id",
    "migrate_from_chat_id",
    "pinned_message",
)


class TelegramUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    is_bot: bool = False
    first_name: str = ""
    last_name: str | None = None
    username: str | None = None


class TelegramMessage(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    message_id: int = 0
    date: int = 0
    chat: Chat
    sender: TelegramUser | None = Field(default=None, alias="from")
    text: str | None = None

    new_chat_members: list[TelegramUser] | None = None
    left_chat_member: TelegramUser | None = None
    new_chat_title: str | None = None
    new_chat_photo: list[dict[str, Any]] | None = None
    delete_chat_photo: bool = False
    group_chat_created: bool = False
    supergroup_chat_created: bool = False
    channel_chat_created: bool = False
    migrate_to_chat_id: int | None = None
    migrate_from_chat_id: int | None = None
    pinned_message: dict[str, Any] | None = None

    @property
    def is_service(self) -> bool:
        """True for joins, leaves, title/photo changes, pins and migrations."""
        return any(getattr(self, name) for name in _SERVICE_FIELDS)

    @property
    def is_private(self) -> bool:
        return self.chat.is_private


class TelegramUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    update_id: int
    message: TelegramMessage | None = None


class ParseMode(str, Enum):
    """Telegram ``parse_mode`` values."""

    HTML = "HTML"
    MARKDOWN = "Markdown"
