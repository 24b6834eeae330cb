from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class ChatType(str, Enum):
    """Telegram chat kinds."""

    PRIVATE = "private"
    GROUP = "group"
    SUPERGROUP = "supergroup"
    CHANNEL = "channel"


class Chat(BaseModel):
    """A subscribed chat, private or group."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: int
    type: ChatType = ChatType.PRIVATE
    title: str | None = None
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None

    @property
    def is_private(self) -> bool:
        return self.type == ChatType.PRIVATE

    @property
    def display_name(self) -> str:
        """Name used when listing subscribers."""
        if not self.is_private and self.title:
            return self.title
        if self.username:
            return self.username
        return str(self.id)
