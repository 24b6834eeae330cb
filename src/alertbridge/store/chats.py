"""Subscribed chat storage."""
from __future__ import annotations

import structlog
from pydantic import ValidationError

from alertbridge.schemas.chat import Chat
from alertbridge.store.base import KVStore
from alertbridge.utils.exceptions import ChatNotFoundError, KeyNotFoundError, StorageError

logger = structlog.get_logger(__name__)

DEFAULT_PREFIX = "telegram/chats"


class ChatStore:
    """Persist subscribed chats as JSON under ``<prefix>/<chat id>``."""

    def __init__(self, kv: KVStore, prefix: str = DEFAULT_PREFIX):
        self.kv = kv
        self.prefix = prefix.rstrip("/")

    def key(self, chat_id: int) -> str:
        return f"{self.prefix}/{chat_id}"

    async def list(self) -> list[Chat]:
        """Return every subscribed chat."""
        entries = await self.kv.list(self.prefix + "/")
        return [self._decode(key, value) for key, value in entries.items()]

    async def get(self, chat_id: int) -> Chat:
        """
        Fetch a subscribed chat.

        Raises:
            ChatNotFoundError: The chat never subscribed or has unsubscribed
        """
        key = self.key(chat_id)
        try:
            value = await self.kv.get(key)
        except KeyNotFoundError:
            raise ChatNotFoundError(chat_id) from None
        return self._decode(key, value)

    async def add(self, chat: Chat) -> None:
        """Subscribe a chat, overwriting stored metadata."""
        await self.kv.put(self.key(chat.id), chat.model_dump_json(exclude_none=True))

    async def remove(self, chat: Chat) -> None:
        """Unsubscribe a chat; unknown chats are ignored."""
        try:
            await self.kv.delete(self.key(chat.id))
        except KeyNotFoundError:
            logger.debug("chat_already_removed", chat_id=chat.id)

    @staticmethod
    def _decode(key: str, value: str) -> Chat:
        try:
            return Chat.model_validate_json(value)
        except ValidationError as exc:
            raise StorageError("decode", f"invalid chat record at {key}: {exc}") from exc
