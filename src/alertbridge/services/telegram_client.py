"""Telegram Bot API client."""
from __future__ import annotations

from typing import Any

import httpx
import structlog
from pydantic import TypeAdapter, ValidationError

from alertbridge.schemas.telegram import ParseMode, TelegramUpdate, TelegramUser
from alertbridge.utils.exceptions import TelegramAPIError

logger = structlog.get_logger(__name__)

_updates_adapter = TypeAdapter(list[TelegramUpdate])


class TelegramClient:
    """Thin async wrapper over the Bot API methods the bot needs."""

    def __init__(
        self,
        token: str,
        api_url: str = "https://api.telegram.org",
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.token = token
        self.api_url = f"{api_url.rstrip('/')}/bot{token}"
        self.timeout_seconds = timeout_seconds
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)
        self._owns_client = client is None

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def get_me(self) -> TelegramUser:
        result = await self._call("getMe")
        return TelegramUser.model_validate(result)

    async def get_updates(self, offset: int | None = None, timeout: int = 10) -> list[TelegramUpdate]:
        """
        Long-poll for new updates.

        Args:
            offset: First update ID to return
            timeout: Seconds Telegram holds the request open

        Returns:
            Updates in arrival order
        """
        payload: dict[str, Any] = {"timeout": timeout, "allowed_updates": ["message"]}
        if offset is not None:
            payload["offset"] = offset
        result = await self._call(
            "getUpdates",
            payload,
            timeout=timeout + self.timeout_seconds,
        )
        try:
            return _updates_adapter.validate_python(result)
        except ValidationError as exc:
            raise TelegramAPIError("getUpdates", f"invalid updates payload: {exc}") from exc

    async def send_message(
        self,
        chat_id: int,
        text: str,
        parse_mode: ParseMode | None = None,
    ) -> None:
        payload: dict[str, Any] = {"chat_id": chat_id, "text": text}
        if parse_mode is not None:
            payload["parse_mode"] = parse_mode.value
        await self._call("sendMessage", payload)

    async def send_chat_action(self, chat_id: int, action: str = "typing") -> None:
        await self._call("sendChatAction", {"chat_id": chat_id, "action": action})

    async def set_my_commands(self, commands: list[tuple[str, str]]) -> None:
        """Publish the command list shown in Telegram's menu."""
        payload = {
            "commands": [
                {"command": command.lstrip("/"), "description": description}
                for command, description in commands
            ]
        }
        await self._call("setMyCommands", payload)

    async def _call(
        self,
        method: str,
        payload: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        try:
            response = await self._client.post(
                f"{self.api_url}/{method}",
                json=payload or {},
                timeout=timeout or self.timeout_seconds,
            )
        except httpx.RequestError as exc:
            raise TelegramAPIError(method, str(exc)) from exc

        try:
            body = response.json()
            if not isinstance(body, dict):
                raise ValueError("response is not an object")
        except ValueError:
            raise TelegramAPIError(
                method,
                f"unexpected response ({response.status_code})",
                status_code=response.status_code,
            ) from None

        if response.status_code != 200 or not body.get("ok"):
            raise TelegramAPIError(
                method,
                body.get("description") or f"http_status={response.status_code}",
                status_code=response.status_code,
            )
        return body.get("result")
