from __future__ import annotations

import asyncio

import structlog

from alertbridge.services.dispatcher import CommandDispatcher
from alertbridge.services.telegram_client import TelegramClient
from alertbridge.utils.exceptions import TelegramAPIError

logger = structlog.get_logger(__name__)


class UpdatePoller:
    """Long-poll Telegram for messages and hand them to the dispatcher."""

    def __init__(
        self,
        telegram: TelegramClient,
        dispatcher: CommandDispatcher,
        poll_timeout: int = 10,
        error_backoff_seconds: float = 1.0,
    ):
        self.telegram = telegram
        self.dispatcher = dispatcher
        self.poll_timeout = poll_timeout
        self.error_backoff_seconds = error_backoff_seconds
        self.offset: int | None = None
        self.running = False

    async def start(self) -> None:
        """Poll until stopped or cancelled."""
        self.running = True
        logger.info("update_poller_started", poll_timeout=self.poll_timeout)
        try:
            while self.running:
                await self.poll_once()
        finally:
            self.running = False
            logger.info("update_poller_stopped")

    async def stop(self) -> None:
        self.running = False

    async def poll_once(self) -> int:
        """
        Fetch one batch of updates and dispatch them concurrently.

        Returns:
            Number of messages dispatched
        """
        try:
            updates = await self.telegram.get_updates(offset=self.offset, timeout=self.poll_timeout)
        except TelegramAPIError as exc:
            logger.warning("telegram_poll_failed", error=str(exc))
            await asyncio.sleep(self.error_backoff_seconds)
            return 0

        if not updates:
            return 0

        self.offset = max(update.update_id for update in updates) + 1
        messages = [update.message for update in updates if update.message is not None]
        results = await asyncio.gather(
            *(self.dispatcher.dispatch(message) for message in messages),
            return_exceptions=True,
        )
        for message, result in zip(messages, results):
            if isinstance(result, Exception):
                logger.error(
                    "dispatch_error",
                    chat_id=message.chat.id,
                    error=str(result),
                    exc_info=result,
                )
        return len(messages)
