from __future__ import annotations

import asyncio

import structlog

from alertbridge.schemas.webhook import WebhookEvent
from alertbridge.services.dispatcher import MessageSender
from alertbridge.services.formatter import MessageFormatter
from alertbridge.services.metrics import BotMetrics
from alertbridge.store.chats import ChatStore
from alertbridge.utils.exceptions import ChatNotFoundError, RenderError, TelegramAPIError

logger = structlog.get_logger(__name__)

DELIVERED = "delivered"
CHAT_NOT_FOUND = "chat_not_found"
RENDER_FAILED = "render_failed"
SEND_FAILED = "send_failed"


class WebhookRouter:
    """Deliver queued webhooks to the chat they are addressed to."""

    def __init__(
        self,
        queue: asyncio.Queue[WebhookEvent],
        chats: ChatStore,
        formatter: MessageFormatter,
        sender: MessageSender,
        metrics: BotMetrics,
    ):
        self.queue = queue
        self.chats = chats
        self.formatter = formatter
        self.sender = sender
        self.metrics = metrics
        self.running = False

    async def start(self) -> None:
        """
        Consume the queue until cancelled.

        Storage failures other than a missing chat end the loop.
        """
        self.running = True
        logger.info("webhook_router_started", queue_size=self.queue.maxsize)
        try:
            while self.running:
                event = await self.queue.get()
                try:
                    await self.deliver(event)
                finally:
                    self.queue.task_done()
        finally:
            self.running = False
            logger.info("webhook_router_stopped")

    async def stop(self) -> None:
        self.running = False

    async def deliver(self, event: WebhookEvent) -> str:
        """
        Deliver one event.

        Args:
            event: Decoded webhook and its destination chat

        Returns:
            Delivery outcome

        Raises:
            StorageError: The chat store failed
        """
        try:
            chat = await self.chats.get(event.chat_id)
        except ChatNotFoundError:
            logger.warning("chat_not_subscribed", chat_id=event.chat_id)
            return self._outcome(CHAT_NOT_FOUND)

        try:
            text = self.formatter.render(event.message)
        except RenderError as exc:
            logger.warning("webhook_render_failed", chat_id=chat.id, error=str(exc))
            return self._outcome(RENDER_FAILED)

        try:
            await self.sender.send_message(chat.id, text, self.formatter.parse_mode)
        except TelegramAPIError as exc:
            logger.warning("webhook_send_failed", chat_id=chat.id, error=str(exc))
            return self._outcome(SEND_FAILED)

        logger.debug("webhook_delivered", chat_id=chat.id, alert_count=len(event.message.alerts))
        return self._outcome(DELIVERED)

    def _outcome(self, outcome: str) -> str:
        self.metrics.delivery(outcome)
        return outcome
