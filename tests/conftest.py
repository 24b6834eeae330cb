"""
Pytest configuration and shared fixtures.

Telegram and Alertmanager are never contacted: outbound messages go to a
recording fake and upstream HTTP is served by ``httpx.MockTransport``.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from alertbridge.schemas.chat import Chat, ChatType
from alertbridge.schemas.telegram import ParseMode, TelegramMessage, TelegramUser
from alertbridge.services.alertmanager import AlertmanagerClient
from alertbridge.services.dispatcher import AdminSet, CommandDispatcher
from alertbridge.services.formatter import MessageFormatter
from alertbridge.services.metrics import PrometheusMetrics
from alertbridge.services.telegram_service import TelegramService
from alertbridge.store.chats import ChatStore
from alertbridge.store.memory import MemoryKVStore
from alertbridge.utils.exceptions import TelegramAPIError

NOW = datetime(2026, 3, 14, 12, 0, 0, tzinfo=timezone.utc)

ADMIN = TelegramUser(id=123, first_name="Elliot", username="elliot")
NOBODY = TelegramUser(id=222, first_name="Nobody", username="nobody")


class FakeTelegram:
    """Records outbound Bot API calls instead of sending them."""

    def __init__(self) -> None:
        self.messages: list[tuple[int, str, ParseMode | None]] = []
        self.actions: list[tuple[int, str]] = []
        self.fail_sends = False

    async def send_message(self, chat_id: int, text: str, parse_mode: ParseMode | None = None) -> None:
        if self.fail_sends:
            raise TelegramAPIError("sendMessage", "Bad Request: chat not found", status_code=400)
        self.messages.append((chat_id, text, parse_mode))

    async def send_chat_action(self, chat_id: int, action: str = "typing") -> None:
        self.actions.append((chat_id, action))

    def texts(self) -> list[str]:
        return [text for _, text, _ in self.messages]


def chat_for(user: TelegramUser) -> Chat:
    return Chat(
        id=user.id,
        type=ChatType.PRIVATE,
        username=user.username,
        first_name=user.first_name,
    )


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def admin() -> TelegramUser:
    return ADMIN


@pytest.fixture
def nobody() -> TelegramUser:
    return NOBODY


@pytest.fixture
def metrics() -> PrometheusMetrics:
    """Counters on a registry private to the test."""
    return PrometheusMetrics()


@pytest.fixture
def kv_store() -> MemoryKVStore:
    return MemoryKVStore()


@pytest.fixture
def chat_store(kv_store: MemoryKVStore) -> ChatStore:
    return ChatStore(kv_store)


@pytest.fixture
def telegram() -> FakeTelegram:
    return FakeTelegram()


@pytest.fixture
def formatter() -> MessageFormatter:
    return MessageFormatter(clock=lambda: NOW)


@pytest.fixture
def alertmanager() -> AsyncMock:
    """Alertmanager client with every call mocked."""
    return AsyncMock(spec=AlertmanagerClient)


@pytest.fixture
def telegram_service(
    chat_store: ChatStore,
    alertmanager: AsyncMock,
    formatter: MessageFormatter,
) -> TelegramService:
    return TelegramService(
        chat_store,
        alertmanager,
        formatter,
        revision="v0.4.0",
        started_at=NOW - timedelta(minutes=5),
    )


@pytest.fixture
def dispatcher(
    telegram: FakeTelegram,
    telegram_service: TelegramService,
    metrics: PrometheusMetrics,
) -> CommandDispatcher:
    return CommandDispatcher(
        sender=telegram,
        admins=AdminSet.of([ADMIN.id]),
        handlers=telegram_service.handlers(),
        metrics=metrics,
    )


@pytest.fixture
def make_message():
    """Factory for inbound chat messages."""
    def _make(
        text: str | None,
        sender: TelegramUser | None = ADMIN,
        chat: Chat | None = None,
        **extra: Any,
    ) -> TelegramMessage:
        if chat is None and sender is not None:
            chat = chat_for(sender)
        return TelegramMessage(chat=chat, sender=sender, text=text, **extra)
    return _make


@pytest.fixture
def webhook_payload():
    """Factory for Alertmanager webhook bodies."""
    def _make(
        starts_at: datetime = NOW - timedelta(hours=1),
        ends_at: datetime | None = None,
        labels: dict[str, str] | None = None,
        annotations: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        alert_labels = labels if labels is not None else {"alertname": "Fire", "severity": "critical"}
        return {
            "version": "4",
            "groupKey": '{}:{alertname="Fire"}',
            "status": "resolved" if ends_at else "firing",
            "receiver": "telegram",
            "groupLabels": {"alertname": "Fire"},
            "commonLabels": alert_labels,
            "commonAnnotations": {},
            "externalURL": "http://alertmanager:9093",
            "alerts": [
                {
                    "status": "resolved" if ends_at else "firing",
                    "labels": alert_labels,
                    "annotations": annotations if annotations is not None else {"message": "Something is on fire"},
                    "startsAt": starts_at.isoformat(),
                    "endsAt": ends_at.isoformat() if ends_at else "0001-01-01T00:00:00Z",
                    "generatorURL": "http://prometheus:9090/graph",
                    "fingerprint": "a1b2c3",
                }
            ],
        }
    return _make


@pytest_asyncio.fixture
async def subscribed_admin(chat_store: ChatStore) -> Chat:
    """Admin's private chat, already subscribed."""
    chat = chat_for(ADMIN)
    await chat_store.add(chat)
    return chat
