from __future__ import annotations

from alertbridge.schemas.alertmanager import (
    Alert,
    AlertmanagerStatus,
    GettableAlert,
    Matcher,
    Silence,
    SilenceState,
)
from alertbridge.schemas.chat import Chat, ChatType
from alertbridge.schemas.telegram import (
    ParseMode,
    TelegramMessage,
    TelegramUpdate,
    TelegramUser,
)
from alertbridge.schemas.webhook import WebhookAlert, WebhookEvent, WebhookMessage

__all__ = [
    # Chat
    "Chat",
    "ChatType",
    # Telegram
    "ParseMode",
    "TelegramUser",
    "TelegramMessage",
    "TelegramUpdate",
    # Alertmanager
    "Alert",
    "GettableAlert",
    "Matcher",
    "Silence",
    "SilenceState",
    "AlertmanagerStatus",
    # Webhook
    "WebhookAlert",
    "WebhookMessage",
    "WebhookEvent",
]
