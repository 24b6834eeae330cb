from __future__ import annotations

from alertbridge.services.alertmanager import AlertmanagerClient
from alertbridge.services.dispatcher import (
    AdminSet,
    Command,
    CommandDispatcher,
    CommandInvocation,
    Reply,
)
from alertbridge.services.formatter import AlertState, MessageFormatter
from alertbridge.services.http_retry import RetryingHTTPClient
from alertbridge.services.metrics import BotMetrics, PrometheusMetrics
from alertbridge.services.telegram_client import TelegramClient
from alertbridge.services.telegram_service import TelegramService

__all__ = [
    "RetryingHTTPClient",
    "AlertmanagerClient",
    "TelegramClient",
    "MessageFormatter",
    "AlertState",
    "AdminSet",
    "Command",
    "CommandDispatcher",
    "CommandInvocation",
    "Reply",
    "TelegramService",
    "BotMetrics",
    "PrometheusMetrics",
]
