from __future__ import annotations

from alertbridge.utils.exceptions import (
    BridgeException,
    ChatNotFoundError,
    CommandError,
    KeyNotFoundError,
    RenderError,
    StorageError,
    TelegramAPIError,
    UpstreamUnavailableError,
)
from alertbridge.utils.logging import setup_logging

__all__ = [
    "setup_logging",
    "BridgeException",
    "StorageError",
    "KeyNotFoundError",
    "ChatNotFoundError",
    "UpstreamUnavailableError",
    "TelegramAPIError",
    "RenderError",
    "CommandError",
]
