from __future__ import annotations


class BridgeException(Exception):
    """Base exception for the alert bridge."""

    pass


class StorageError(BridgeException):
    """Raised when a storage backend fails."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Storage {operation} failed: {reason}")


class KeyNotFoundError(StorageError):
    """Raised when a key is missing from a KV backend."""

    def __init__(self, key: str):
        self.key = key
        super().__init__("get", f"key {key} not found")


class ChatNotFoundError(StorageError):
    """Raised when a chat is not subscribed."""

    def __init__(self, chat_id: int):
        self.chat_id = chat_id
        super().__init__("get", f"chat {chat_id} not found")


class UpstreamUnavailableError(BridgeException):
    """Raised when the Alertmanager API cannot be reached."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(reason)


class TelegramAPIError(BridgeException):
    """Raised when a Telegram Bot API call fails."""

    def __init__(self, method: str, reason: str, status_code: int | None = None):
        self.method = method
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Telegram {method} failed: {reason}")


class RenderError(BridgeException):
    """Raised when an alert group cannot be rendered."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Failed to render message: {reason}")


class CommandError(BridgeException):
    """Raised by a command handler; the message is shown to the user."""

    def __init__(self, reply: str, cause: Exception | None = None):
        self.reply = reply
        self.cause = cause
        super().__init__(reply)
