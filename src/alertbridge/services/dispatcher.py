"""Authorize, normalize and route chat commands to handlers."""
from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Iterable, Mapping, Protocol

import structlog

from alertbridge.schemas.chat import Chat
from alertbridge.schemas.telegram import ParseMode, TelegramMessage, TelegramUser
from alertbridge.services.metrics import DROPPED, INCOMPREHENSIBLE, BotMetrics
from alertbridge.utils.exceptions import CommandError, TelegramAPIError

logger = structlog.get_logger(__name__)

INCOMPREHENSIBLE_REPLY = "Sorry, I don't understand..."


class Command(str, Enum):
    """Commands the bot answers to."""

    START = "/start"
    STOP = "/stop"
    HELP = "/help"
    CHATS = "/chats"
    ID = "/id"
    STATUS = "/status"
    ALERTS = "/alerts"
    SILENCES = "/silences"


# Commands any sender may use.
PUBLIC_COMMANDS = frozenset({Command.ID})


@dataclass(frozen=True)
class AdminSet:
    """Sorted, deduplicated admin IDs; the first configured ID is primary."""

    ids: tuple[int, ...] = ()
    primary: int | None = None

    @classmethod
    def of(cls, ids: Iterable[int]) -> AdminSet:
        ordered = list(ids)
        return cls(
            ids=tuple(sorted(set(ordered))),
            primary=ordered[0] if ordered else None,
        )

    def contains(self, user_id: int) -> bool:
        index = bisect_left(self.ids, user_id)
        return index < len(self.ids) and self.ids[index] == user_id

    def with_extra(self, *user_ids: int) -> AdminSet:
        merged = AdminSet.of([*self.ids, *user_ids])
        return AdminSet(ids=merged.ids, primary=self.primary if self.primary is not None else merged.primary)

    def __contains__(self, user_id: object) -> bool:
        return isinstance(user_id, int) and self.contains(user_id)

    def __len__(self) -> int:
        return len(self.ids)


@dataclass(frozen=True)
class CommandInvocation:
    """A normalized command from an authorized sender."""

    command: Command
    sender: TelegramUser
    chat: Chat
    payload: str
    text: str

    @property
    def is_private(self) -> bool:
        return self.chat.is_private


@dataclass(frozen=True)
class Reply:
    text: str
    parse_mode: ParseMode | None = None


Handler = Callable[[CommandInvocation], Awaitable[Reply | None]]


class MessageSender(Protocol):
    async def send_message(self, chat_id: int, text: str, parse_mode: ParseMode | None = None) -> None: ...

    async def send_chat_action(self, chat_id: int, action: str = "typing") -> None: ...


def split_command(text: str) -> tuple[str, str]:
    """
    Split ``/cmd@BotName rest`` into ``("/cmd", "rest")``.

    Args:
        text: Raw message text

    Returns:
        Lowercased command key and stripped payload
    """
    parts = text.strip().split(maxsplit=1)
    if not parts:
        return "", ""
    key = parts[0].split("@", 1)[0].lower()
    payload = parts[1].strip() if len(parts) > 1 else ""
    return key, payload


class CommandDispatcher:
    """Dispatch inbound chat messages to command handlers."""

    def __init__(
        self,
        sender: MessageSender,
        admins: AdminSet,
        handlers: Mapping[Command, Handler],
        metrics: BotMetrics,
    ):
        missing = [command.value for command in Command if command not in handlers]
        if missing:
            raise ValueError(f"no handler registered for {', '.join(missing)}")
        self.sender = sender
        self.admins = admins
        self.handlers = dict(handlers)
        self.metrics = metrics

    async def dispatch(self, message: TelegramMessage) -> None:
        """Handle one inbound message; never raises for handler failures."""
        if message.is_service:
            logger.debug("service_message_ignored", chat_id=message.chat.id)
            return
        if not message.text or not message.text.startswith("/") or message.sender is None:
            return

        sender = message.sender
        key, payload = split_command(message.text)
        try:
            command: Command | None = Command(key)
        except ValueError:
            command = None

        if command not in PUBLIC_COMMANDS and not self.admins.contains(sender.id):
            logger.info(
                "dropping_message_from_forbidden_sender",
                sender_id=sender.id,
                sender_username=sender.username,
            )
            self.metrics.command(DROPPED)
            return

        if command is None:
            self.metrics.command(INCOMPREHENSIBLE)
            await self._reply(message.chat.id, Reply(INCOMPREHENSIBLE_REPLY), message.text)
            return

        self.metrics.command(command.value)
        logger.debug("message_received", text=message.text, chat_id=message.chat.id)
        await self._typing(message.chat.id)

        invocation = CommandInvocation(
            command=command,
            sender=sender,
            chat=message.chat,
            payload=payload,
            text=message.text,
        )
        try:
            reply = await self.handlers[command](invocation)
        except CommandError as exc:
            logger.warning(
                "command_failed",
                sender_id=sender.id,
                chat_id=message.chat.id,
                text=message.text,
                error=str(exc.cause or exc),
            )
            reply = Reply(exc.reply)
        except Exception as exc:
            logger.warning(
                "command_failed",
                sender_id=sender.id,
                chat_id=message.chat.id,
                text=message.text,
                error=str(exc),
                exc_info=True,
            )
            reply = Reply(str(exc) or exc.__class__.__name__)

        if reply is not None:
            await self._reply(message.chat.id, reply, message.text)

    async def _typing(self, chat_id: int) -> None:
        try:
            await self.sender.send_chat_action(chat_id, "typing")
        except TelegramAPIError as exc:
            logger.debug("chat_action_failed", chat_id=chat_id, error=str(exc))

    async def _reply(self, chat_id: int, reply: Reply, text: str) -> None:
        try:
            await self.sender.send_message(chat_id, reply.text, reply.parse_mode)
        except TelegramAPIError as exc:
            logger.warning("reply_failed", chat_id=chat_id, text=text, error=str(exc))
