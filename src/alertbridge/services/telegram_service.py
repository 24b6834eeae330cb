"""Command handlers behind the Telegram bot."""
from __future__ import annotations

from datetime import datetime

import structlog

from alertbridge.schemas.telegram import ParseMode
from alertbridge.services.alertmanager import AlertmanagerClient
from alertbridge.services.dispatcher import Command, CommandInvocation, Handler, Reply
from alertbridge.services.formatter import MessageFormatter
from alertbridge.store.chats import ChatStore
from alertbridge.utils.durations import humanize
from alertbridge.utils.exceptions import (
    CommandError,
    RenderError,
    StorageError,
    UpstreamUnavailableError,
)

logger = structlog.get_logger(__name__)

COMMAND_DESCRIPTIONS: dict[Command, str] = {
    Command.START: "Subscribe for alerts.",
    Command.STOP: "Unsubscribe for alerts.",
    Command.STATUS: "Print the current status.",
    Command.ALERTS: "List all alerts.",
    Command.SILENCES: "List all silences.",
    Command.CHATS: "List all users and group chats that subscribed.",
    Command.ID: "Send the senders Telegram ID (works for all Telegram users).",
}

HELP_TEXT = (
    "I'm a Prometheus AlertManager Bot for Telegram. I will notify you about alerts.\n"
    f"You can also ask me about my {Command.STATUS.value}, {Command.ALERTS.value} & "
    f"{Command.SILENCES.value}\n"
    "\n"
    "Available commands:\n"
    + "\n".join(f"{command.value} - {text}" for command, text in COMMAND_DESCRIPTIONS.items())
)


class TelegramService:
    """Answer chat commands using the chat store and Alertmanager."""

    def __init__(
        self,
        chats: ChatStore,
        alertmanager: AlertmanagerClient,
        formatter: MessageFormatter,
        revision: str = "unknown",
        started_at: datetime | None = None,
    ):
        self.chats = chats
        self.alertmanager = alertmanager
        self.formatter = formatter
        self.revision = revision
        self.started_at = started_at or formatter.clock()

    def handlers(self) -> dict[Command, Handler]:
        """Handler table keyed by command."""
        return {
            Command.START: self.handle_start,
            Command.STOP: self.handle_stop,
            Command.HELP: self.handle_help,
            Command.CHATS: self.handle_chats,
            Command.ID: self.handle_id,
            Command.STATUS: self.handle_status,
            Command.ALERTS: self.handle_alerts,
            Command.SILENCES: self.handle_silences,
        }

    async def handle_start(self, invocation: CommandInvocation) -> Reply:
        try:
            await self.chats.add(invocation.chat)
        except StorageError as exc:
            raise CommandError("I can't add this chat to the subscribers list.", exc) from exc

        logger.info(
            "user_subscribed",
            username=invocation.sender.username,
            user_id=invocation.sender.id,
            chat_id=invocation.chat.id,
        )
        if not invocation.is_private:
            return Reply(f"Hey! I will now keep you all up to date!\n{Command.HELP.value}")
        if invocation.sender.first_name:
            return Reply(
                f"Hey, {invocation.sender.first_name}! I will now keep you up to date!\n"
                f"{Command.HELP.value}"
            )
        return Reply(f"Hey! I will now keep you up to date!\n{Command.HELP.value}")

    async def handle_stop(self, invocation: CommandInvocation) -> Reply:
        try:
            await self.chats.remove(invocation.chat)
        except StorageError as exc:
            raise CommandError("I can't remove this chat from the subscribers list.", exc) from exc

        logger.info(
            "user_unsubscribed",
            username=invocation.sender.username,
            user_id=invocation.sender.id,
            chat_id=invocation.chat.id,
        )
        return Reply(
            f"Alright, {invocation.sender.first_name}! I won't talk to you again.\n"
            f"{Command.HELP.value}"
        )

    async def handle_help(self, invocation: CommandInvocation) -> Reply:
        return Reply(HELP_TEXT)

    async def handle_chats(self, invocation: CommandInvocation) -> Reply:
        try:
            chats = await self.chats.list()
        except StorageError as exc:
            raise CommandError("I can't list the subscribed chats.", exc) from exc

        if not chats:
            return Reply("Currently no one is subscribed.")

        lines = "".join(f"@{chat.display_name}\n" for chat in chats)
        return Reply("Currently these chat have subscribed:\n" + lines.rstrip("\n"))

    async def handle_id(self, invocation: CommandInvocation) -> Reply:
        if invocation.is_private:
            return Reply(f"Your ID is {invocation.sender.id}")
        return Reply(f"Your ID is {invocation.sender.id}\nChat ID is {invocation.chat.id}")

    async def handle_status(self, invocation: CommandInvocation) -> Reply:
        try:
            status = await self.alertmanager.status()
        except UpstreamUnavailableError as exc:
            raise CommandError(f"failed to get status... {exc}", exc) from exc

        now = self.formatter.clock()
        return Reply(
            "*AlertManager*\n"
            f"Version: {status.version}\n"
            f"Uptime: {humanize(now - status.uptime)}\n"
            "*AlertManager Bot*\n"
            f"Version: {self.revision}\n"
            f"Uptime: {humanize(now - self.started_at)}",
            ParseMode.MARKDOWN,
        )

    async def handle_alerts(self, invocation: CommandInvocation) -> Reply | None:
        silenced = "silenced" in invocation.payload
        try:
            alerts = await self.alertmanager.list_alerts(silenced=silenced)
        except UpstreamUnavailableError as exc:
            raise CommandError(f"failed to list alerts... {exc}", exc) from exc

        if not alerts:
            return Reply("No alerts right now! 🎉")

        try:
            text = self.formatter.render_alerts(alerts)
        except RenderError as exc:
            logger.warning("alerts_render_failed", chat_id=invocation.chat.id, error=str(exc))
            return None
        return Reply(self.formatter.truncate(text), self.formatter.parse_mode)

    async def handle_silences(self, invocation: CommandInvocation) -> Reply:
        try:
            silences = await self.alertmanager.list_silences()
        except UpstreamUnavailableError as exc:
            raise CommandError(f"failed to list silences... {exc}", exc) from exc

        if not silences:
            return Reply("No silences right now.")

        text = "".join(self.formatter.silence_message(silence) + "\n" for silence in silences)
        return Reply(self.formatter.truncate(text, ParseMode.MARKDOWN), ParseMode.MARKDOWN)
