"""Wire the bot together and supervise its tasks."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Protocol

import structlog
import uvicorn

from alertbridge.config import MessageFormat, Settings, get_settings
from alertbridge.main import create_app
from alertbridge.schemas.telegram import ParseMode
from alertbridge.schemas.webhook import WebhookEvent
from alertbridge.services.alertmanager import AlertmanagerClient
from alertbridge.services.dispatcher import AdminSet, CommandDispatcher
from alertbridge.services.formatter import MessageFormatter
from alertbridge.services.metrics import PrometheusMetrics
from alertbridge.services.telegram_client import TelegramClient
from alertbridge.services.telegram_service import COMMAND_DESCRIPTIONS, TelegramService
from alertbridge.services.templates import AlertTemplates
from alertbridge.store import ChatStore, KVStore, build_kv_store
from alertbridge.utils.exceptions import TelegramAPIError
from alertbridge.utils.logging import setup_logging
from alertbridge.workers.update_poller import UpdatePoller
from alertbridge.workers.webhook_router import WebhookRouter

logger = structlog.get_logger(__name__)


class Server(Protocol):
    should_exit: bool

    async def serve(self, sockets: Any = None) -> None: ...


class BotRunner:
    """
    Run the update poller, webhook router and HTTP server together.

    The first task to finish, normally or with an error, stops the others.
    The HTTP server is asked to exit and given a grace period; the other
    tasks are cancelled. An error from the finishing task is re-raised.
    """

    def __init__(
        self,
        poller: UpdatePoller,
        router: WebhookRouter,
        server: Server,
        shutdown_timeout: float = 5.0,
    ):
        self.poller = poller
        self.router = router
        self.server = server
        self.shutdown_timeout = shutdown_timeout

    async def run(self) -> None:
        tasks = {
            asyncio.create_task(self.poller.start(), name="update_poller"),
            asyncio.create_task(self.router.start(), name="webhook_router"),
        }
        server_task = asyncio.create_task(self.server.serve(), name="http_server")
        tasks.add(server_task)

        try:
            done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            await self._shutdown(server_task, tasks)
            raise

        first = next(iter(done))
        logger.info("bot_task_finished", task=first.get_name())
        await self._shutdown(server_task, pending)

        for task in done:
            if not task.cancelled() and task.exception() is not None:
                raise task.exception()

    async def _shutdown(self, server_task: asyncio.Task, pending: set[asyncio.Task]) -> None:
        self.server.should_exit = True
        for task in pending:
            if task is not server_task:
                task.cancel()

        if server_task in pending:
            try:
                await asyncio.wait_for(server_task, timeout=self.shutdown_timeout)
            except asyncio.TimeoutError:
                logger.warning("http_server_shutdown_timeout", timeout=self.shutdown_timeout)
            except Exception as exc:
                logger.error("http_server_shutdown_error", error=str(exc))

        others = [task for task in pending if task is not server_task]
        if others:
            await asyncio.gather(*others, return_exceptions=True)


@dataclass
class Bot:
    """Everything built from settings, ready to run."""

    runner: BotRunner
    store: KVStore
    telegram: TelegramClient
    alertmanager: AlertmanagerClient
    metrics: PrometheusMetrics

    async def close(self) -> None:
        await self.telegram.close()
        await self.alertmanager.close()
        await self.store.close()


def build_bot(settings: Settings, server: Server | None = None) -> Bot:
    """Construct the bot's components from settings."""
    if not settings.telegram_token:
        raise ValueError("TELEGRAM_TOKEN is required")
    if not settings.telegram_admins:
        raise ValueError("TELEGRAM_ADMINS must list at least one user ID")

    templates = AlertTemplates.from_paths(
        settings.template_paths,
        entry=settings.template_name,
        external_url=settings.alertmanager_url,
    )
    parse_mode = ParseMode.MARKDOWN if settings.message_format == MessageFormat.MARKDOWN else ParseMode.HTML
    metrics = PrometheusMetrics()
    kv = build_kv_store(settings)
    chats = ChatStore(kv, prefix=settings.store_key_prefix)
    telegram = TelegramClient(settings.telegram_token, api_url=settings.telegram_api_url)
    alertmanager = AlertmanagerClient(settings.alertmanager_url)
    formatter = MessageFormatter(parse_mode=parse_mode, templates=templates)
    service = TelegramService(chats, alertmanager, formatter, revision=settings.revision)

    dispatcher = CommandDispatcher(
        sender=telegram,
        admins=AdminSet.of(settings.telegram_admins),
        handlers=service.handlers(),
        metrics=metrics,
    )
    queue: asyncio.Queue[WebhookEvent] = asyncio.Queue(maxsize=settings.webhook_queue_size)
    poller = UpdatePoller(telegram, dispatcher, poll_timeout=settings.telegram_poll_timeout)
    router = WebhookRouter(queue, chats, formatter, telegram, metrics)

    if server is None:
        app = create_app(queue, metrics)
        server = uvicorn.Server(
            uvicorn.Config(
                app,
                host=settings.api_host,
                port=settings.api_port,
                log_config=None,
                access_log=False,
            )
        )

    runner = BotRunner(poller, router, server, shutdown_timeout=settings.shutdown_timeout_seconds)
    return Bot(runner=runner, store=kv, telegram=telegram, alertmanager=alertmanager, metrics=metrics)


async def _register_commands(telegram: TelegramClient) -> None:
    commands = [(command.value, text) for command, text in COMMAND_DESCRIPTIONS.items()]
    try:
        await telegram.set_my_commands(commands)
    except TelegramAPIError as exc:
        logger.warning("telegram_set_commands_failed", error=str(exc))


async def main(settings: Settings | None = None) -> None:
    """Run the bot until a task exits or the process is interrupted."""
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_json)

    try:
        bot = build_bot(settings)
    except ValueError as exc:
        logger.error("invalid_configuration", error=str(exc))
        raise

    logger.info(
        "starting_bot",
        revision=settings.revision,
        admins=len(settings.telegram_admins),
        store=settings.store.value,
        alertmanager_url=settings.alertmanager_url,
    )
    try:
        await bot.store.open()
        await _register_commands(bot.telegram)
        await bot.runner.run()
    finally:
        await bot.close()
        logger.info("bot_stopped")


def cli() -> None:
    """Console entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("shutdown_requested")
