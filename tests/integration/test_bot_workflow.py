"""
End-to-end flow: subscribe over chat, then receive an alert by webhook.

Telegram is the recording fake from conftest; the HTTP side runs the real
FastAPI app in-process.
"""
from __future__ import annotations

import asyncio

import pytest
from httpx import ASGITransport, AsyncClient

from alertbridge.main import create_app
from alertbridge.schemas.webhook import WebhookEvent
from alertbridge.services.dispatcher import CommandDispatcher
from alertbridge.services.formatter import MessageFormatter
from alertbridge.services.metrics import PrometheusMetrics
from alertbridge.store.chats import ChatStore
from alertbridge.workers.webhook_router import WebhookRouter


@pytest.mark.integration
async def test_subscribe_then_receive_alert(
    dispatcher: CommandDispatcher,
    chat_store: ChatStore,
    formatter: MessageFormatter,
    telegram,
    metrics: PrometheusMetrics,
    make_message,
    webhook_payload,
) -> None:
    queue: asyncio.Queue[WebhookEvent] = asyncio.Queue(maxsize=4)
    router = WebhookRouter(queue, chat_store, formatter, telegram, metrics)
    router_task = asyncio.create_task(router.start())

    await dispatcher.dispatch(make_message("/start"))
    assert telegram.texts() == ["Hey, Elliot! I will now keep you up to date!\n/help"]
    telegram.messages.clear()

    app = create_app(queue, metrics)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        resp = await c.post("/webhooks/telegram/123", json=webhook_payload())
    assert resp.status_code == 200

    await asyncio.wait_for(queue.join(), timeout=1)
    router_task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await router_task

    assert len(telegram.messages) == 1
    chat_id, text, _ = telegram.messages[0]
    assert chat_id == 123
    assert "🔥" in text
    assert "Fire" in text
    assert "1 hour" in text
    assert metrics.webhook_count() == 1
    assert metrics.delivery_count("delivered") == 1
    assert metrics.command_count("/start") == 1


@pytest.mark.integration
async def test_unsubscribed_chat_gets_nothing(
    dispatcher: CommandDispatcher,
    chat_store: ChatStore,
    formatter: MessageFormatter,
    telegram,
    metrics: PrometheusMetrics,
    make_message,
    webhook_payload,
) -> None:
    queue: asyncio.Queue[WebhookEvent] = asyncio.Queue(maxsize=4)
    router = WebhookRouter(queue, chat_store, formatter, telegram, metrics)

    await dispatcher.dispatch(make_message("/start"))
    await dispatcher.dispatch(make_message("/stop"))
    telegram.messages.clear()

    app = create_app(queue, metrics)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        resp = await c.post("/webhooks/telegram/123", json=webhook_payload())
    assert resp.status_code == 200

    assert await router.deliver(queue.get_nowait()) == "chat_not_found"
    assert telegram.messages == []
