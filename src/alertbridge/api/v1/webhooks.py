"""Alertmanager webhook receiver."""
from __future__ import annotations

import re

import structlog
from fastapi import APIRouter, HTTPException, Request, Response
from pydantic import ValidationError

from alertbridge.dependencies import MetricsDep, WebhookQueueDep
from alertbridge.schemas.webhook import WebhookEvent, WebhookMessage

logger = structlog.get_logger(__name__)

router = APIRouter()

SUPPORTED_PLATFORMS = frozenset({"telegram"})

# ASCII digits only; int() alone also takes underscores, whitespace and Unicode digits.
CHAT_ID_PATTERN = re.compile(r"[+-]?[0-9]+")


@router.post("/{platform}/{chat_id}", status_code=200)
async def receive_webhook(
    platform: str,
    chat_id: str,
    request: Request,
    queue: WebhookQueueDep,
    metrics: MetricsDep,
) -> Response:
    """
    Queue an Alertmanager notification for one chat.

    Blocks while the delivery queue is full.
    """
    if platform not in SUPPORTED_PLATFORMS:
        raise HTTPException(status_code=404, detail=f"unknown platform {platform}")

    if CHAT_ID_PATTERN.fullmatch(chat_id) is None:
        logger.warning("webhook_invalid_chat_id", chat_id=chat_id)
        raise HTTPException(status_code=400, detail="unable to parse chat ID")
    parsed_chat_id = int(chat_id)

    body = await request.body()
    if not body.strip():
        raise HTTPException(status_code=400, detail="empty request body")

    try:
        message = WebhookMessage.model_validate_json(body)
    except ValidationError as exc:
        logger.warning("webhook_invalid_payload", chat_id=parsed_chat_id, error=str(exc))
        raise HTTPException(status_code=400, detail="unable to decode webhook payload") from exc

    metrics.webhook()
    await queue.put(WebhookEvent(chat_id=parsed_chat_id, message=message))
    logger.debug(
        "webhook_queued",
        chat_id=parsed_chat_id,
        alert_count=len(message.alerts),
        queued=queue.qsize(),
    )
    return Response(status_code=200)
