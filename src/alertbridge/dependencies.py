from __future__ import annotations

import asyncio
from typing import Annotated

from fastapi import Depends, Request

from alertbridge.schemas.webhook import WebhookEvent
from alertbridge.services.metrics import PrometheusMetrics


def get_webhook_queue(request: Request) -> asyncio.Queue[WebhookEvent]:
    """Dependency to get the queue feeding the webhook router."""
    return request.app.state.webhook_queue


def get_metrics(request: Request) -> PrometheusMetrics:
    """Dependency to get the bot's metrics."""
    return request.app.state.metrics


WebhookQueueDep = Annotated[asyncio.Queue[WebhookEvent], Depends(get_webhook_queue)]
MetricsDep = Annotated[PrometheusMetrics, Depends(get_metrics)]
