from __future__ import annotations

import asyncio

from fastapi import FastAPI, Response

from alertbridge import __version__
from alertbridge.api.v1 import webhooks
from alertbridge.schemas.webhook import WebhookEvent
from alertbridge.services.metrics import PrometheusMetrics


def create_app(
    queue: asyncio.Queue[WebhookEvent],
    metrics: PrometheusMetrics,
) -> FastAPI:
    """
    Build the HTTP application.

    Args:
        queue: Queue feeding the webhook router
        metrics: Counters exposed on ``/metrics``

    Returns:
        FastAPI: Application serving webhooks, health and metrics
    """
    app = FastAPI(
        title="Alertmanager Telegram Bridge",
        description="Forwards Alertmanager notifications to Telegram chats",
        version=__version__,
        docs_url=None,
        redoc_url=None,
    )
    app.state.webhook_queue = queue
    app.state.metrics = metrics

    app.include_router(
        webhooks.router,
        prefix="/webhooks",
        tags=["webhooks"],
    )

    @app.get("/health")
    @app.get("/healthz")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.get("/metrics")
    async def metrics_endpoint() -> Response:
        """Prometheus exposition."""
        return Response(content=metrics.render(), media_type=metrics.content_type)

    return app
