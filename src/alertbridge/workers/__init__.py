from __future__ import annotations

from alertbridge.workers.update_poller import UpdatePoller
from alertbridge.workers.webhook_router import WebhookRouter

__all__ = [
    "UpdatePoller",
    "WebhookRouter",
]
