from __future__ import annotations

from alertbridge.api.v1 import webhooks

__all__ = [
    "webhooks",
]
