#!/usr/bin/env python3
"""Run the Alertmanager Telegram bot."""
from __future__ import annotations

import asyncio

import structlog

from alertbridge.runner import main

logger = structlog.get_logger(__name__)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("shutdown_requested")
