"""Prometheus counters for commands, webhooks and deliveries."""
from __future__ import annotations

from typing import Protocol

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, generate_latest

DROPPED = "dropped"
INCOMPREHENSIBLE = "incomprehensible"


class BotMetrics(Protocol):
    """Sink for the bot's counters."""

    def command(self, name: str) -> None: ...

    def webhook(self) -> None: ...

    def delivery(self, outcome: str) -> None: ...


class PrometheusMetrics:
    """Counters registered on a private registry, one per bot instance."""

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, registry: CollectorRegistry | None = None):
        self.registry = registry or CollectorRegistry()
        self.commands_total = Counter(
            "alertbridge_commands",
            "Chat commands received, by command",
            ["command"],
            registry=self.registry,
        )
        self.webhooks_total = Counter(
            "alertbridge_webhooks",
            "Alertmanager webhooks accepted",
            registry=self.registry,
        )
        self.deliveries_total = Counter(
            "alertbridge_deliveries",
            "Webhook deliveries, by outcome",
            ["outcome"],
            registry=self.registry,
        )

    def command(self, name: str) -> None:
        self.commands_total.labels(command=name).inc()

    def webhook(self) -> None:
        self.webhooks_total.inc()

    def delivery(self, outcome: str) -> None:
        self.deliveries_total.labels(outcome=outcome).inc()

    def command_count(self, name: str) -> float:
        value = self.registry.get_sample_value("alertbridge_commands_total", {"command": name})
        return value or 0.0

    def webhook_count(self) -> float:
        return self.registry.get_sample_value("alertbridge_webhooks_total") or 0.0

    def delivery_count(self, outcome: str) -> float:
        value = self.registry.get_sample_value("alertbridge_deliveries_total", {"outcome": outcome})
        return value or 0.0

    def render(self) -> bytes:
        """Exposition format for ``GET /metrics``."""
        return generate_latest(self.registry)
