"""Alertmanager webhook payload schemas."""
from __future__ import annotations

from dataclasses import dataclass

from pydantic import Field

from alertbridge.schemas.alertmanager import Alert, AlertmanagerModel


class WebhookAlert(Alert):
    """Alert inside a webhook notification."""

    status: str = "firing"


class WebhookMessage(AlertmanagerModel):
    """
    Alertmanager webhook notification (payload version 4).

    See https://prometheus.io/docs/alerting/latest/configuration/#webhook_config
    """

    version: str = "4"
    group_key: str = ""
    truncated_alerts: int = 0
    status: str = "firing"
    receiver: str = ""
    group_labels: dict[str, str] = Field(default_factory=dict)
    common_labels: dict[str, str] = Field(default_factory=dict)
    common_annotations: dict[str, str] = Field(default_factory=dict)
    external_url: str = Field(default="", alias="externalURL")
    alerts: list[WebhookAlert] = Field(default_factory=list)


@dataclass(frozen=True)
class WebhookEvent:
    """A decoded webhook addressed to one chat."""

    chat_id: int
    message: WebhookMessage
