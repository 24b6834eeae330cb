"""Unit tests for Pydantic v2 schemas, no network required."""
from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from alertbridge.schemas.alertmanager import Alert, Silence, SilenceState
from alertbridge.schemas.chat import Chat, ChatType
from alertbridge.schemas.telegram import TelegramMessage, TelegramUser
from alertbridge.schemas.webhook import WebhookMessage


# ── WebhookMessage ────────────────────────────────────────────────────────────

@pytest.mark.unit
def test_webhook_message_from_camel_case(webhook_payload) -> None:
    message = WebhookMessage.model_validate(webhook_payload())
    assert message.group_key == '{}:{alertname="Fire"}'
    assert message.external_url == "http://alertmanager:9093"
    assert message.common_labels["severity"] == "critical"
    assert len(message.alerts) == 1
    assert message.alerts[0].status == "firing"
    assert message.alerts[0].fingerprint == "a1b2c3"


@pytest.mark.unit
def test_webhook_message_ignores_unknown_fields(webhook_payload) -> None:
    payload = webhook_payload()
    payload["somethingNew"] = {"nested": True}
    payload["alerts"][0]["extra"] = 1
    assert WebhookMessage.model_validate(payload).receiver == "telegram"


@pytest.mark.unit
def test_webhook_message_rejects_wrong_types() -> None:
    with pytest.raises(ValidationError):
        WebhookMessage.model_validate({"alerts": "not-a-list"})


@pytest.mark.unit
def test_webhook_message_resolved(webhook_payload, now: datetime) -> None:
    message = WebhookMessage.model_validate(webhook_payload(ends_at=now))
    assert message.status == "resolved"
    assert message.alerts[0].ends_at == now


# ── Alert ─────────────────────────────────────────────────────────────────────

@pytest.mark.unit
@pytest.mark.parametrize("value", ["0001-01-01T00:00:00Z", "0001-01-01T00:00:00.000Z", "", None])
def test_alert_unset_end(value) -> None:
    alert = Alert.model_validate({"labels": {"alertname": "Fire"}, "endsAt": value})
    assert alert.ends_at is None


@pytest.mark.unit
def test_alert_naive_timestamp_is_utc() -> None:
    alert = Alert(starts_at=datetime(2026, 3, 14, 11, 0))
    assert alert.starts_at.tzinfo == timezone.utc


@pytest.mark.unit
def test_alert_name() -> None:
    assert Alert(labels={"alertname": "Fire"}).name == "Fire"
    assert Alert().name is None


# ── Silence ───────────────────────────────────────────────────────────────────

@pytest.mark.unit
def test_silence_defaults() -> None:
    silence = Silence.model_validate({"id": "abc", "status": {"state": "expired"}})
    assert silence.state == SilenceState.EXPIRED
    assert silence.matchers == []


# ── Telegram ──────────────────────────────────────────────────────────────────

@pytest.mark.unit
def test_message_from_alias() -> None:
    message = TelegramMessage.model_validate(
        {
            "message_id": 1,
            "date": 0,
            "chat": {"id": -1234, "type": "supergroup", "title": "Ops"},
            "from": {"id": 123, "first_name": "Elliot"},
            "text": "/alerts",
        }
    )
    assert message.sender == TelegramUser(id=123, first_name="Elliot")
    assert message.chat.type == ChatType.SUPERGROUP
    assert message.is_private is False
    assert message.is_service is False


@pytest.mark.unit
@pytest.mark.parametrize(
    "extra",
    [
        {"new_chat_members": [{"id": 5}]},
        {"left_chat_member": {"id": 5}},
        {"new_chat_title": "Renamed"},
        {"group_chat_created": True},
        {"migrate_to_chat_id": -100123},
        {"pinned_message": {"message_id": 3}},
    ],
)
def test_service_messages(extra) -> None:
    message = TelegramMessage.model_validate({"chat": {"id": -1, "type": "group"}, **extra})
    assert message.is_service is True


# ── Chat ──────────────────────────────────────────────────────────────────────

@pytest.mark.unit
def test_chat_is_immutable() -> None:
    chat = Chat(id=1)
    with pytest.raises(ValidationError):
        chat.id = 2


@pytest.mark.unit
def test_chat_json_omits_unset() -> None:
    assert Chat(id=7, username="elliot").model_dump_json(exclude_none=True) == (
        '{"id":7,"type":"private","username":"elliot"}'
    )
