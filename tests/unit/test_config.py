"""Unit tests for environment driven settings."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from alertbridge.config import MessageFormat, Settings, StoreBackend


@pytest.mark.unit
def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TELEGRAM_ADMINS", raising=False)
    settings = Settings(_env_file=None)

    assert settings.alertmanager_url == "http://localhost:9093/"
    assert settings.api_port == 8080
    assert settings.store == StoreBackend.FILE
    assert settings.message_format == MessageFormat.HTML
    assert settings.telegram_admins == []


@pytest.mark.unit
def test_admins_from_comma_separated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TELEGRAM_ADMINS", "123, 456,789")
    assert Settings(_env_file=None).telegram_admins == [123, 456, 789]


@pytest.mark.unit
def test_single_admin_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TELEGRAM_ADMINS", "123")
    assert Settings(_env_file=None).telegram_admins == [123]


@pytest.mark.unit
def test_invalid_admin_id(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TELEGRAM_ADMINS", "123,elliot")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


@pytest.mark.unit
def test_log_level_normalized() -> None:
    assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"
    with pytest.raises(ValidationError):
        Settings(_env_file=None, log_level="chatty")


@pytest.mark.unit
def test_store_backend_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STORE", "sql")
    monkeypatch.setenv("MESSAGE_FORMAT", "markdown")
    settings = Settings(_env_file=None)
    assert settings.store == StoreBackend.SQL
    assert settings.message_format == MessageFormat.MARKDOWN


@pytest.mark.unit
def test_template_paths_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEMPLATE_PATHS", "/etc/alertbridge/*.j2, /srv/extra.j2")
    monkeypatch.setenv("TEMPLATE_NAME", "ops.j2")
    settings = Settings(_env_file=None)
    assert settings.template_paths == ["/etc/alertbridge/*.j2", "/srv/extra.j2"]
    assert settings.template_name == "ops.j2"


@pytest.mark.unit
def test_template_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TEMPLATE_PATHS", raising=False)
    monkeypatch.delenv("TEMPLATE_NAME", raising=False)
    settings = Settings(_env_file=None)
    assert settings.template_paths == []
    assert settings.template_name == "default.j2"
