"""Alertmanager API v2 schemas."""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Alertmanager encodes an unset timestamp as Go's zero time.
ZERO_TIME_PREFIX = "0001-01-01"


def _parse_timestamp(value: Any) -> Any:
    if value is None or value == "":
        return None
    if isinstance(value, str) and value.startswith(ZERO_TIME_PREFIX):
        return None
    return value


def _ensure_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class AlertmanagerModel(BaseModel):
    """Base model accepting Alertmanager's camelCase keys."""

    model_config = ConfigDict(
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Alert(AlertmanagerModel):
    """A single alert as sent by Alertmanager."""

    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    updated_at: datetime | None = None
    generator_url: str | None = Field(default=None, alias="generatorURL")
    fingerprint: str | None = None

    @field_validator("starts_at", "ends_at", "updated_at", mode="before")
    @classmethod
    def parse_zero_time(cls, v):
        """Map the zero timestamp to None."""
        return _parse_timestamp(v)

    @field_validator("starts_at", "ends_at", "updated_at", mode="after")
    @classmethod
    def assume_utc(cls, v):
        return _ensure_utc(v)

    @property
    def name(self) -> str | None:
        return self.labels.get("alertname")


class AlertStatus(AlertmanagerModel):
    state: str = "unprocessed"
    silenced_by: list[str] = Field(default_factory=list)
    inhibited_by: list[str] = Field(default_factory=list)


class GettableAlert(Alert):
    """An alert returned by ``GET /api/v2/alerts``."""

    status: AlertStatus = Field(default_factory=AlertStatus)
    receivers: list[dict[str, Any]] = Field(default_factory=list)


class Matcher(AlertmanagerModel):
    name: str
    value: str
    is_regex: bool = False
    is_equal: bool = True


class SilenceState(str, Enum):
    """Silence lifecycle states."""

    PENDING = "pending"
    ACTIVE = "active"
    EXPIRED = "expired"


class SilenceStatus(AlertmanagerModel):
    state: SilenceState = SilenceState.ACTIVE


class Silence(AlertmanagerModel):
    """A silence returned by ``GET /api/v2/silences``."""

    id: str = ""
    matchers: list[Matcher] = Field(default_factory=list)
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    updated_at: datetime | None = None
    created_by: str = ""
    comment: str = ""
    status: SilenceStatus = Field(default_factory=SilenceStatus)

    @field_validator("starts_at", "ends_at", "updated_at", mode="before")
    @classmethod
    def parse_zero_time(cls, v):
        return _parse_timestamp(v)

    @field_validator("starts_at", "ends_at", "updated_at", mode="after")
    @classmethod
    def assume_utc(cls, v):
        return _ensure_utc(v)

    @property
    def state(self) -> SilenceState:
        return self.status.state


class VersionInfo(AlertmanagerModel):
    version: str = ""
    revision: str = ""
    branch: str = ""
    build_user: str = ""
    build_date: str = ""
    go_version: str = ""


class AlertmanagerConfig(AlertmanagerModel):
    original: str = ""


class AlertmanagerStatus(AlertmanagerModel):
    """Response of ``GET /api/v2/status``."""

    uptime: datetime
    version_info: VersionInfo = Field(default_factory=VersionInfo)
    config: AlertmanagerConfig = Field(default_factory=AlertmanagerConfig)

    @field_validator("uptime", mode="after")
    @classmethod
    def assume_utc(cls, v):
        return _ensure_utc(v)

    @property
    def version(self) -> str:
        return self.version_info.version
