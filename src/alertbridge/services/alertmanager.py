"""Alertmanager API v2 client."""
from __future__ import annotations

from typing import Any

import httpx
import structlog
from pydantic import TypeAdapter, ValidationError

from alertbridge.schemas.alertmanager import AlertmanagerStatus, GettableAlert, Silence
from alertbridge.services.http_retry import RetryingHTTPClient
from alertbridge.utils.exceptions import UpstreamUnavailableError

logger = structlog.get_logger(__name__)

API_PATH = "/api/v2"

_alerts_adapter = TypeAdapter(list[GettableAlert])
_silences_adapter = TypeAdapter(list[Silence])


def _bool_param(value: bool) -> str:
    return "true" if value else "false"


class AlertmanagerClient:
    """Read alerts, silences and status from Alertmanager."""

    def __init__(self, base_url: str, http: RetryingHTTPClient | None = None):
        base = base_url.rstrip("/")
        if not base.endswith(API_PATH):
            base = base + API_PATH
        self.base_url = base
        self.http = http or RetryingHTTPClient()

    async def close(self) -> None:
        await self.http.close()

    async def list_alerts(
        self,
        receiver: str | None = None,
        silenced: bool = False,
    ) -> list[GettableAlert]:
        """
        List active alerts.

        Args:
            receiver: Only alerts routed to this receiver (regex)
            silenced: Include silenced alerts

        Returns:
            Alerts as returned by Alertmanager
        """
        params = {
            "active": "true",
            "inhibited": "true",
            "unprocessed": "true",
            "silenced": _bool_param(silenced),
        }
        if receiver:
            params["receiver"] = receiver

        payload = await self._get("list_alerts", "/alerts", params)
        try:
            return _alerts_adapter.validate_python(payload)
        except ValidationError as exc:
            raise UpstreamUnavailableError("list_alerts", f"invalid alerts payload: {exc}") from exc

    async def list_silences(self) -> list[Silence]:
        """List all silences, expired ones included."""
        payload = await self._get("list_silences", "/silences")
        try:
            return _silences_adapter.validate_python(payload)
        except ValidationError as exc:
            raise UpstreamUnavailableError("list_silences", f"invalid silences payload: {exc}") from exc

    async def status(self) -> AlertmanagerStatus:
        """Fetch version, uptime and configuration."""
        payload = await self._get("status", "/status")
        try:
            return AlertmanagerStatus.model_validate(payload)
        except ValidationError as exc:
            raise UpstreamUnavailableError("status", f"invalid status payload: {exc}") from exc

    async def _get(
        self,
        operation: str,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = await self.http.get(url, params=params)
            return response.json()
        except httpx.HTTPError as exc:
            logger.warning("alertmanager_request_failed", operation=operation, url=url, error=str(exc))
            raise UpstreamUnavailableError(operation, str(exc)) from exc
        except ValueError as exc:
            logger.warning("alertmanager_invalid_json", operation=operation, url=url)
            raise UpstreamUnavailableError(operation, f"invalid JSON from {url}") from exc
