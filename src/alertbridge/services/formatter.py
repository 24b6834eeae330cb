"""Render alerts and silences into Telegram messages."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Iterable

import structlog

from alertbridge.schemas.alertmanager import Alert, Silence
from alertbridge.schemas.telegram import ParseMode
from alertbridge.schemas.webhook import WebhookMessage
from alertbridge.services.templates import AlertTemplates
from alertbridge.utils.durations import humanize
from alertbridge.utils.exceptions import RenderError

logger = structlog.get_logger(__name__)

# Telegram rejects messages above 4096 bytes.
MAX_MESSAGE_BYTES = 4095
HTML_SNIP_MARKER = "\n<b>[SNIP]</b>"
# Legacy Markdown reads a bare "[" as the start of a link.
MARKDOWN_SNIP_MARKER = "\n\\[SNIP]"
# Blank lines past this offset are not used as a cut point.
SNIP_SEARCH_BYTES = 4080
TOO_LONG_MESSAGE = "Message is too long... can't send.."

Clock = Callable[[], datetime]


class AlertState(str, Enum):
    FIRING = "firing"
    RESOLVED = "resolved"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _escape_markdown(value: str) -> str:
    return value.replace("_", "\\_")


class MessageFormatter:
    """Turn alert groups and silences into bounded chat messages."""

    def __init__(
        self,
        parse_mode: ParseMode = ParseMode.HTML,
        clock: Clock = utcnow,
        templates: AlertTemplates | None = None,
    ):
        self.parse_mode = parse_mode
        self.clock = clock
        self.templates = templates or AlertTemplates()

    def alert_state(self, alert: Alert, now: datetime | None = None) -> AlertState:
        """Resolved once the end time is set, after the start and not in the future."""
        now = now or self.clock()
        if (
            alert.ends_at is not None
            and (alert.starts_at is None or alert.ends_at > alert.starts_at)
            and alert.ends_at <= now
        ):
            return AlertState.RESOLVED
        return AlertState.FIRING

    def render(self, message: WebhookMessage) -> str:
        """Render a webhook notification, truncated to Telegram's limit."""
        if not message.alerts:
            raise RenderError("notification carries no alerts")
        return self.truncate(self.render_alerts(message.alerts, message))

    def render_alerts(self, alerts: Iterable[Alert], message: WebhookMessage | None = None) -> str:
        """
        Render alerts in the configured parse mode.

        HTML goes through the alert template with the notification's group
        data; Markdown uses the built-in layout, alerts separated by blank
        lines.

        Raises:
            RenderError: An alert has no ``alertname`` label or the
                template failed
        """
        alerts = list(alerts)
        now = self.clock()
        if self.parse_mode == ParseMode.MARKDOWN:
            return "\n\n".join(self.alert_markdown(alert, now) for alert in alerts)
        for alert in alerts:
            self._alertname(alert)
        return self.templates.render(self.template_context(alerts, message, now))

    def alert_html(self, alert: Alert, now: datetime | None = None) -> str:
        now = now or self.clock()
        self._alertname(alert)
        return self.templates.render(self.template_context([alert], None, now))

    def template_context(
        self,
        alerts: list[Alert],
        message: WebhookMessage | None,
        now: datetime,
    ) -> dict[str, Any]:
        """Variables and helpers visible to alert templates."""
        if message is None:
            firing = any(self.alert_state(alert, now) == AlertState.FIRING for alert in alerts)
            message = WebhookMessage(
                receiver="default",
                status=AlertState.FIRING.value if firing else AlertState.RESOLVED.value,
            )
        return {
            "receiver": message.receiver,
            "status": message.status,
            "alerts": alerts,
            "group_labels": message.group_labels,
            "common_labels": message.common_labels,
            "common_annotations": message.common_annotations,
            "external_url": message.external_url or self.templates.external_url,
            "since": lambda moment: humanize(self._since(moment, now)),
            "duration": lambda start, end: humanize(self._between(start, end)),
            "is_resolved": lambda alert: self.alert_state(alert, now) == AlertState.RESOLVED,
        }

    def alert_markdown(self, alert: Alert, now: datetime | None = None) -> str:
        now = now or self.clock()
        name = self._alertname(alert)
        if self.alert_state(alert, now) == AlertState.RESOLVED:
            status = "*RESOLVED*"
            duration = (
                f"*Ended*: {humanize(now - alert.ends_at)} ago\n"
                f"*Duration*: {humanize(self._between(alert.starts_at, alert.ends_at))}"
            )
        else:
            status = "🔥 *FIRING* 🔥"
            duration = f"*Started*: {humanize(self._since(alert.starts_at, now))} ago"

        summary = alert.annotations.get("summary", "")
        description = alert.annotations.get("description", "")
        return (
            f"{status}\n"
            f"*{_escape_markdown(name)}* ({_escape_markdown(summary)})\n"
            f"{_escape_markdown(description)}\n"
            f"{duration}\n"
        )

    def silence_resolved(self, silence: Silence, now: datetime | None = None) -> bool:
        now = now or self.clock()
        return silence.ends_at is not None and silence.ends_at <= now

    def silence_message(self, silence: Silence, now: datetime | None = None) -> str:
        """Render a silence as Markdown."""
        now = now or self.clock()
        alertname = ""
        matchers = []
        for matcher in silence.matchers:
            if matcher.name == "alertname":
                alertname = matcher.value
            else:
                matchers.append(f'{matcher.name}="{matcher.value}"')

        if self.silence_resolved(silence, now):
            emoji = ""
            duration = (
                f"*Ended*: {humanize(now - silence.ends_at)} ago\n"
                f"*Duration*: {humanize(silence.ends_at - (silence.starts_at or silence.ends_at))}"
            )
        else:
            emoji = " 🔕"
            duration = f"*Started*: {humanize(self._since(silence.starts_at, now))} ago\n"
            if silence.ends_at is not None:
                duration += f"*Ends*: in {humanize(silence.ends_at - now)}\n"

        return f"{_escape_markdown(alertname)}{emoji}\n```{' '.join(matchers)}```\n{duration}\n"

    def truncate(self, text: str, parse_mode: ParseMode | None = None) -> str:
        """
        Keep a message within Telegram's size limit.

        Oversized messages are cut at the last blank line before the limit
        and marked with ``[SNIP]`` in the message's parse mode, which
        defaults to the formatter's; if there is no such line the whole
        message is replaced by a notice.
        """
        data = text.encode("utf-8")
        if len(data) <= MAX_MESSAGE_BYTES:
            return text

        logger.warning("message_too_long", size=len(data), limit=MAX_MESSAGE_BYTES)
        cut = data.rfind(b"\n\n", 0, SNIP_SEARCH_BYTES)
        if cut > 1:
            marker = HTML_SNIP_MARKER
            if (parse_mode or self.parse_mode) == ParseMode.MARKDOWN:
                marker = MARKDOWN_SNIP_MARKER
            return data[:cut].decode("utf-8") + marker

        logger.warning("message_truncate_failed", size=len(data))
        return TOO_LONG_MESSAGE

    @staticmethod
    def _alertname(alert: Alert) -> str:
        name = alert.labels.get("alertname")
        if not name:
            raise RenderError("alert has no alertname label")
        return name

    @staticmethod
    def _since(moment: datetime | None, now: datetime) -> timedelta:
        if moment is None:
            return timedelta(0)
        return now - moment

    @staticmethod
    def _between(start: datetime | None, end: datetime | None) -> timedelta:
        if start is None or end is None:
            return timedelta(0)
        return end - start
