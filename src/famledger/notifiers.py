"""Notification transports for post-commit events."""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

import httpx

from famledger.domain.entities import NotificationEvent
from famledger.domain.errors import CollaboratorUnavailableError
from famledger.domain.events import EventBus, NotificationHandler

logger = logging.getLogger(__name__)


def _json_safe(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: _json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(item) for item in value]
    return value


def event_body(event: NotificationEvent) -> dict[str, Any]:
    """JSON body sent for an event."""
    return {"kind": event.kind, "payload": _json_safe(event.payload)}


class LoggingNotificationSender:
    """Writes each event to the log. Used when no webhook is configured."""

    def notify(self, event: NotificationEvent) -> None:
        logger.info("Notification %s: %s", event.kind, _json_safe(event.payload))


class WebhookNotificationSender:
    """POSTs each event as JSON to a webhook URL."""

    def __init__(self, url: str, timeout: float = 5.0, client: Optional[httpx.Client] = None):
        """
        Args:
            url: Webhook endpoint
            timeout: Seconds before a request is abandoned
            client: Optional preconfigured httpx client
        """
        self.url = url
        self.timeout = timeout
        self.client = client or httpx.Client(timeout=timeout)

    def notify(self, event: NotificationEvent) -> None:
        """Deliver the event.

        Raises:
            CollaboratorUnavailableError: On network errors, timeouts or non-2xx replies
        """
        try:
            response = self.client.post(self.url, json=event_body(event), timeout=self.timeout)
            response.raise_for_status()
        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            raise CollaboratorUnavailableError(f"Webhook {self.url} failed: {e}") from e

    def close(self) -> None:
        self.client.close()


def build_event_bus(webhook_url: Optional[str] = None, timeout: float = 5.0) -> EventBus:
    """Event bus delivering every event to the webhook, or to the log when none is set."""
    if webhook_url:
        sender = WebhookNotificationSender(webhook_url, timeout=timeout)
    else:
        sender = LoggingNotificationSender()
    bus = EventBus()
    bus.subscribe(NotificationHandler(sender))
    return bus
