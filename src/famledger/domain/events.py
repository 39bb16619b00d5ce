"""Post-commit event bus and notification glue.

Services publish an event only after their database commit succeeded.
Handlers run best-effort: a failing handler is logged and skipped so it can
never undo or fail the state change that produced the event.
"""

import logging
from typing import Callable, Protocol

from famledger.domain.entities import NotificationEvent
from famledger.domain.errors import CollaboratorUnavailableError

logger = logging.getLogger(__name__)

EventHandler = Callable[[NotificationEvent], None]

LOAN_PAYMENT_RECORDED = "loan.payment_recorded"
LOAN_PAID_OFF = "loan.paid_off"
TRANSACTION_CREATED = "transaction.created"
TRANSACTION_UPDATED = "transaction.updated"
TRANSACTION_DELETED = "transaction.deleted"
RECURRING_EXECUTED = "recurring.executed"
BILL_PAID = "bill.paid"
GOAL_REACHED = "goal.reached"


class NotificationSender(Protocol):
    """Transport that delivers an event to the user."""

    def notify(self, event: NotificationEvent) -> None:
        ...


class EventBus:
    """Synchronous publish/subscribe for post-commit events."""

    def __init__(self) -> None:
        self._handlers: list[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> None:
        """Register a handler for every published event."""
        self._handlers.append(handler)

    def publish(self, event: NotificationEvent) -> None:
        """Deliver event to all handlers, logging and skipping failures."""
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception:
                logger.warning("Event handler failed for %s", event.kind, exc_info=True)


class NotificationHandler:
    """Event handler forwarding events to a NotificationSender."""

    def __init__(self, sender: NotificationSender):
        self.sender = sender

    def __call__(self, event: NotificationEvent) -> None:
        try:
            self.sender.notify(event)
        except CollaboratorUnavailableError as e:
            logger.warning("Notification for %s not delivered: %s", event.kind, e)
