"""Savings goal domain service."""

import logging
from datetime import date
from typing import Optional

from famledger.database.base import Database
from famledger.domain import events as event_kinds
from famledger.domain.entities import Goal, NotificationEvent, OwnerScope
from famledger.domain.errors import InvalidInputError, NotFoundError
from famledger.domain.events import EventBus
from famledger.domain.locks import DEFAULT_MAX_ATTEMPTS, KeyedLocks, retry_on_conflict
from famledger.domain.money import ZERO, MoneyLike, to_money

logger = logging.getLogger(__name__)

_goal_locks = KeyedLocks()


class GoalService:
    """Service for savings goals."""

    def __init__(
        self,
        db: Database,
        events: Optional[EventBus] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        self.db = db
        self.events = events
        self.max_attempts = max_attempts

    def _require(self, goal_id: int, active_only: bool = False) -> Goal:
        goal = self.db.get_goal(goal_id)
        if goal is None or (active_only and not goal.is_active):
            raise NotFoundError(f"Goal {goal_id} not found or inactive")
        return goal

    def create_goal(
        self,
        user_id: str,
        name: str,
        target_amount: MoneyLike,
        current_amount: MoneyLike = ZERO,
        target_date: Optional[date] = None,
        description: Optional[str] = None,
        household_id: Optional[int] = None,
    ) -> int:
        """Create a savings goal.

        Returns:
            Goal ID

        Raises:
            InvalidInputError: If target is not positive or current is negative
        """
        name = (name or "").strip()
        if not name:
            raise InvalidInputError("Goal name is required")
        target = to_money(target_amount, "target amount")
        if target <= 0:
            raise InvalidInputError("Target amount must be greater than zero")
        current = to_money(current_amount, "current amount")
        if current < 0:
            raise InvalidInputError("Current amount cannot be negative")

        goal_id = self.db.create_goal(
            user_id=user_id,
            name=name,
            target_amount=target,
            current_amount=current,
            target_date=target_date,
            description=description,
            household_id=household_id,
        )
        logger.info("Created goal %s '%s' targeting %s", goal_id, name, target)
        return goal_id

    def get_goal(self, goal_id: int) -> Optional[Goal]:
        return self.db.get_goal(goal_id)

    def list_goals(self, scope: OwnerScope, include_inactive: bool = False) -> list[Goal]:
        return self.db.list_goals(scope, include_inactive=include_inactive)

    def contribute(self, goal_id: int, amount: MoneyLike) -> Goal:
        """Add a contribution to a goal's saved amount.

        Publishes goal.reached the first time the target is met.

        Raises:
            NotFoundError: If the goal doesn't exist or is inactive
            InvalidInputError: If amount is not positive
        """
        amount = to_money(amount, "contribution")
        if amount <= 0:
            raise InvalidInputError("Contribution must be greater than zero")

        def attempt() -> tuple[Goal, Goal]:
            before = self._require(goal_id, active_only=True)
            self.db.update_goal(
                goal_id, before.version, current_amount=before.current_amount + amount
            )
            return before, self._require(goal_id)

        with _goal_locks.hold(goal_id):
            before, after = retry_on_conflict(attempt, "Goal", goal_id, self.max_attempts)

        logger.info(
            "Contributed %s to goal %s (now %s)", amount, goal_id, after.current_amount, extra={"goal_id": goal_id}
        )
        reached = before.current_amount < before.target_amount <= after.current_amount
        if reached and self.events is not None:
            self.events.publish(
                NotificationEvent(
                    kind=event_kinds.GOAL_REACHED,
                    payload={
                        "user_id": after.user_id,
                        "goal_id": goal_id,
                        "name": after.name,
                        "target_amount": after.target_amount,
                    },
                )
            )
        return after

    def deactivate_goal(self, goal_id: int) -> None:
        """Stop tracking a goal.

        Raises:
            NotFoundError: If the goal doesn't exist
        """

        def attempt() -> None:
            goal = self._require(goal_id)
            if goal.is_active:
                self.db.update_goal(goal_id, goal.version, is_active=False)

        with _goal_locks.hold(goal_id):
            retry_on_conflict(attempt, "Goal", goal_id, self.max_attempts)
        logger.info("Deactivated goal %s", goal_id)
