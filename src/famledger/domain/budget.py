"""Budget domain service."""

import logging
from datetime import date
from typing import Optional, Union

from famledger.database.base import Database
from famledger.domain.entities import Budget, BudgetPeriod, OwnerScope
from famledger.domain.errors import InvalidInputError, NotFoundError, category_not_found
from famledger.domain.money import MoneyLike, to_money

logger = logging.getLogger(__name__)


def parse_period(value: Union[str, BudgetPeriod]) -> BudgetPeriod:
    if isinstance(value, BudgetPeriod):
        return value
    try:
        return BudgetPeriod(str(value).strip().lower())
    except ValueError as e:
        choices = ", ".join(p.value for p in BudgetPeriod)
        raise InvalidInputError(f"Unknown budget period '{value}'. Expected one of: {choices}") from e


def _non_negative(value: MoneyLike):
    amount = to_money(value, "budget amount")
    if amount < 0:
        raise InvalidInputError("Budget amount cannot be negative")
    return amount


class BudgetService:
    """Service for managing category budgets."""

    def __init__(self, db: Database):
        self.db = db

    def _require(self, budget_id: int) -> Budget:
        budget = self.db.get_budget(budget_id)
        if budget is None:
            raise NotFoundError(f"Budget {budget_id} not found")
        return budget

    def create_budget(
        self,
        user_id: str,
        name: str,
        category_id: int,
        amount: MoneyLike,
        period: Union[str, BudgetPeriod] = BudgetPeriod.MONTHLY,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        household_id: Optional[int] = None,
    ) -> int:
        """Create a budget for one category.

        Returns:
            Budget ID

        Raises:
            NotFoundError: If the category doesn't exist
            InvalidInputError: If amount, period or dates are invalid
        """
        name = (name or "").strip()
        if not name:
            raise InvalidInputError("Budget name is required")
        amount = _non_negative(amount)
        period = parse_period(period)
        if start_date is None:
            start_date = date.today()
        if end_date is not None and end_date < start_date:
            raise InvalidInputError("End date cannot be before start date")
        if self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))

        budget_id = self.db.create_budget(
            user_id=user_id,
            name=name,
            category_id=category_id,
            amount=amount,
            period=period.value,
            start_date=start_date,
            end_date=end_date,
            household_id=household_id,
        )
        logger.info("Created %s budget %s '%s' of %s", period.value, budget_id, name, amount)
        return budget_id

    def get_budget(self, budget_id: int) -> Optional[Budget]:
        return self.db.get_budget(budget_id)

    def list_budgets(self, scope: OwnerScope, include_inactive: bool = False) -> list[Budget]:
        return self.db.list_budgets(scope, include_inactive=include_inactive)

    def update_budget(
        self,
        budget_id: int,
        name: Optional[str] = None,
        amount: Optional[MoneyLike] = None,
        period: Optional[Union[str, BudgetPeriod]] = None,
        end_date: Optional[date] = None,
    ) -> None:
        """Update budget fields.

        Raises:
            NotFoundError: If the budget doesn't exist
        """
        budget = self._require(budget_id)
        fields = {}
        if name is not None:
            if not name.strip():
                raise InvalidInputError("Budget name is required")
            fields["name"] = name.strip()
        if amount is not None:
            fields["amount"] = _non_negative(amount)
        if period is not None:
            fields["period"] = parse_period(period).value
        if end_date is not None:
            if end_date < budget.start_date:
                raise InvalidInputError("End date cannot be before start date")
            fields["end_date"] = end_date
        if fields:
            self.db.update_budget(budget_id, **fields)

    def deactivate_budget(self, budget_id: int) -> None:
        """Stop tracking a budget.

        Raises:
            NotFoundError: If the budget doesn't exist
        """
        self._require(budget_id)
        self.db.update_budget(budget_id, is_active=False)
        logger.info("Deactivated budget %s", budget_id)
