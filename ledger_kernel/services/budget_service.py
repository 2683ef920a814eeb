"""
BudgetService -- monthly budget targets.

One budget per (category label, month).  Setting a budget for a pair that
already has one replaces the amount.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import select

from ledger_kernel.domain.amounts import AmountLike, ZERO, to_amount
from ledger_kernel.domain.authorization import require_role
from ledger_kernel.domain.dtos import BudgetInfo
from ledger_kernel.domain.periods import Period
from ledger_kernel.domain.types import AccountCategory, Actor
from ledger_kernel.exceptions import (
    BudgetNotFoundError,
    InvalidAccountCategoryError,
    InvalidAmountError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.budget import Budget
from ledger_kernel.services.account_repository import AccountRepository
from ledger_kernel.services.base import BaseService

logger = get_logger("services.budget")

BUDGETABLE = (AccountCategory.INCOME, AccountCategory.EXPENSE)


class BudgetService(BaseService[Budget]):

    def __init__(self, session, clock=None, policy=None):
        super().__init__(session, clock, policy)
        self._accounts = AccountRepository(session, self._clock, self._policy)

    def set_budget(
        self,
        category: str,
        account_id: UUID,
        period: Period,
        amount: AmountLike,
        actor: Actor,
    ) -> BudgetInfo:
        """
        Create or replace the budget for ``category`` in ``period``.

        Raises:
            InvalidAmountError: negative amount.
            InvalidAccountCategoryError: account is not income or expense.
        """
        require_role(actor, self._policy.posting_roles, "set budgets")
        value = to_amount(amount)
        if value < ZERO:
            raise InvalidAmountError(str(amount), "budget cannot be negative")

        account = self._accounts.get_by_id(account_id)
        if account.category not in BUDGETABLE:
            raise InvalidAccountCategoryError(
                str(account_id),
                account.category.value,
                "budgets track income or expense accounts",
            )

        budget = self._find(category, period.start)
        if budget is None:
            budget = Budget(
                category=category,
                account_id=account_id,
                month=period.start,
                amount=value,
                created_at=self._clock.now(),
                created_by_id=actor.id,
            )
            self.session.add(budget)
        else:
            budget.account_id = account_id
            budget.amount = value
        self.session.flush()

        logger.info(
            "budget_set",
            extra={"category": category, "month": period.label, "amount": value},
        )
        return BudgetInfo.from_model(budget)

    def get_budget(self, category: str, period: Period) -> BudgetInfo:
        budget = self._find(category, period.start)
        if budget is None:
            raise BudgetNotFoundError(category, period.label)
        return BudgetInfo.from_model(budget)

    def budgets_for(self, period: Period) -> list[BudgetInfo]:
        rows = self.session.execute(
            select(Budget).where(Budget.month == period.start).order_by(Budget.category)
        ).scalars()
        return [BudgetInfo.from_model(row) for row in rows]

    def _find(self, category: str, month: date) -> Budget | None:
        return self.session.execute(
            select(Budget).where(Budget.category == category).where(Budget.month == month)
        ).scalar_one_or_none()
