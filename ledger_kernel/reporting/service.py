"""
Reporting service (``ledger_kernel.reporting.service``).

Responsibility
--------------
Bridges the selectors to the pure builders in ``statements.py``: cached
balances, liquidity, trial balance, monthly income statement, balance
sheet and budget variance.  Read-only: nothing is posted.

Invariants enforced
-------------------
* Period figures come from lines dated in the half-open period.
* Period-closing entries are left out of the income statement and the
  budget actuals, so a closed month reports the same figures as before
  its close.

Failure modes
-------------
* AccountNotFoundError for an unknown account id.
* BudgetNotFoundError when no budget exists for the category and month.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_kernel.domain.amounts import ZERO, to_amount
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.periods import Period
from ledger_kernel.domain.policy import DEFAULT_POLICY, LedgerPolicy
from ledger_kernel.domain.types import AccountCategory, ReferenceType
from ledger_kernel.exceptions import BudgetNotFoundError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.budget import Budget
from ledger_kernel.reporting.models import (
    BalanceSheetReport,
    BudgetVarianceReport,
    IncomeStatementReport,
    ReportMetadata,
    ReportType,
    TrialBalanceReport,
)
from ledger_kernel.reporting.statements import (
    build_balance_sheet,
    build_budget_variance,
    build_income_statement,
    build_trial_balance,
)
from ledger_kernel.selectors.ledger_selector import LedgerSelector

logger = get_logger("reporting.service")

_EXCLUDED_FROM_PERIOD_RESULTS = (ReferenceType.CLOSING,)


class ReportingService:
    """
    Read-only report generation.

    Constructor: ``session`` + ``clock`` + ``policy``.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        policy: LedgerPolicy | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._policy = policy or DEFAULT_POLICY
        self._ledger = LedgerSelector(session)

    def _metadata(
        self,
        report_type: ReportType,
        as_of: date | None = None,
        period: Period | None = None,
    ) -> ReportMetadata:
        return ReportMetadata(
            report_type=report_type,
            currency=self._policy.currency,
            generated_at=self._clock.now().isoformat(),
            as_of_date=as_of,
            period_start=period.start if period else None,
            period_end=period.end if period else None,
        )

    # ------------------------------------------------------------------
    # Balances
    # ------------------------------------------------------------------

    def account_balance(self, account_id: UUID) -> Decimal:
        return self._ledger.account_balance(account_id)

    def recompute_balance(self, account_id: UUID, as_of: date | None = None) -> Decimal:
        return self._ledger.recompute_balance(account_id, as_of)

    def total_liquidity(self) -> Decimal:
        """Σ balance of asset accounts coded CASH, BANK or MOBILE."""
        return self._ledger.total_liquidity(self._policy.liquidity_codes)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def trial_balance(self, as_of: date | None = None) -> TrialBalanceReport:
        as_of = as_of or self._clock.today()
        report = build_trial_balance(
            self._ledger.trial_balance(as_of).rows,
            self._metadata(ReportType.TRIAL_BALANCE, as_of=as_of),
        )
        logger.info(
            "trial_balance_generated",
            extra={"as_of": as_of, "is_balanced": report.is_balanced},
        )
        if not report.is_balanced:
            logger.error(
                "trial_balance_out_of_balance",
                extra={"as_of": as_of, "difference": report.difference},
            )
        return report

    def monthly_income_statement(self, period: Period) -> IncomeStatementReport:
        rows = self._ledger.activity(
            start=period.start,
            end=period.end,
            categories=(AccountCategory.INCOME, AccountCategory.EXPENSE),
            exclude_reference_types=_EXCLUDED_FROM_PERIOD_RESULTS,
        )
        report = build_income_statement(
            rows, period, self._metadata(ReportType.INCOME_STATEMENT, period=period)
        )
        logger.info(
            "income_statement_generated",
            extra={"period": period.label, "net_profit": report.net_profit},
        )
        return report

    def balance_sheet(
        self,
        as_of: date | None = None,
        loan_principal_outstanding: Decimal | None = None,
    ) -> BalanceSheetReport:
        """
        Balance sheet as of ``as_of`` (default today).

        Args:
            loan_principal_outstanding: Outstanding principal reported by
                the loan subsystem.  When given it replaces the Loan
                Portfolio balance as loan receivables.
        """
        as_of = as_of or self._clock.today()
        loans = (
            to_amount(loan_principal_outstanding)
            if loan_principal_outstanding is not None
            else None
        )
        report = build_balance_sheet(
            self._ledger.balances_as_of(as_of),
            self._policy.liquidity_codes,
            self._metadata(ReportType.BALANCE_SHEET, as_of=as_of),
            loan_principal_outstanding=loans,
        )
        logger.info(
            "balance_sheet_generated",
            extra={
                "as_of": as_of,
                "total_assets": report.total_assets,
                "is_balanced": report.is_balanced,
            },
        )
        if not report.is_balanced:
            logger.warning(
                "balance_sheet_out_of_balance",
                extra={
                    "as_of": as_of,
                    "difference": report.difference,
                    "loan_figure_source": report.loan_figure_source,
                },
            )
        return report

    def budget_variance(self, category: str, period: Period) -> BudgetVarianceReport:
        """
        Budget against actual for ``category`` in ``period``.

        The actual is the net activity of the budget's account over the
        period under its sign convention.
        """
        budget = self._session.execute(
            select(Budget)
            .where(Budget.category == category)
            .where(Budget.month == period.start)
        ).scalar_one_or_none()
        if budget is None:
            raise BudgetNotFoundError(category, period.label)

        account = self._ledger.get_account(budget.account_id)
        rows = [
            row
            for row in self._ledger.activity(
                start=period.start,
                end=period.end,
                exclude_reference_types=_EXCLUDED_FROM_PERIOD_RESULTS,
            )
            if row.account_id == budget.account_id
        ]
        actual = rows[0].balance if rows else ZERO

        report = build_budget_variance(
            category=category,
            period=period,
            account_id=account.id,
            account_category=account.category,
            budgeted=to_amount(budget.amount),
            actual=actual,
            metadata=self._metadata(ReportType.BUDGET_VARIANCE, period=period),
        )
        logger.info(
            "budget_variance_generated",
            extra={
                "category": category,
                "period": period.label,
                "variance": report.variance,
            },
        )
        return report
