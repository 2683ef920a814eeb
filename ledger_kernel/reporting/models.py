"""
Financial report value objects (``ledger_kernel.reporting.models``).

Responsibility
--------------
Frozen dataclasses returned by ``ReportingService``: trial balance,
monthly income statement, balance sheet and budget variance.

Invariants enforced
-------------------
* All models are ``frozen=True``.
* All monetary fields are ``Decimal`` in currency minor units.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from ledger_kernel.domain.types import AccountCategory, AccountCode


class ReportType(str, Enum):
    TRIAL_BALANCE = "trial_balance"
    INCOME_STATEMENT = "income_statement"
    BALANCE_SHEET = "balance_sheet"
    BUDGET_VARIANCE = "budget_variance"


class LoanFigureSource(str, Enum):
    """Where the balance sheet's loan receivables figure came from."""

    LEDGER = "ledger"  # Loan Portfolio account balances
    EXTERNAL = "external"  # Loan subsystem's outstanding principal


@dataclass(frozen=True)
class ReportMetadata:
    """Metadata attached to every report."""

    report_type: ReportType
    currency: str
    generated_at: str  # ISO timestamp from the injected clock
    as_of_date: date | None = None
    period_start: date | None = None
    period_end: date | None = None  # exclusive


@dataclass(frozen=True)
class StatementLine:
    """One account's figure in a statement, under its sign convention."""

    account_id: UUID
    code: AccountCode
    name: str
    category: AccountCategory
    amount: Decimal


@dataclass(frozen=True)
class TrialBalanceLineItem:
    account_id: UUID
    code: AccountCode
    name: str
    category: AccountCategory
    debit_total: Decimal
    credit_total: Decimal
    net_balance: Decimal


@dataclass(frozen=True)
class TrialBalanceReport:
    metadata: ReportMetadata
    lines: tuple[TrialBalanceLineItem, ...]
    total_debits: Decimal
    total_credits: Decimal
    difference: Decimal
    is_balanced: bool


@dataclass(frozen=True)
class IncomeStatementReport:
    """
    Monthly income statement.

    Revenue - Expenses = Net Profit, over entries dated in the period,
    period-closing entries excluded.
    """

    metadata: ReportMetadata
    period_label: str
    revenue: tuple[StatementLine, ...]
    expenses: tuple[StatementLine, ...]
    total_revenue: Decimal
    total_expenses: Decimal
    net_profit: Decimal


@dataclass(frozen=True)
class BalanceSheetReport:
    """
    Balance sheet as of a date.

    Assets = Liabilities + Equity holds exactly when the loan figure comes
    from the ledger; an external loan figure may leave a ``difference``.
    """

    metadata: ReportMetadata

    cash_and_bank: tuple[StatementLine, ...]
    total_cash_and_bank: Decimal
    loan_receivables: Decimal
    loan_figure_source: LoanFigureSource
    other_assets: tuple[StatementLine, ...]
    total_other_assets: Decimal
    total_assets: Decimal

    liabilities: tuple[StatementLine, ...]
    total_liabilities: Decimal

    equity: tuple[StatementLine, ...]
    retained_earnings: Decimal
    total_equity: Decimal

    total_liabilities_and_equity: Decimal
    difference: Decimal
    is_balanced: bool


@dataclass(frozen=True)
class BudgetVarianceReport:
    """
    Budget against actual for one category and month.

    variance = actual - budgeted.  variance_percent is actual / budgeted
    x 100, or None when nothing was budgeted.
    """

    metadata: ReportMetadata
    category: str
    period_label: str
    account_id: UUID
    account_category: AccountCategory
    budgeted: Decimal
    actual: Decimal
    variance: Decimal
    variance_percent: Decimal | None
    favourable: bool
