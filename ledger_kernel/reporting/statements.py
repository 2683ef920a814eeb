"""
Pure financial statement builders.

These functions turn per-account debit/credit totals into statements.
ZERO I/O. ZERO side effects.

- No database access
- No clock access (timestamps arrive in ReportMetadata)
- Deterministic: same inputs always produce same outputs

Every aggregation branches on AccountCategory with ``match`` and an
``assert_never`` fallthrough.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Sequence, assert_never
from uuid import UUID

from ledger_kernel.domain.amounts import ZERO, round_amount, total
from ledger_kernel.domain.periods import Period
from ledger_kernel.domain.types import AccountCategory, AccountCode
from ledger_kernel.reporting.models import (
    BalanceSheetReport,
    BudgetVarianceReport,
    IncomeStatementReport,
    LoanFigureSource,
    ReportMetadata,
    StatementLine,
    TrialBalanceLineItem,
    TrialBalanceReport,
)
from ledger_kernel.selectors.ledger_selector import AccountActivity

# =========================================================================
# Helpers
# =========================================================================


def _line(row: AccountActivity) -> StatementLine:
    return StatementLine(
        account_id=row.account_id,
        code=row.code,
        name=row.name,
        category=row.category,
        amount=row.balance,
    )


def _sum(lines: Iterable[StatementLine]) -> Decimal:
    return total(line.amount for line in lines)


def variance_percent(actual: Decimal, budgeted: Decimal) -> Decimal | None:
    """actual / budgeted x 100, rounded to minor units; None for a zero budget."""
    if budgeted == ZERO:
        return None
    return round_amount(actual / budgeted * Decimal(100))


# =========================================================================
# Trial balance
# =========================================================================


def build_trial_balance(
    rows: Sequence[AccountActivity],
    metadata: ReportMetadata,
) -> TrialBalanceReport:
    lines = tuple(
        TrialBalanceLineItem(
            account_id=row.account_id,
            code=row.code,
            name=row.name,
            category=row.category,
            debit_total=row.debit_total,
            credit_total=row.credit_total,
            net_balance=row.balance,
        )
        for row in rows
    )
    total_debits = total(line.debit_total for line in lines)
    total_credits = total(line.credit_total for line in lines)
    return TrialBalanceReport(
        metadata=metadata,
        lines=lines,
        total_debits=total_debits,
        total_credits=total_credits,
        difference=total_debits - total_credits,
        is_balanced=total_debits == total_credits,
    )


# =========================================================================
# Income statement
# =========================================================================


def build_income_statement(
    rows: Sequence[AccountActivity],
    period: Period,
    metadata: ReportMetadata,
) -> IncomeStatementReport:
    """
    Revenue and expenses from activity dated in ``period``.

    ``rows`` may include balance-sheet accounts; they are ignored.  No
    rows at all yields a statement of zeros.
    """
    revenue: list[StatementLine] = []
    expenses: list[StatementLine] = []
    for row in rows:
        match row.category:
            case AccountCategory.INCOME:
                revenue.append(_line(row))
            case AccountCategory.EXPENSE:
                expenses.append(_line(row))
            case AccountCategory.ASSET | AccountCategory.LIABILITY | AccountCategory.EQUITY:
                continue
            case _:
                assert_never(row.category)

    total_revenue = _sum(revenue)
    total_expenses = _sum(expenses)
    return IncomeStatementReport(
        metadata=metadata,
        period_label=period.label,
        revenue=tuple(revenue),
        expenses=tuple(expenses),
        total_revenue=total_revenue,
        total_expenses=total_expenses,
        net_profit=total_revenue - total_expenses,
    )


# =========================================================================
# Balance sheet
# =========================================================================


def build_balance_sheet(
    rows: Sequence[AccountActivity],
    liquidity_codes: Iterable[AccountCode],
    metadata: ReportMetadata,
    loan_principal_outstanding: Decimal | None = None,
) -> BalanceSheetReport:
    """
    Balance sheet from inception-to-date totals of every account.

    Classification:
    1. Assets with a liquidity code -> cash and bank
    2. Assets coded PORTFOLIO -> loan receivables (replaced by
       ``loan_principal_outstanding`` when the loan subsystem supplies it)
    3. Remaining assets -> other assets
    4. Liabilities and equity accounts as they are
    5. Income less expense not yet closed -> retained earnings
    """
    liquidity = {AccountCode(c) for c in liquidity_codes}

    cash_and_bank: list[StatementLine] = []
    portfolio: list[StatementLine] = []
    other_assets: list[StatementLine] = []
    liabilities: list[StatementLine] = []
    equity: list[StatementLine] = []
    retained_earnings = ZERO

    for row in rows:
        line = _line(row)
        match row.category:
            case AccountCategory.ASSET:
                if row.code in liquidity:
                    cash_and_bank.append(line)
                elif row.code is AccountCode.PORTFOLIO:
                    portfolio.append(line)
                else:
                    other_assets.append(line)
            case AccountCategory.LIABILITY:
                liabilities.append(line)
            case AccountCategory.EQUITY:
                equity.append(line)
            case AccountCategory.INCOME:
                retained_earnings += line.amount
            case AccountCategory.EXPENSE:
                retained_earnings -= line.amount
            case _:
                assert_never(row.category)

    if loan_principal_outstanding is None:
        loan_receivables = _sum(portfolio)
        source = LoanFigureSource.LEDGER
    else:
        loan_receivables = loan_principal_outstanding
        source = LoanFigureSource.EXTERNAL

    total_cash_and_bank = _sum(cash_and_bank)
    total_other_assets = _sum(other_assets)
    total_assets = total_cash_and_bank + loan_receivables + total_other_assets
    total_liabilities = _sum(liabilities)
    total_equity = _sum(equity) + retained_earnings
    total_l_and_e = total_liabilities + total_equity
    difference = total_assets - total_l_and_e

    return BalanceSheetReport(
        metadata=metadata,
        cash_and_bank=tuple(cash_and_bank),
        total_cash_and_bank=total_cash_and_bank,
        loan_receivables=loan_receivables,
        loan_figure_source=source,
        other_assets=tuple(other_assets),
        total_other_assets=total_other_assets,
        total_assets=total_assets,
        liabilities=tuple(liabilities),
        total_liabilities=total_liabilities,
        equity=tuple(equity),
        retained_earnings=retained_earnings,
        total_equity=total_equity,
        total_liabilities_and_equity=total_l_and_e,
        difference=difference,
        is_balanced=abs(difference) <= Decimal("0.01"),
    )


# =========================================================================
# Budget variance
# =========================================================================


def build_budget_variance(
    category: str,
    period: Period,
    account_id: UUID,
    account_category: AccountCategory,
    budgeted: Decimal,
    actual: Decimal,
    metadata: ReportMetadata,
) -> BudgetVarianceReport:
    """
    Compare ``actual`` with ``budgeted``.

    Favourable means income at or above budget, or expense at or below it.
    """
    match account_category:
        case AccountCategory.INCOME:
            favourable = actual >= budgeted
        case AccountCategory.EXPENSE:
            favourable = actual <= budgeted
        case AccountCategory.ASSET | AccountCategory.LIABILITY | AccountCategory.EQUITY:
            raise ValueError(f"Budgets track income or expense, not {account_category.value}")
        case _:
            assert_never(account_category)

    return BudgetVarianceReport(
        metadata=metadata,
        category=category,
        period_label=period.label,
        account_id=account_id,
        account_category=account_category,
        budgeted=budgeted,
        actual=actual,
        variance=actual - budgeted,
        variance_percent=variance_percent(actual, budgeted),
        favourable=favourable,
    )
