"""
Sign convention for account balances.

    asset, expense               balance = Σdebit  − Σcredit
    liability, equity, income    balance = Σcredit − Σdebit

Pure functions, zero I/O.  Both the incremental update done at posting
time and the from-scratch recomputation used by reconciliation go
through ``signed_delta`` so they cannot disagree.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, assert_never

from ledger_kernel.domain.amounts import ZERO
from ledger_kernel.domain.types import AccountCategory, LineSpec, NormalSide


def normal_side(category: AccountCategory) -> NormalSide:
    """Side on which accounts of ``category`` increase."""
    match AccountCategory(category):
        case AccountCategory.ASSET | AccountCategory.EXPENSE:
            return NormalSide.DEBIT
        case AccountCategory.LIABILITY | AccountCategory.EQUITY | AccountCategory.INCOME:
            return NormalSide.CREDIT
        case _:
            assert_never(category)


def signed_delta(category: AccountCategory, debit: Decimal, credit: Decimal) -> Decimal:
    """Change in balance caused by one line on an account of ``category``."""
    match normal_side(category):
        case NormalSide.DEBIT:
            return debit - credit
        case NormalSide.CREDIT:
            return credit - debit
        case side:
            assert_never(side)


def balance_from_totals(category: AccountCategory, debit_total: Decimal, credit_total: Decimal) -> Decimal:
    return signed_delta(category, debit_total, credit_total)


def balance_deltas(
    lines: Iterable[LineSpec],
    categories: dict,
) -> dict:
    """
    Net balance change per account for a set of lines.

    Args:
        lines: Validated lines of one entry.
        categories: account_id -> AccountCategory for every referenced account.

    Returns:
        account_id -> signed delta, in first-seen order.
    """
    deltas: dict = {}
    for line in lines:
        category = categories[line.account_id]
        deltas[line.account_id] = deltas.get(line.account_id, ZERO) + signed_delta(
            category, line.debit, line.credit
        )
    return deltas


def is_balance_sheet_category(category: AccountCategory) -> bool:
    match AccountCategory(category):
        case AccountCategory.ASSET | AccountCategory.LIABILITY | AccountCategory.EQUITY:
            return True
        case AccountCategory.INCOME | AccountCategory.EXPENSE:
            return False
        case _:
            assert_never(category)
