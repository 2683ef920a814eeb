"""
Line builders for the standard postings.

Each builder is pure and returns LineSpecs ready for LedgerService.
Amounts must be strictly positive; the shape checks in validate_lines
still run when the lines are posted.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from ledger_kernel.domain.amounts import AmountLike, ZERO, to_amount
from ledger_kernel.domain.types import LineSpec
from ledger_kernel.exceptions import InvalidAmountError


def _positive(amount: AmountLike) -> Decimal:
    value = to_amount(amount)
    if value <= ZERO:
        raise InvalidAmountError(str(amount), "must be greater than zero")
    return value


def injection_lines(target_account_id: UUID, capital_account_id: UUID, amount: AmountLike) -> list[LineSpec]:
    """Debit the receiving asset, credit Share Capital."""
    value = _positive(amount)
    return [
        LineSpec.debit_of(target_account_id, value),
        LineSpec.credit_of(capital_account_id, value),
    ]


def opening_balance_lines(new_account_id: UUID, capital_account_id: UUID, amount: AmountLike) -> list[LineSpec]:
    return injection_lines(new_account_id, capital_account_id, amount)


def transfer_lines(from_account_id: UUID, to_account_id: UUID, amount: AmountLike) -> list[LineSpec]:
    """Debit the destination, credit the source."""
    value = _positive(amount)
    return [
        LineSpec.debit_of(to_account_id, value),
        LineSpec.credit_of(from_account_id, value),
    ]


def disbursement_lines(portfolio_account_id: UUID, source_account_id: UUID, amount: AmountLike) -> list[LineSpec]:
    """Loan disbursement: debit Loan Portfolio, credit the paying BANK or CASH account."""
    value = _positive(amount)
    return [
        LineSpec.debit_of(portfolio_account_id, value),
        LineSpec.credit_of(source_account_id, value),
    ]


def expense_lines(expense_account_id: UUID, paid_from_account_id: UUID, amount: AmountLike) -> list[LineSpec]:
    """Operating expense: debit the expense account, credit the paying account."""
    value = _positive(amount)
    return [
        LineSpec.debit_of(expense_account_id, value),
        LineSpec.credit_of(paid_from_account_id, value),
    ]


def write_off_lines(loss_account_id: UUID, portfolio_account_id: UUID, amount: AmountLike) -> list[LineSpec]:
    """Bad-debt write-off: debit the loss expense, credit Loan Portfolio."""
    value = _positive(amount)
    return [
        LineSpec.debit_of(loss_account_id, value),
        LineSpec.credit_of(portfolio_account_id, value),
    ]
