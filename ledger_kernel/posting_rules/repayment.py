"""
Repayment allocation and posting lines.

A repayment settles the loan's outstanding balances in a fixed order:

    1. penalty
    2. interest
    3. principal

Whatever is left after principal is an overpayment.  The ledger posts
only the applied part; the loan subsystem decides what to do with the
excess.

Invariant:
    penalty_paid + interest_paid + principal_paid + overpayment == amount
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from ledger_kernel.domain.amounts import AmountLike, ZERO, to_amount
from ledger_kernel.domain.types import LineSpec
from ledger_kernel.exceptions import InvalidAmountError

# Remaining principal at or below this is treated as settled.
FULLY_PAID_TOLERANCE = Decimal("0.01")


@dataclass(frozen=True)
class RepaymentAllocation:
    """Split of one repayment across the outstanding balances."""

    amount: Decimal
    penalty_paid: Decimal
    interest_paid: Decimal
    principal_paid: Decimal
    overpayment: Decimal
    remaining_principal: Decimal

    @property
    def applied(self) -> Decimal:
        return self.penalty_paid + self.interest_paid + self.principal_paid

    @property
    def income(self) -> Decimal:
        return self.penalty_paid + self.interest_paid

    @property
    def is_fully_paid(self) -> bool:
        return self.remaining_principal <= FULLY_PAID_TOLERANCE


def _non_negative(name: str, value: AmountLike) -> Decimal:
    amount = to_amount(value)
    if amount < ZERO:
        raise InvalidAmountError(str(value), f"{name} cannot be negative")
    return amount


def allocate_repayment(
    amount: AmountLike,
    penalty_outstanding: AmountLike,
    interest_outstanding: AmountLike,
    principal_outstanding: AmountLike,
) -> RepaymentAllocation:
    """
    Allocate ``amount`` to penalty, then interest, then principal.

    Raises:
        InvalidAmountError: amount is not positive or an outstanding
            balance is negative.
    """
    paid = to_amount(amount)
    if paid <= ZERO:
        raise InvalidAmountError(str(amount), "repayment must be greater than zero")
    penalty = _non_negative("penalty", penalty_outstanding)
    interest = _non_negative("interest", interest_outstanding)
    principal = _non_negative("principal", principal_outstanding)

    remaining = paid
    penalty_paid = min(remaining, penalty)
    remaining -= penalty_paid
    interest_paid = min(remaining, interest)
    remaining -= interest_paid
    principal_paid = min(remaining, principal)
    remaining -= principal_paid

    return RepaymentAllocation(
        amount=paid,
        penalty_paid=penalty_paid,
        interest_paid=interest_paid,
        principal_paid=principal_paid,
        overpayment=remaining,
        remaining_principal=principal - principal_paid,
    )


def repayment_lines(
    cash_account_id: UUID,
    portfolio_account_id: UUID,
    income_account_id: UUID,
    allocation: RepaymentAllocation,
) -> list[LineSpec]:
    """
    Lines for the applied part of a repayment.

    Debit the receiving cash account, credit Loan Portfolio for principal
    and the income account for interest plus penalty.  Zero lines are
    left out.
    """
    if allocation.applied <= ZERO:
        raise InvalidAmountError(str(allocation.amount), "nothing to apply")

    lines = [LineSpec.debit_of(cash_account_id, allocation.applied)]
    if allocation.principal_paid > ZERO:
        lines.append(LineSpec.credit_of(portfolio_account_id, allocation.principal_paid))
    if allocation.income > ZERO:
        lines.append(LineSpec.credit_of(income_account_id, allocation.income))
    return lines
