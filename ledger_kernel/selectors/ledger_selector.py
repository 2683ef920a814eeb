"""
Module: ledger_kernel.selectors.ledger_selector
Responsibility: Read-only balance queries -- cached balances, balances
    recomputed from line history, liquidity and the trial balance.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - recompute_balance() derives the balance from JournalLines only, using
      the same sign convention as the posting engine (domain/balances.py).
      For every account it must equal the cached Account.balance.
    - Date cutoffs are half-open (Period.up_to(as_of) ends the day after).

Failure modes:
    - AccountNotFoundError for an unknown account id.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable
from uuid import UUID

from sqlalchemy import func, select

from ledger_kernel.domain.amounts import ZERO, total
from ledger_kernel.domain.balances import balance_from_totals
from ledger_kernel.domain.dtos import AccountInfo
from ledger_kernel.domain.periods import Period
from ledger_kernel.domain.types import AccountCategory, AccountCode, ReferenceType
from ledger_kernel.exceptions import AccountNotFoundError
from ledger_kernel.models.account import Account
from ledger_kernel.models.journal import JournalEntry, JournalLine
from ledger_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class AccountActivity:
    """Debit and credit totals of one account over some range."""

    account_id: UUID
    name: str
    category: AccountCategory
    code: AccountCode
    debit_total: Decimal
    credit_total: Decimal

    @property
    def balance(self) -> Decimal:
        """Net activity under the account's sign convention."""
        return balance_from_totals(self.category, self.debit_total, self.credit_total)


@dataclass(frozen=True)
class TrialBalance:
    as_of: date | None
    rows: tuple[AccountActivity, ...]

    @property
    def total_debits(self) -> Decimal:
        return total(row.debit_total for row in self.rows)

    @property
    def total_credits(self) -> Decimal:
        return total(row.credit_total for row in self.rows)

    @property
    def difference(self) -> Decimal:
        return self.total_debits - self.total_credits

    @property
    def is_balanced(self) -> bool:
        return self.difference == ZERO


class LedgerSelector(BaseSelector[JournalLine]):
    """
    Balance queries.

    Contract:
        account_balance() reads the cached projection; every other method
        aggregates JournalLines at query time.

    Non-goals:
        - No currency conversion.  The ledger is single-currency.
    """

    def get_account(self, account_id: UUID) -> AccountInfo:
        account = self.session.get(Account, account_id)
        if account is None:
            raise AccountNotFoundError(str(account_id))
        return AccountInfo.from_model(account)

    def list_accounts(self, category: AccountCategory | None = None) -> list[AccountInfo]:
        query = select(Account).order_by(Account.category, Account.code, Account.name)
        if category is not None:
            query = query.where(Account.category == category.value)
        return [AccountInfo.from_model(a) for a in self.session.execute(query).scalars()]

    def account_balance(self, account_id: UUID) -> Decimal:
        """Cached balance of one account."""
        return self.get_account(account_id).balance

    def recompute_balance(self, account_id: UUID, as_of: date | None = None) -> Decimal:
        """
        Balance of one account derived from its journal lines.

        Args:
            account_id: Account to recompute.
            as_of: Include only entries dated on or before this day.
        """
        account = self.session.get(Account, account_id)
        if account is None:
            raise AccountNotFoundError(str(account_id))

        query = (
            select(
                func.sum(JournalLine.debit).label("debit_total"),
                func.sum(JournalLine.credit).label("credit_total"),
            )
            .join(JournalEntry, JournalLine.journal_entry_id == JournalEntry.id)
            .where(JournalLine.account_id == account_id)
        )
        if as_of is not None:
            query = query.where(JournalEntry.entry_date < Period.up_to(as_of).end)

        row = self.session.execute(query).one()
        return balance_from_totals(
            AccountCategory(account.category),
            row.debit_total or ZERO,
            row.credit_total or ZERO,
        )

    def activity(
        self,
        start: date | None = None,
        end: date | None = None,
        categories: Iterable[AccountCategory] | None = None,
        exclude_reference_types: tuple[ReferenceType, ...] = (),
        include_idle: bool = False,
    ) -> list[AccountActivity]:
        """
        Per-account debit/credit totals for entries dated in ``[start, end)``.

        Either bound may be None for an open range.  With ``include_idle``
        accounts without lines in the range appear with zero totals.
        """
        totals = (
            select(
                JournalLine.account_id.label("account_id"),
                func.sum(JournalLine.debit).label("debit_total"),
                func.sum(JournalLine.credit).label("credit_total"),
            )
            .join(JournalEntry, JournalLine.journal_entry_id == JournalEntry.id)
            .group_by(JournalLine.account_id)
        )
        if start is not None:
            totals = totals.where(JournalEntry.entry_date >= start)
        if end is not None:
            totals = totals.where(JournalEntry.entry_date < end)
        if exclude_reference_types:
            totals = totals.where(
                JournalEntry.reference_type.not_in([t.value for t in exclude_reference_types])
            )
        totals = totals.subquery()

        query = select(Account, totals.c.debit_total, totals.c.credit_total)
        if include_idle:
            query = query.outerjoin(totals, totals.c.account_id == Account.id)
        else:
            query = query.join(totals, totals.c.account_id == Account.id)
        if categories is not None:
            query = query.where(Account.category.in_([c.value for c in categories]))
        query = query.order_by(Account.category, Account.code, Account.name)

        return [
            AccountActivity(
                account_id=account.id,
                name=account.name,
                category=AccountCategory(account.category),
                code=AccountCode(account.code),
                debit_total=debit_total or ZERO,
                credit_total=credit_total or ZERO,
            )
            for account, debit_total, credit_total in self.session.execute(query).all()
        ]

    def balances_as_of(self, as_of: date) -> list[AccountActivity]:
        """Every account with its totals from inception through ``as_of``."""
        return self.activity(end=Period.up_to(as_of).end, include_idle=True)

    def trial_balance(self, as_of: date | None = None) -> TrialBalance:
        """
        Debit and credit totals per account.

        Σ debit_total == Σ credit_total when every entry is balanced; the
        ``difference`` is reported rather than asserted.
        """
        end = Period.up_to(as_of).end if as_of is not None else None
        return TrialBalance(as_of=as_of, rows=tuple(self.activity(end=end)))

    def total_liquidity(self, liquidity_codes: Iterable[AccountCode]) -> Decimal:
        """Σ cached balance of asset accounts whose code is a liquidity code."""
        codes = [AccountCode(c).value for c in liquidity_codes]
        balances = self.session.execute(
            select(Account.balance)
            .where(Account.category == AccountCategory.ASSET.value)
            .where(Account.code.in_(codes))
        ).scalars()
        return total(balances)
