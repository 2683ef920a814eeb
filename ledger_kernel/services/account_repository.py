"""
Module: ledger_kernel.services.account_repository
Responsibility: Storage access for Account rows used by the posting path --
    lookups by id and code, row locks, and the single balance writer.
Architecture position: Kernel > Services.

Invariants enforced:
    - Locks are taken in ascending id order so two postings touching the
      same accounts cannot deadlock.
    - upsert_balance() is the only place outside the posting engine that
      writes Account.balance; it bumps ``version`` like the engine does.

Failure modes:
    - AccountNotFoundError naming the first missing id.
    - SystemAccountNotFoundError naming the reserved code.
    - OptimisticLockError when upsert_balance() finds a newer version.
"""

from decimal import Decimal
from typing import Iterable
from uuid import UUID

from sqlalchemy import select

from ledger_kernel.domain.amounts import to_amount
from ledger_kernel.domain.dtos import AccountInfo
from ledger_kernel.domain.types import AccountCategory, AccountCode
from ledger_kernel.exceptions import (
    AccountNotFoundError,
    OptimisticLockError,
    SystemAccountNotFoundError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import Account
from ledger_kernel.services.base import BaseService

logger = get_logger("services.account_repository")


class AccountRepository(BaseService[Account]):
    """Account persistence for the posting engine and reconciliation."""

    def get_by_id(self, account_id: UUID) -> AccountInfo:
        return AccountInfo.from_model(self._get_row(account_id))

    def list_all(self, category: AccountCategory | None = None) -> list[AccountInfo]:
        query = select(Account).order_by(Account.category, Account.code, Account.name)
        if category is not None:
            query = query.where(Account.category == AccountCategory(category).value)
        return [AccountInfo.from_model(a) for a in self.session.execute(query).scalars()]

    def get_system_account(self, code: AccountCode) -> AccountInfo:
        """
        Resolve a reserved account by code.

        Rows flagged ``is_system_account`` win over ordinary accounts that
        share the code; among equals the oldest row wins.

        Raises:
            SystemAccountNotFoundError: no account carries ``code``.
        """
        return AccountInfo.from_model(self._system_row(code))

    def find_system_account(self, code: AccountCode) -> AccountInfo | None:
        row = self._find_system_row(code)
        return AccountInfo.from_model(row) if row is not None else None

    def lock_for_update(self, account_ids: Iterable[UUID]) -> dict[UUID, Account]:
        """
        Lock and load ``account_ids`` with SELECT ... FOR UPDATE.

        Raises:
            AccountNotFoundError: any id has no row.
        """
        wanted = sorted(set(account_ids), key=str)
        rows = self.session.execute(
            select(Account)
            .where(Account.id.in_(wanted))
            .order_by(Account.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalars().all()
        found = {row.id: row for row in rows}
        for account_id in wanted:
            if account_id not in found:
                raise AccountNotFoundError(str(account_id))
        return found

    def upsert_balance(
        self,
        account_id: UUID,
        balance: Decimal,
        expected_version: int | None = None,
    ) -> AccountInfo:
        """
        Overwrite the cached balance of one account.

        Raises:
            OptimisticLockError: ``expected_version`` is given and the row
                has moved on since it was read.
        """
        account = self.lock_for_update([account_id])[account_id]
        if expected_version is not None and account.version != expected_version:
            raise OptimisticLockError("Account", str(account_id))
        previous = account.balance
        account.balance = to_amount(balance)
        account.version += 1
        account.updated_at = self._clock.now()
        self.session.flush()
        logger.info(
            "account_balance_overwritten",
            extra={
                "account_id": str(account_id),
                "previous": str(previous),
                "balance": str(account.balance),
            },
        )
        return AccountInfo.from_model(account)

    def _get_row(self, account_id: UUID) -> Account:
        account = self.session.get(Account, account_id)
        if account is None:
            raise AccountNotFoundError(str(account_id))
        return account

    def _find_system_row(self, code: AccountCode) -> Account | None:
        return self.session.execute(
            select(Account)
            .where(Account.code == AccountCode(code).value)
            .order_by(Account.is_system_account.desc(), Account.created_at, Account.id)
            .limit(1)
        ).scalar_one_or_none()

    def _system_row(self, code: AccountCode) -> Account:
        row = self._find_system_row(code)
        if row is None:
            definition = self._policy.system_account(AccountCode(code))
            raise SystemAccountNotFoundError(
                AccountCode(code).value,
                definition.name if definition else None,
            )
        return row
