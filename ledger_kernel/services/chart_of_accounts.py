"""
ChartOfAccountsService -- bootstrap and maintenance of the chart of accounts.

Responsibility:
    Ensures the reserved system accounts exist and creates ordinary
    accounts, optionally funded with an opening balance.

Architecture position:
    Kernel > Services.

Invariants enforced:
    - initialize_chart_of_accounts() is idempotent: it inserts only the
      reserved codes that have no system account yet, so running it any
      number of times leaves exactly one system account per code.
    - An account created with an opening balance exists together with its
      funding entry or not at all.

Failure modes:
    - AuthorizationError for an actor without a posting role.
    - SystemAccountNotFoundError(CAPITAL) when funding an opening balance
      before the chart is initialized.
    - InvalidAccountCategoryError for an opening balance on a non-asset.
"""

from uuid import UUID

from sqlalchemy import select

from ledger_kernel.db.engine import is_transient
from ledger_kernel.domain.amounts import AmountLike, ZERO, to_amount
from ledger_kernel.domain.authorization import require_role
from ledger_kernel.domain.dtos import AccountInfo
from ledger_kernel.domain.types import AccountCategory, AccountCode, Actor, ReferenceType
from ledger_kernel.exceptions import (
    InvalidAccountCategoryError,
    InvalidAmountError,
    TransientStoreError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import Account
from ledger_kernel.posting_rules import opening_balance_lines
from ledger_kernel.services.account_repository import AccountRepository
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.journal_writer import JournalWriter

logger = get_logger("services.chart_of_accounts")


class ChartOfAccountsService(BaseService[Account]):
    """Creates accounts; never deletes them."""

    def __init__(self, session, clock=None, policy=None):
        super().__init__(session, clock, policy)
        self._accounts = AccountRepository(session, self._clock, self._policy)
        self._writer = JournalWriter(session, self._clock, self._policy)

    def initialize_chart_of_accounts(self, actor: Actor) -> list[AccountInfo]:
        """
        Create the reserved accounts whose code no account carries yet.

        Returns:
            The accounts created by this call; empty when all existed.
        """
        require_role(actor, self._policy.posting_roles, "initialize the chart of accounts")

        existing = set(self.session.execute(select(Account.code)).scalars())

        now = self._clock.now()
        created: list[Account] = []
        for definition in self._policy.system_accounts:
            if definition.code.value in existing:
                continue
            account = Account(
                name=definition.name,
                category=definition.category.value,
                code=definition.code.value,
                is_system_account=True,
                balance=ZERO,
                version=0,
                created_at=now,
                created_by_id=actor.id,
            )
            self.session.add(account)
            created.append(account)

        self.session.flush()
        logger.info(
            "chart_initialized",
            extra={
                "created_codes": [a.code for a in created],
                "actor_id": str(actor.id),
            },
        )
        return [AccountInfo.from_model(a) for a in created]

    def create_account(
        self,
        name: str,
        category: AccountCategory,
        code: AccountCode,
        actor: Actor,
        bank_name: str | None = None,
        account_number: str | None = None,
        opening_balance: AmountLike = ZERO,
    ) -> AccountInfo:
        """
        Create an ordinary account.

        A positive ``opening_balance`` is posted as an injection that
        debits the new account and credits Share Capital.
        """
        require_role(actor, self._policy.posting_roles, "create accounts")
        category = AccountCategory(category)
        code = AccountCode(code)
        opening = to_amount(opening_balance)
        if opening < ZERO:
            raise InvalidAmountError(str(opening_balance), "opening balance cannot be negative")
        if opening > ZERO and category is not AccountCategory.ASSET:
            raise InvalidAccountCategoryError(
                name, category.value, "only asset accounts can be opened with a balance"
            )

        capital = (
            self._accounts.get_system_account(AccountCode.CAPITAL)
            if opening > ZERO
            else None
        )

        savepoint = self.session.begin_nested()
        try:
            account = Account(
                name=name,
                category=category.value,
                code=code.value,
                bank_name=bank_name,
                account_number=account_number,
                is_system_account=False,
                balance=ZERO,
                version=0,
                created_at=self._clock.now(),
                created_by_id=actor.id,
            )
            self.session.add(account)
            self.session.flush()

            if capital is not None:
                self._writer.write(
                    ReferenceType.INJECTION,
                    account.id,
                    f"Initial balance for {name}",
                    opening_balance_lines(account.id, capital.id, opening),
                    actor.id,
                )
            savepoint.commit()
        except Exception as exc:
            savepoint.rollback()
            if is_transient(exc):
                raise TransientStoreError("create_account", str(exc)) from exc
            raise

        self.session.refresh(account)
        logger.info(
            "account_created",
            extra={
                "account_id": str(account.id),
                "category": category.value,
                "code": code.value,
                "opening_balance": opening,
            },
        )
        return AccountInfo.from_model(account)

    def get_system_account(self, code: AccountCode) -> AccountInfo:
        return self._accounts.get_system_account(code)

    def get_account(self, account_id: UUID) -> AccountInfo:
        return self._accounts.get_by_id(account_id)

    def list_accounts(self, category: AccountCategory | None = None) -> list[AccountInfo]:
        return self._accounts.list_all(category)
