"""
Module: ledger_kernel.models.account
Responsibility: ORM persistence for the chart of accounts -- the target of
    every journal line -- together with the cached balance projection.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/ only.

Invariants enforced:
    - category is immutable once any JournalLine references the account
      (db/immutability.py).
    - balance is written only by LedgerService.post_entry and by
      ReconciliationService.repair via AccountRepository.upsert_balance.
    - version is bumped on every balance write.

Failure modes:
    - AccountNotFoundError when a posting references a non-existent account.
    - SystemAccountNotFoundError when a reserved code has no row.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase, money_column_type
from ledger_kernel.domain.amounts import ZERO
from ledger_kernel.domain.types import AccountCategory, AccountCode


class Account(TrackedBase):
    """
    Chart of accounts entry.

    Contract:
        Codes are NOT unique: several ordinary accounts may share BANK or
        CASH.  The reserved codes (CAPITAL, BANK, CASH, EQUITY, PORTFOLIO)
        are resolved by preferring rows with is_system_account=True.

    Guarantees:
        - category is one of asset, liability, equity, income, expense.
        - balance is a Numeric(18, 2) amount following the sign convention
          in domain/balances.py.

    Non-goals:
        - Accounts are never deleted by the kernel.
    """

    __tablename__ = "accounts"

    __table_args__ = (
        Index("idx_account_code", "code"),
        Index("idx_account_category", "category"),
        Index("idx_account_system", "is_system_account", "code"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    category: Mapped[AccountCategory] = mapped_column(String(20), nullable=False)

    code: Mapped[AccountCode] = mapped_column(String(20), nullable=False)

    bank_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    account_number: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Cached projection of Σ lines under the sign convention
    balance: Mapped[Decimal] = mapped_column(
        money_column_type(),
        nullable=False,
        default=ZERO,
    )

    is_system_account: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Account {self.code}: {self.name}>"

    @property
    def account_category(self) -> AccountCategory:
        return AccountCategory(self.category)

    @property
    def account_code(self) -> AccountCode:
        return AccountCode(self.code)
