"""
DTOs -- immutable records returned across the kernel boundary.

Responsibility:
    Services and selectors hand these to callers instead of live ORM
    rows, so a caller can keep a result after the session closes and
    cannot mutate persisted state through it.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  ``from_model()`` class methods
    are boundary converters called only from services and selectors.

Data flow:
    LineSpec (input) -> JournalEntry ORM -> JournalEntryRecord (output)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from ledger_kernel.domain.amounts import total
from ledger_kernel.domain.types import AccountCategory, AccountCode, ReferenceType

if TYPE_CHECKING:
    from ledger_kernel.models.account import Account as AccountModel
    from ledger_kernel.models.budget import Budget as BudgetModel
    from ledger_kernel.models.journal import JournalEntry as JournalEntryModel
    from ledger_kernel.models.journal import JournalLine as JournalLineModel
    from ledger_kernel.models.pending_entry import PendingEntry as PendingEntryModel
    from ledger_kernel.models.period import ClosedPeriod as ClosedPeriodModel


@dataclass(frozen=True)
class JournalLineRecord:
    id: UUID
    account_id: UUID
    debit: Decimal
    credit: Decimal
    line_no: int

    @classmethod
    def from_model(cls, model: JournalLineModel) -> JournalLineRecord:
        return cls(
            id=model.id,
            account_id=model.account_id,
            debit=model.debit,
            credit=model.credit,
            line_no=model.line_no,
        )


@dataclass(frozen=True)
class JournalEntryRecord:
    """
    A posted journal entry.

    Guarantees:
        - Immutable (frozen dataclass).
        - lines are in line_no order.
        - total_debit == total_credit.
    """

    id: UUID
    reference_type: ReferenceType
    related_entity_id: UUID | None
    description: str
    entry_date: date
    created_at: datetime
    created_by_id: UUID
    lines: tuple[JournalLineRecord, ...]
    reversal_of_id: UUID | None = None

    @property
    def total_debit(self) -> Decimal:
        return total(line.debit for line in self.lines)

    @property
    def total_credit(self) -> Decimal:
        return total(line.credit for line in self.lines)

    @property
    def account_ids(self) -> frozenset[UUID]:
        return frozenset(line.account_id for line in self.lines)

    @classmethod
    def from_model(cls, model: JournalEntryModel) -> JournalEntryRecord:
        return cls(
            id=model.id,
            reference_type=ReferenceType(model.reference_type),
            related_entity_id=model.related_entity_id,
            description=model.description,
            entry_date=model.entry_date,
            created_at=model.created_at,
            created_by_id=model.created_by_id,
            lines=tuple(
                JournalLineRecord.from_model(line)
                for line in sorted(model.lines, key=lambda x: x.line_no)
            ),
            reversal_of_id=model.reversal_of_id,
        )


@dataclass(frozen=True)
class AccountInfo:
    """
    Snapshot of an account row.

    ``balance`` is the cached projection at read time.
    """

    id: UUID
    name: str
    category: AccountCategory
    code: AccountCode
    balance: Decimal
    is_system_account: bool
    bank_name: str | None = None
    account_number: str | None = None
    version: int = 0

    @classmethod
    def from_model(cls, model: AccountModel) -> AccountInfo:
        return cls(
            id=model.id,
            name=model.name,
            category=AccountCategory(model.category),
            code=AccountCode(model.code),
            balance=model.balance,
            is_system_account=model.is_system_account,
            bank_name=model.bank_name,
            account_number=model.account_number,
            version=model.version,
        )


@dataclass(frozen=True)
class PendingEntryInfo:
    id: UUID
    status: str
    reference_type: ReferenceType
    description: str
    entry_date: date
    requested_by_id: UUID
    reason: str | None
    decided_by_id: UUID | None = None
    journal_entry_id: UUID | None = None
    rejection_reason: str | None = None

    @classmethod
    def from_model(cls, model: PendingEntryModel) -> PendingEntryInfo:
        return cls(
            id=model.id,
            status=model.status,
            reference_type=ReferenceType(model.reference_type),
            description=model.description,
            entry_date=model.entry_date,
            requested_by_id=model.requested_by_id,
            reason=model.reason,
            decided_by_id=model.decided_by_id,
            journal_entry_id=model.journal_entry_id,
            rejection_reason=model.rejection_reason,
        )


@dataclass(frozen=True)
class ClosedPeriodInfo:
    month: str
    closed_by_id: UUID
    closed_at: datetime
    net_profit: Decimal
    total_assets: Decimal
    total_liabilities: Decimal
    closing_entry_id: UUID | None

    @classmethod
    def from_model(cls, model: ClosedPeriodModel) -> ClosedPeriodInfo:
        return cls(
            month=model.month,
            closed_by_id=model.closed_by_id,
            closed_at=model.closed_at,
            net_profit=model.net_profit,
            total_assets=model.total_assets,
            total_liabilities=model.total_liabilities,
            closing_entry_id=model.closing_entry_id,
        )


@dataclass(frozen=True)
class BudgetInfo:
    """Monthly target for one category label; ``month`` is the first day."""

    id: UUID
    category: str
    account_id: UUID
    month: date
    amount: Decimal
    created_by_id: UUID

    @classmethod
    def from_model(cls, model: BudgetModel) -> BudgetInfo:
        return cls(
            id=model.id,
            category=model.category,
            account_id=model.account_id,
            month=model.month,
            amount=model.amount,
            created_by_id=model.created_by_id,
        )


@dataclass(frozen=True)
class BalanceDrift:
    """Cached balance that disagrees with the balance recomputed from lines."""

    account_id: UUID
    cached: Decimal
    recomputed: Decimal
    version: int = 0  # account version the cached figure was read at

    @property
    def difference(self) -> Decimal:
        return self.cached - self.recomputed
