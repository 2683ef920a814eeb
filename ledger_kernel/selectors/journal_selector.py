"""
Module: ledger_kernel.selectors.journal_selector
Responsibility: Read-only access to posted journal entries and lines.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Every date-bounded query is half-open: entry_date >= start AND
      entry_date < end.  Reports must go through lines_in_range so that
      month boundaries are counted once.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select

from ledger_kernel.domain.dtos import JournalEntryRecord
from ledger_kernel.domain.periods import Period
from ledger_kernel.domain.types import AccountCategory, AccountCode, ReferenceType
from ledger_kernel.exceptions import JournalEntryNotFoundError
from ledger_kernel.models.account import Account
from ledger_kernel.models.journal import JournalEntry, JournalLine
from ledger_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class LedgerLine:
    """A journal line joined with its entry header and account."""

    journal_entry_id: UUID
    journal_line_id: UUID
    entry_date: date
    reference_type: ReferenceType
    description: str
    created_by_id: UUID
    account_id: UUID
    account_name: str
    account_category: AccountCategory
    account_code: AccountCode
    debit: Decimal
    credit: Decimal
    line_no: int


class JournalSelector(BaseSelector[JournalEntry]):
    """Queries over posted journal entries."""

    def get_entry(self, entry_id: UUID) -> JournalEntryRecord:
        entry = self.session.get(JournalEntry, entry_id)
        if entry is None:
            raise JournalEntryNotFoundError(str(entry_id))
        return JournalEntryRecord.from_model(entry)

    def find_entry(self, entry_id: UUID) -> JournalEntryRecord | None:
        entry = self.session.get(JournalEntry, entry_id)
        return JournalEntryRecord.from_model(entry) if entry is not None else None

    def get_reversal_of(self, entry_id: UUID) -> JournalEntryRecord | None:
        """The entry that reverses ``entry_id``, if any."""
        reversal = self.session.execute(
            select(JournalEntry).where(JournalEntry.reversal_of_id == entry_id)
        ).scalar_one_or_none()
        return JournalEntryRecord.from_model(reversal) if reversal is not None else None

    def entries_for(
        self,
        related_entity_id: UUID,
        reference_type: ReferenceType | None = None,
    ) -> list[JournalEntryRecord]:
        query = select(JournalEntry).where(
            JournalEntry.related_entity_id == related_entity_id
        )
        if reference_type is not None:
            query = query.where(JournalEntry.reference_type == reference_type.value)
        query = query.order_by(JournalEntry.entry_date, JournalEntry.created_at)
        return [
            JournalEntryRecord.from_model(entry)
            for entry in self.session.execute(query).scalars()
        ]

    def lines_in_range(
        self,
        start: date,
        end: date,
        account_id: UUID | None = None,
        exclude_reference_types: tuple[ReferenceType, ...] = (),
    ) -> list[LedgerLine]:
        """
        Lines of entries dated in ``[start, end)``.

        Args:
            start: Inclusive lower bound on entry_date.
            end: Exclusive upper bound on entry_date.
            account_id: Restrict to one account.
            exclude_reference_types: Entry kinds to leave out (reports use
                this to skip period-closing entries).

        Returns:
            LedgerLine DTOs ordered by entry_date, entry, line_no.
        """
        query = (
            select(JournalLine, JournalEntry, Account)
            .join(JournalEntry, JournalLine.journal_entry_id == JournalEntry.id)
            .join(Account, JournalLine.account_id == Account.id)
            .where(JournalEntry.entry_date >= start)
            .where(JournalEntry.entry_date < end)
        )
        if account_id is not None:
            query = query.where(JournalLine.account_id == account_id)
        if exclude_reference_types:
            query = query.where(
                JournalEntry.reference_type.not_in([t.value for t in exclude_reference_types])
            )
        query = query.order_by(
            JournalEntry.entry_date,
            JournalEntry.created_at,
            JournalEntry.id,
            JournalLine.line_no,
        )

        return [
            LedgerLine(
                journal_entry_id=entry.id,
                journal_line_id=line.id,
                entry_date=entry.entry_date,
                reference_type=ReferenceType(entry.reference_type),
                description=entry.description,
                created_by_id=entry.created_by_id,
                account_id=account.id,
                account_name=account.name,
                account_category=AccountCategory(account.category),
                account_code=AccountCode(account.code),
                debit=line.debit,
                credit=line.credit,
                line_no=line.line_no,
            )
            for line, entry, account in self.session.execute(query).all()
        ]

    def lines_in_period(self, period: Period, **filters) -> list[LedgerLine]:
        return self.lines_in_range(period.start, period.end, **filters)
