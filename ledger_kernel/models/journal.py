"""
Module: ledger_kernel.models.journal
Responsibility: ORM persistence for posted journal entries and their lines.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/ only.

Invariants enforced:
    - Entries and lines are append-only.  db/immutability.py rejects any
      UPDATE or DELETE once flushed.
    - debit >= 0 and credit >= 0 with exactly one side non-zero (CHECK
      constraints, on top of validate_lines).
    - At most one reversal per entry (unique reversal_of_id).
    - (journal_entry_id, line_no) is unique.

Failure modes:
    - ImmutabilityViolationError on modification of a flushed row.
    - IntegrityError on a second reversal racing past the service check.
"""

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import (
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import Base, TrackedBase, UUIDString, money_column_type
from ledger_kernel.domain.types import ReferenceType

if TYPE_CHECKING:
    from ledger_kernel.models.account import Account


class JournalEntry(TrackedBase):
    """
    Header of one balanced posting.

    Contract:
        Σdebit == Σcredit over ``lines``.  Enforced by LedgerService before
        the row is created; the row itself is never edited afterwards.

    Guarantees:
        - entry_date is the accounting date that drives period reports.
        - lines load in line_no order.
    """

    __tablename__ = "journal_entries"

    __table_args__ = (
        Index("idx_journal_entry_date", "entry_date"),
        Index("idx_journal_reference", "reference_type", "related_entity_id"),
    )

    reference_type: Mapped[ReferenceType] = mapped_column(String(20), nullable=False)

    # Loan, expense or transfer this entry belongs to (no FK; owned elsewhere)
    related_entity_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    description: Mapped[str] = mapped_column(Text, nullable=False)

    entry_date: Mapped[date] = mapped_column(Date, nullable=False)

    reversal_of_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("journal_entries.id"),
        nullable=True,
        unique=True,
    )

    lines: Mapped[list["JournalLine"]] = relationship(
        back_populates="entry",
        order_by="JournalLine.line_no",
        lazy="selectin",
    )

    reversal_of: Mapped["JournalEntry | None"] = relationship(
        remote_side="JournalEntry.id",
        foreign_keys=[reversal_of_id],
    )

    def __repr__(self) -> str:
        return f"<JournalEntry {self.id} {self.reference_type} {self.entry_date}>"

    @property
    def is_reversal(self) -> bool:
        return self.reversal_of_id is not None


class JournalLine(Base):
    """One account-level effect of a journal entry."""

    __tablename__ = "journal_lines"

    __table_args__ = (
        UniqueConstraint("journal_entry_id", "line_no", name="uq_journal_line_no"),
        CheckConstraint("debit >= 0", name="ck_journal_line_debit_nonneg"),
        CheckConstraint("credit >= 0", name="ck_journal_line_credit_nonneg"),
        CheckConstraint(
            "(debit > 0 AND credit = 0) OR (credit > 0 AND debit = 0)",
            name="ck_journal_line_one_side",
        ),
        Index("idx_line_entry", "journal_entry_id"),
        Index("idx_line_account", "account_id"),
    )

    journal_entry_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("journal_entries.id"),
        nullable=False,
    )

    account_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("accounts.id"),
        nullable=False,
    )

    debit: Mapped[Decimal] = mapped_column(money_column_type(), nullable=False)

    credit: Mapped[Decimal] = mapped_column(money_column_type(), nullable=False)

    line_no: Mapped[int] = mapped_column(Integer, nullable=False)

    entry: Mapped["JournalEntry"] = relationship(back_populates="lines")

    account: Mapped["Account"] = relationship()

    def __repr__(self) -> str:
        return f"<JournalLine {self.line_no} dr={self.debit} cr={self.credit}>"
