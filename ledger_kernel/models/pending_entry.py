"""
Module: ledger_kernel.models.pending_entry
Responsibility: Persist postings that wait for executive approval because
    they are backdated beyond the allowed window.
Architecture position: Kernel > Models.

Invariants enforced:
    - status moves pending -> approved or pending -> rejected, once.
    - An approved request links the journal entry it produced.
    - ``lines`` holds the proposed LineSpecs as JSON with string amounts,
      so no precision is lost in storage.
"""

from datetime import date, datetime
from enum import Enum
from uuid import UUID

from sqlalchemy import JSON, Date, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase, UUIDString
from ledger_kernel.domain.types import LineSpec, ReferenceType


class PendingEntryStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PendingEntry(TrackedBase):
    """A proposed posting awaiting a decision."""

    __tablename__ = "pending_entries"

    __table_args__ = (Index("idx_pending_status", "status"),)

    reference_type: Mapped[ReferenceType] = mapped_column(String(20), nullable=False)

    related_entity_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    description: Mapped[str] = mapped_column(Text, nullable=False)

    entry_date: Mapped[date] = mapped_column(Date, nullable=False)

    lines: Mapped[list[dict]] = mapped_column(JSON, nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PendingEntryStatus.PENDING.value,
    )

    requested_by_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    decided_by_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    decided_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    journal_entry_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("journal_entries.id"),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<PendingEntry {self.id} {self.status}>"

    @property
    def is_pending(self) -> bool:
        return self.status == PendingEntryStatus.PENDING.value

    def line_specs(self) -> tuple[LineSpec, ...]:
        return tuple(LineSpec.from_dict(item) for item in self.lines)
