"""
Module: ledger_kernel.models.period
Responsibility: Record of months whose books have been closed.
Architecture position: Kernel > Models.

Invariants enforced:
    - One row per month (unique ``month``).
    - A row exists iff no further postings may be dated in that month
      (checked by PeriodService.validate_entry_date).
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import Base, UUIDString, money_column_type


class ClosedPeriod(Base):
    """
    A closed month with the figures captured at close.

    ``month`` is the ``YYYY-MM`` label of the half-open month range.
    """

    __tablename__ = "closed_periods"

    month: Mapped[str] = mapped_column(String(7), nullable=False, unique=True)

    closed_by_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    closed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    net_profit: Mapped[Decimal] = mapped_column(money_column_type(), nullable=False)

    total_assets: Mapped[Decimal] = mapped_column(money_column_type(), nullable=False)

    total_liabilities: Mapped[Decimal] = mapped_column(money_column_type(), nullable=False)

    closing_entry_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("journal_entries.id"),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<ClosedPeriod {self.month}>"
