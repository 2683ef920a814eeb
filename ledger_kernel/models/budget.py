"""
Module: ledger_kernel.models.budget
Responsibility: Monthly budget targets per category label.
Architecture position: Kernel > Models.

Invariants enforced:
    - One budget per (category, month).
    - ``month`` is always the first day of the month.
    - ``account_id`` names the income or expense account whose activity is
      the budget's actual.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase, UUIDString, money_column_type


class Budget(TrackedBase):
    __tablename__ = "budgets"

    __table_args__ = (
        UniqueConstraint("category", "month", name="uq_budget_category_month"),
    )

    category: Mapped[str] = mapped_column(String(100), nullable=False)

    account_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("accounts.id"),
        nullable=False,
    )

    month: Mapped[date] = mapped_column(Date, nullable=False)

    amount: Mapped[Decimal] = mapped_column(money_column_type(), nullable=False)

    def __repr__(self) -> str:
        return f"<Budget {self.category} {self.month:%Y-%m} {self.amount}>"
