"""
Half-open date ranges.

Every period-bounded query in the kernel uses ``[start, end)``: a month is
the first of the month up to, but excluding, the first of the next month.
Month ends are never computed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from ledger_kernel.exceptions import (
    BackdateApprovalRequiredError,
    ClosedPeriodError,
    InvalidEntryDateError,
)


@dataclass(frozen=True)
class Period:
    """Half-open date range ``[start, end)``."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise ValueError(f"Empty period: {self.start} .. {self.end}")

    @classmethod
    def month(cls, year: int, month: int) -> Period:
        start = date(year, month, 1)
        return cls(start=start, end=_next_month(start))

    @classmethod
    def parse(cls, label: str) -> Period:
        """Parse a ``YYYY-MM`` month label."""
        try:
            year_s, month_s = label.split("-")
            return cls.month(int(year_s), int(month_s))
        except ValueError as exc:
            raise ValueError(f"Invalid month label '{label}', expected YYYY-MM") from exc

    @classmethod
    def containing(cls, day: date) -> Period:
        """The calendar month containing ``day``."""
        return cls.month(day.year, day.month)

    @classmethod
    def up_to(cls, as_of: date) -> Period:
        """Everything up to and including ``as_of``."""
        return cls(start=date.min, end=as_of + timedelta(days=1))

    @property
    def label(self) -> str:
        """``YYYY-MM`` label when this is a calendar month."""
        return f"{self.start.year:04d}-{self.start.month:02d}"

    @property
    def last_day(self) -> date:
        return self.end - timedelta(days=1)

    def contains(self, day: date) -> bool:
        return self.start <= day < self.end


def _next_month(first: date) -> date:
    if first.month == 12:
        return date(first.year + 1, 1, 1)
    return date(first.year, first.month + 1, 1)


def check_entry_date(
    entry_date: date,
    today: date,
    max_backdate_days: int,
    *,
    period_closed: bool = False,
    enforce_backdate_window: bool = True,
) -> None:
    """
    Reject entry dates the ledger does not accept.

    Checks, in order: not in the future, month not closed, and (unless
    ``enforce_backdate_window`` is False, i.e. the posting was approved)
    no more than ``max_backdate_days`` before ``today``.

    Raises:
        InvalidEntryDateError, ClosedPeriodError, BackdateApprovalRequiredError
    """
    if entry_date > today:
        raise InvalidEntryDateError(
            entry_date.isoformat(), "future dates are not allowed"
        )
    if period_closed:
        raise ClosedPeriodError(Period.containing(entry_date).label, entry_date.isoformat())
    days_backdated = (today - entry_date).days
    if enforce_backdate_window and days_backdated > max_backdate_days:
        raise BackdateApprovalRequiredError(
            entry_date.isoformat(), days_backdated, max_backdate_days
        )
