"""Read-only queries over closed periods."""

from datetime import date

from sqlalchemy import select

from ledger_kernel.domain.dtos import ClosedPeriodInfo
from ledger_kernel.domain.periods import Period
from ledger_kernel.models.period import ClosedPeriod
from ledger_kernel.selectors.base import BaseSelector


class PeriodSelector(BaseSelector[ClosedPeriod]):

    def is_closed(self, day: date) -> bool:
        """True when the month containing ``day`` has been closed."""
        return self.get_closed(Period.containing(day)) is not None

    def get_closed(self, period: Period) -> ClosedPeriodInfo | None:
        row = self.session.execute(
            select(ClosedPeriod).where(ClosedPeriod.month == period.label)
        ).scalar_one_or_none()
        return ClosedPeriodInfo.from_model(row) if row is not None else None

    def list_closed(self) -> list[ClosedPeriodInfo]:
        rows = self.session.execute(select(ClosedPeriod).order_by(ClosedPeriod.month))
        return [ClosedPeriodInfo.from_model(r) for r in rows.scalars()]
