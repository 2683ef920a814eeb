"""
PeriodService -- month-end close and entry-date policy.

Responsibility:
    Decides whether a date may receive postings and closes months.
    Closing a month moves that month's income and expense activity into
    Retained Earnings with a ``closing`` entry, then records the month as
    closed together with the figures at close.

Architecture position:
    Kernel > Services.

Invariants enforced:
    - No entry may be dated in a closed month (JournalWriter consults
      PeriodSelector on every write).
    - A month is closed at most once.
    - After close, every income and expense account has zero net activity
      for the month when closing entries are included; the income
      statement leaves closing entries out and still reports the month.

Failure modes:
    - AuthorizationError without a close role.
    - PeriodAlreadyClosedError on a second close.
    - InvalidEntryDateError when closing a month that has not started.
    - SystemAccountNotFoundError(EQUITY) when Retained Earnings is missing
      and there is profit or loss to move.
"""

from datetime import date

from sqlalchemy.exc import IntegrityError

from ledger_kernel.domain.amounts import ZERO, total
from ledger_kernel.domain.authorization import require_role
from ledger_kernel.domain.dtos import ClosedPeriodInfo
from ledger_kernel.domain.periods import Period, check_entry_date
from ledger_kernel.domain.types import (
    AccountCategory,
    AccountCode,
    Actor,
    LineSpec,
    ReferenceType,
)
from ledger_kernel.exceptions import InvalidEntryDateError, PeriodAlreadyClosedError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.period import ClosedPeriod
from ledger_kernel.selectors.ledger_selector import AccountActivity, LedgerSelector
from ledger_kernel.selectors.period_selector import PeriodSelector
from ledger_kernel.services.account_repository import AccountRepository
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.journal_writer import JournalWriter

logger = get_logger("services.period")


def closing_lines(
    activity: list[AccountActivity],
    retained_earnings_id,
) -> list[LineSpec]:
    """
    Lines that zero each income and expense account's net activity and
    book the net profit (or loss) to Retained Earnings.
    """
    lines: list[LineSpec] = []
    net_profit = ZERO
    for row in activity:
        net = row.balance
        if net == ZERO:
            continue
        match row.category:
            case AccountCategory.INCOME:
                net_profit += net
                lines.append(
                    LineSpec.debit_of(row.account_id, net)
                    if net > ZERO
                    else LineSpec.credit_of(row.account_id, -net)
                )
            case AccountCategory.EXPENSE:
                net_profit -= net
                lines.append(
                    LineSpec.credit_of(row.account_id, net)
                    if net > ZERO
                    else LineSpec.debit_of(row.account_id, -net)
                )
            case _:
                continue

    if net_profit > ZERO:
        lines.append(LineSpec.credit_of(retained_earnings_id, net_profit))
    elif net_profit < ZERO:
        lines.append(LineSpec.debit_of(retained_earnings_id, -net_profit))
    return lines


class PeriodService(BaseService[ClosedPeriod]):
    """Entry-date checks and month-end close."""

    def __init__(self, session, clock=None, policy=None):
        super().__init__(session, clock, policy)
        self._periods = PeriodSelector(session)
        self._ledger = LedgerSelector(session)
        self._accounts = AccountRepository(session, self._clock, self._policy)
        self._writer = JournalWriter(session, self._clock, self._policy)

    def is_period_closed(self, day: date) -> bool:
        return self._periods.is_closed(day)

    def validate_entry_date(self, day: date, enforce_backdate_window: bool = True) -> None:
        """
        Raise unless ``day`` may receive a posting today.

        Raises:
            InvalidEntryDateError, ClosedPeriodError, BackdateApprovalRequiredError
        """
        check_entry_date(
            day,
            self._clock.today(),
            self._policy.max_backdate_days,
            period_closed=self._periods.is_closed(day),
            enforce_backdate_window=enforce_backdate_window,
        )

    def close_period(self, period: Period, actor: Actor) -> ClosedPeriodInfo:
        """
        Close ``period`` (a calendar month).

        The closing entry is dated on the month's last day, or today when
        closing the running month.
        """
        require_role(actor, self._policy.close_roles, "close accounting periods")

        if self._periods.get_closed(period) is not None:
            raise PeriodAlreadyClosedError(period.label)

        today = self._clock.today()
        if period.start > today:
            raise InvalidEntryDateError(period.label, "cannot close a period that has not started")

        activity = self._ledger.activity(
            start=period.start,
            end=period.end,
            categories=(AccountCategory.INCOME, AccountCategory.EXPENSE),
            exclude_reference_types=(ReferenceType.CLOSING,),
        )
        revenue = total(r.balance for r in activity if r.category is AccountCategory.INCOME)
        expenses = total(r.balance for r in activity if r.category is AccountCategory.EXPENSE)
        net_profit = revenue - expenses

        retained = None
        if any(r.balance != ZERO for r in activity):
            retained = self._accounts.get_system_account(AccountCode.EQUITY)

        savepoint = self.session.begin_nested()
        try:
            closing_entry_id = None
            if retained is not None:
                entry = self._writer.write(
                    ReferenceType.CLOSING,
                    None,
                    f"Close books {period.label}",
                    closing_lines(activity, retained.id),
                    actor.id,
                    min(period.last_day, today),
                    enforce_backdate_window=False,
                )
                closing_entry_id = entry.id

            as_of = self._ledger.balances_as_of(period.last_day)
            total_assets = total(
                r.balance for r in as_of if r.category is AccountCategory.ASSET
            )
            total_liabilities = total(
                r.balance for r in as_of if r.category is AccountCategory.LIABILITY
            )

            closed = ClosedPeriod(
                month=period.label,
                closed_by_id=actor.id,
                closed_at=self._clock.now(),
                net_profit=net_profit,
                total_assets=total_assets,
                total_liabilities=total_liabilities,
                closing_entry_id=closing_entry_id,
            )
            self.session.add(closed)
            self.session.flush()
            savepoint.commit()
        except IntegrityError as exc:
            savepoint.rollback()
            raise PeriodAlreadyClosedError(period.label) from exc
        except Exception:
            savepoint.rollback()
            raise

        logger.info(
            "period_closed",
            extra={
                "month": period.label,
                "net_profit": net_profit,
                "total_assets": total_assets,
                "total_liabilities": total_liabilities,
                "closing_entry_id": str(closing_entry_id) if closing_entry_id else None,
            },
        )
        return ClosedPeriodInfo.from_model(closed)

    def list_closed_periods(self) -> list[ClosedPeriodInfo]:
        return self._periods.list_closed()
