"""
JournalWriter -- atomic write of one balanced journal entry.

Responsibility:
    Validates proposed lines and the entry date, then persists the
    JournalEntry, its JournalLines and the cached balance changes of every
    touched account as one unit.

Architecture position:
    Kernel > Services.  Internal to the kernel: LedgerService,
    PeriodService and ApprovalService call it after their own role checks.
    It performs no authorization itself.

Invariants enforced:
    - Σdebit == Σcredit on minor-unit Decimals (validate_lines).
    - Every referenced account exists before anything is written.
    - Entry, lines and balance deltas are written inside one SAVEPOINT; on
      any failure the savepoint is rolled back and nothing is left behind,
      even inside a larger caller transaction.
    - Balances move by the signed delta of domain/balances.py on rows
      locked FOR UPDATE, so the cached balance always equals the balance
      recomputed from lines.

Failure modes:
    - ValidationError subclasses for malformed lines or future dates.
    - ClosedPeriodError, BackdateApprovalRequiredError for the entry date.
    - AccountNotFoundError for an unknown account.
    - TransientStoreError when the store is unavailable mid-write.

Non-goals:
    - Does NOT commit; the caller owns the outer transaction.
    - Does NOT notify anyone.
"""

from datetime import date
from typing import Sequence
from uuid import UUID

from ledger_kernel.db.engine import is_transient
from ledger_kernel.domain.balances import balance_deltas
from ledger_kernel.domain.dtos import JournalEntryRecord
from ledger_kernel.domain.periods import check_entry_date
from ledger_kernel.domain.types import AccountCategory, LineSpec, ReferenceType
from ledger_kernel.domain.validation import validate_lines
from ledger_kernel.exceptions import LedgerKernelError, TransientStoreError
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.journal import JournalEntry, JournalLine
from ledger_kernel.selectors.period_selector import PeriodSelector
from ledger_kernel.services.account_repository import AccountRepository
from ledger_kernel.services.base import BaseService

logger = get_logger("services.journal_writer")


class JournalWriter(BaseService[JournalEntry]):
    """
    Writes validated journal entries and their balance effects.

    Contract:
        write() either returns the posted JournalEntryRecord or raises
        with the session in the state it had before the call.
    """

    def __init__(self, session, clock=None, policy=None):
        super().__init__(session, clock, policy)
        self._accounts = AccountRepository(session, self._clock, self._policy)
        self._periods = PeriodSelector(session)

    def write(
        self,
        reference_type: ReferenceType,
        related_entity_id: UUID | None,
        description: str,
        lines: Sequence[LineSpec],
        actor_id: UUID,
        entry_date: date | None = None,
        *,
        enforce_backdate_window: bool = True,
        reversal_of_id: UUID | None = None,
    ) -> JournalEntryRecord:
        """
        Validate and persist one entry.

        Args:
            reference_type: Kind of economic event.
            related_entity_id: Loan, expense or transfer the entry belongs to.
            description: Free text shown on statements and exports.
            lines: Proposed debit/credit lines.
            actor_id: User recorded as creator.
            entry_date: Accounting date; defaults to today.
            enforce_backdate_window: False once an executive approved
                backdating this entry.
            reversal_of_id: Entry this one reverses.

        Returns:
            The posted entry.
        """
        reference_type = ReferenceType(reference_type)
        today = self._clock.today()
        entry_date = entry_date or today

        with LogContext.bind(actor_id=str(actor_id), operation=reference_type.value):
            try:
                validated = validate_lines(lines)
                check_entry_date(
                    entry_date,
                    today,
                    self._policy.max_backdate_days,
                    period_closed=self._periods.is_closed(entry_date),
                    enforce_backdate_window=enforce_backdate_window,
                )
                accounts = self._accounts.lock_for_update(validated.account_ids)
            except LedgerKernelError as exc:
                logger.warning(
                    "journal_entry_rejected",
                    extra={
                        "reference_type": reference_type.value,
                        "error_code": exc.code,
                        "error": str(exc),
                    },
                )
                raise

            categories = {
                account_id: AccountCategory(account.category)
                for account_id, account in accounts.items()
            }
            deltas = balance_deltas(validated.lines, categories)
            now = self._clock.now()

            savepoint = self.session.begin_nested()
            try:
                entry = JournalEntry(
                    reference_type=reference_type.value,
                    related_entity_id=related_entity_id,
                    description=description,
                    entry_date=entry_date,
                    reversal_of_id=reversal_of_id,
                    created_at=now,
                    created_by_id=actor_id,
                )
                self.session.add(entry)
                self.session.flush()

                for line_no, spec in enumerate(validated.lines, start=1):
                    self.session.add(
                        JournalLine(
                            journal_entry_id=entry.id,
                            account_id=spec.account_id,
                            debit=spec.debit,
                            credit=spec.credit,
                            line_no=line_no,
                        )
                    )

                for account_id, delta in deltas.items():
                    account = accounts[account_id]
                    account.balance = account.balance + delta
                    account.version += 1
                    account.updated_at = now

                self.session.flush()
                savepoint.commit()
            except Exception as exc:
                savepoint.rollback()
                logger.error(
                    "journal_entry_write_failed",
                    extra={"reference_type": reference_type.value, "error": str(exc)},
                )
                if is_transient(exc):
                    raise TransientStoreError("post_entry", str(exc)) from exc
                raise

            self.session.refresh(entry, attribute_names=["lines"])
            record = JournalEntryRecord.from_model(entry)

        logger.info(
            "journal_entry_posted",
            extra={
                "entry_id": str(record.id),
                "reference_type": reference_type.value,
                "entry_date": entry_date,
                "line_count": len(record.lines),
                "amount": validated.total,
                "actor_id": str(actor_id),
            },
        )
        return record
