"""
LedgerService -- the posting engine's public entry point.

Responsibility:
    Authorizes the acting user, then hands the proposed entry to
    JournalWriter.  Also offers the common postings built on top of it:
    capital injection, transfer, loan disbursement and repayment,
    operating expense, loan write-off and reversal.

Architecture position:
    Kernel > Services.  Callers wrap calls in ``session_scope()``; the
    service only flushes.

Invariants enforced:
    - Only actors holding a posting role may post (checked before any
      validation or read).
    - A reversal swaps debits and credits of the original, links it via
      reversal_of_id, and can happen once per entry.
    - A reversal entry itself cannot be reversed.

Failure modes:
    - AuthorizationError for an actor without a posting role.
    - Everything JournalWriter raises.
    - SystemAccountNotFoundError(CAPITAL) from post_injection, and
      SystemAccountNotFoundError(PORTFOLIO) from the loan postings.
    - JournalEntryNotFoundError, EntryAlreadyReversedError,
      CannotReverseReversalError from reverse_entry.

Usage:
    with session_scope() as session:
        ledger = LedgerService(session, clock=clock)
        ledger.post_injection(bank.id, Decimal("100000"), "Seed capital", actor)
"""

from datetime import date
from decimal import Decimal
from typing import Sequence
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from ledger_kernel.domain.authorization import require_role
from ledger_kernel.domain.dtos import JournalEntryRecord
from ledger_kernel.domain.types import AccountCode, Actor, LineSpec, ReferenceType
from ledger_kernel.exceptions import (
    CannotReverseReversalError,
    EntryAlreadyReversedError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.journal import JournalEntry
from ledger_kernel.posting_rules import (
    RepaymentAllocation,
    disbursement_lines,
    expense_lines,
    injection_lines,
    repayment_lines,
    transfer_lines,
    write_off_lines,
)
from ledger_kernel.selectors.journal_selector import JournalSelector
from ledger_kernel.services.account_repository import AccountRepository
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.journal_writer import JournalWriter

logger = get_logger("services.ledger")


class LedgerService(BaseService[JournalEntry]):
    """
    Posting engine.

    Contract:
        post_entry() returns the posted entry or raises; on raise the
        caller's session holds no trace of the attempt.

    Non-goals:
        - Backdated entries beyond the policy window go through
          ApprovalService, not here.
    """

    def __init__(self, session, clock=None, policy=None):
        super().__init__(session, clock, policy)
        self._writer = JournalWriter(session, self._clock, self._policy)
        self._accounts = AccountRepository(session, self._clock, self._policy)
        self._journal = JournalSelector(session)

    def post_entry(
        self,
        reference_type: ReferenceType,
        related_entity_id: UUID | None,
        description: str,
        lines: Sequence[LineSpec],
        actor: Actor,
        entry_date: date | None = None,
    ) -> JournalEntryRecord:
        """
        Post one balanced journal entry and update cached balances.

        Args:
            reference_type: Kind of economic event.
            related_entity_id: Loan, expense or transfer the entry belongs to.
            description: Free text.
            lines: At least two lines, each with exactly one positive side.
            actor: Acting user; needs a posting role.
            entry_date: Accounting date, defaults to today.

        Raises:
            AuthorizationError, ValidationError, PeriodError,
            BackdateApprovalRequiredError, NotFoundError, TransientStoreError
        """
        require_role(actor, self._policy.posting_roles, "post journal entries")
        return self._writer.write(
            reference_type,
            related_entity_id,
            description,
            lines,
            actor.id,
            entry_date,
        )

    def post_injection(
        self,
        target_account_id: UUID,
        amount: Decimal,
        description: str,
        actor: Actor,
        entry_date: date | None = None,
    ) -> JournalEntryRecord:
        """
        Capital injection: debit the target account, credit Share Capital.

        Raises:
            SystemAccountNotFoundError: no CAPITAL account exists.  Nothing
                is written.
        """
        require_role(actor, self._policy.posting_roles, "post journal entries")
        capital = self._accounts.get_system_account(AccountCode.CAPITAL)
        return self._writer.write(
            ReferenceType.INJECTION,
            None,
            description,
            injection_lines(target_account_id, capital.id, amount),
            actor.id,
            entry_date,
        )

    def post_transfer(
        self,
        from_account_id: UUID,
        to_account_id: UUID,
        amount: Decimal,
        description: str,
        actor: Actor,
        entry_date: date | None = None,
        related_entity_id: UUID | None = None,
    ) -> JournalEntryRecord:
        """Move ``amount`` between two accounts: debit destination, credit source."""
        return self.post_entry(
            ReferenceType.TRANSFER,
            related_entity_id,
            description,
            transfer_lines(from_account_id, to_account_id, amount),
            actor,
            entry_date,
        )

    def post_disbursement(
        self,
        loan_id: UUID,
        source_account_id: UUID,
        amount: Decimal,
        actor: Actor,
        entry_date: date | None = None,
    ) -> JournalEntryRecord:
        """Loan disbursement from BANK or CASH into the Loan Portfolio."""
        require_role(actor, self._policy.posting_roles, "post journal entries")
        portfolio = self._accounts.get_system_account(AccountCode.PORTFOLIO)
        return self._writer.write(
            ReferenceType.DISBURSEMENT,
            loan_id,
            f"Loan disbursement {loan_id}",
            disbursement_lines(portfolio.id, source_account_id, amount),
            actor.id,
            entry_date,
        )

    def post_repayment(
        self,
        loan_id: UUID,
        cash_account_id: UUID,
        income_account_id: UUID,
        allocation: RepaymentAllocation,
        actor: Actor,
        entry_date: date | None = None,
    ) -> JournalEntryRecord:
        """Post the applied part of an allocated repayment."""
        require_role(actor, self._policy.posting_roles, "post journal entries")
        portfolio = self._accounts.get_system_account(AccountCode.PORTFOLIO)
        return self._writer.write(
            ReferenceType.REPAYMENT,
            loan_id,
            f"Loan repayment {loan_id}",
            repayment_lines(cash_account_id, portfolio.id, income_account_id, allocation),
            actor.id,
            entry_date,
        )

    def post_expense(
        self,
        expense_account_id: UUID,
        paid_from_account_id: UUID,
        amount: Decimal,
        description: str,
        actor: Actor,
        entry_date: date | None = None,
        related_entity_id: UUID | None = None,
    ) -> JournalEntryRecord:
        """Operating expense paid from BANK, CASH or MOBILE."""
        require_role(actor, self._policy.posting_roles, "post journal entries")
        return self._writer.write(
            ReferenceType.EXPENSE,
            related_entity_id,
            description,
            expense_lines(expense_account_id, paid_from_account_id, amount),
            actor.id,
            entry_date,
        )

    def post_write_off(
        self,
        loan_id: UUID,
        loss_account_id: UUID,
        amount: Decimal,
        actor: Actor,
        entry_date: date | None = None,
    ) -> JournalEntryRecord:
        """Write unrecoverable principal off the Loan Portfolio into a loss expense."""
        require_role(actor, self._policy.posting_roles, "post journal entries")
        portfolio = self._accounts.get_system_account(AccountCode.PORTFOLIO)
        return self._writer.write(
            ReferenceType.WRITE_OFF,
            loan_id,
            f"Loan write-off {loan_id}",
            write_off_lines(loss_account_id, portfolio.id, amount),
            actor.id,
            entry_date,
        )

    def reverse_entry(
        self,
        entry_id: UUID,
        actor: Actor,
        reason: str | None = None,
        entry_date: date | None = None,
    ) -> JournalEntryRecord:
        """
        Post the mirror image of ``entry_id``.

        The reversal is dated today unless ``entry_date`` is given, so
        reversing an entry from a closed month lands in the open one.
        """
        require_role(actor, self._policy.posting_roles, "reverse journal entries")

        original = self._journal.get_entry(entry_id)
        if original.reversal_of_id is not None:
            raise CannotReverseReversalError(str(entry_id))
        existing = self._journal.get_reversal_of(entry_id)
        if existing is not None:
            raise EntryAlreadyReversedError(str(entry_id), str(existing.id))

        lines = [
            LineSpec(account_id=line.account_id, debit=line.debit, credit=line.credit).reversed()
            for line in original.lines
        ]
        description = f"Reversal: {original.description}"
        if reason:
            description = f"{description} ({reason})"

        try:
            record = self._writer.write(
                ReferenceType.REVERSAL,
                original.id,
                description,
                lines,
                actor.id,
                entry_date,
                reversal_of_id=original.id,
            )
        except IntegrityError as exc:
            existing = self._journal.get_reversal_of(entry_id)
            if existing is None:
                raise
            raise EntryAlreadyReversedError(str(entry_id), str(existing.id)) from exc

        logger.info(
            "journal_entry_reversed",
            extra={"original_entry_id": str(entry_id), "entry_id": str(record.id)},
        )
        return record
