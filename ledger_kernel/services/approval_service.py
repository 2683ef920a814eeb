"""
ApprovalService -- executive approval of backdated postings.

Responsibility:
    Holds postings dated further back than the policy's backdate window
    until an executive approves or rejects them.  Approval posts the
    entry through JournalWriter with the window lifted; closed months and
    future dates stay forbidden.

Architecture position:
    Kernel > Services.

Invariants enforced:
    - Lines are validated at submission, so an approved request can only
      fail on state that changed in between (a month closed, an account
      gone).
    - pending -> approved and pending -> rejected happen once; the row is
      locked while deciding.
    - An approved request links the entry it produced.

Failure modes:
    - AuthorizationError for submitters without a posting role or
      deciders without an approval role.
    - PendingEntryNotFoundError, PendingEntryNotPendingError.
    - Anything JournalWriter raises on approval.
"""

from datetime import date
from typing import Sequence
from uuid import UUID

from sqlalchemy import select

from ledger_kernel.domain.authorization import require_role
from ledger_kernel.domain.dtos import JournalEntryRecord, PendingEntryInfo
from ledger_kernel.domain.types import Actor, LineSpec, ReferenceType
from ledger_kernel.domain.validation import validate_lines
from ledger_kernel.exceptions import PendingEntryNotFoundError, PendingEntryNotPendingError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.pending_entry import PendingEntry, PendingEntryStatus
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.journal_writer import JournalWriter
from ledger_kernel.services.period_service import PeriodService

logger = get_logger("services.approval")


class ApprovalService(BaseService[PendingEntry]):
    """Submit, approve and reject backdated postings."""

    def __init__(self, session, clock=None, policy=None):
        super().__init__(session, clock, policy)
        self._writer = JournalWriter(session, self._clock, self._policy)
        self._periods = PeriodService(session, self._clock, self._policy)

    def submit(
        self,
        reference_type: ReferenceType,
        related_entity_id: UUID | None,
        description: str,
        lines: Sequence[LineSpec],
        actor: Actor,
        entry_date: date,
        reason: str | None = None,
    ) -> PendingEntryInfo:
        """Store a posting for approval after checking its lines and date."""
        require_role(actor, self._policy.posting_roles, "request backdated postings")
        validated = validate_lines(lines)
        self._periods.validate_entry_date(entry_date, enforce_backdate_window=False)

        pending = PendingEntry(
            reference_type=ReferenceType(reference_type).value,
            related_entity_id=related_entity_id,
            description=description,
            entry_date=entry_date,
            lines=[line.to_dict() for line in validated.lines],
            status=PendingEntryStatus.PENDING.value,
            requested_by_id=actor.id,
            reason=reason,
            created_at=self._clock.now(),
            created_by_id=actor.id,
        )
        self.session.add(pending)
        self.session.flush()

        logger.info(
            "backdate_approval_requested",
            extra={
                "pending_id": str(pending.id),
                "entry_date": entry_date,
                "requested_by": str(actor.id),
            },
        )
        return PendingEntryInfo.from_model(pending)

    def approve(self, pending_id: UUID, approver: Actor) -> JournalEntryRecord:
        """Post the pending entry and mark the request approved."""
        require_role(approver, self._policy.approval_roles, "approve backdated postings")
        pending = self._load_pending(pending_id)

        savepoint = self.session.begin_nested()
        try:
            record = self._writer.write(
                ReferenceType(pending.reference_type),
                pending.related_entity_id,
                pending.description,
                pending.line_specs(),
                pending.requested_by_id,
                pending.entry_date,
                enforce_backdate_window=False,
            )
            pending.status = PendingEntryStatus.APPROVED.value
            pending.decided_by_id = approver.id
            pending.decided_at = self._clock.now()
            pending.journal_entry_id = record.id
            self.session.flush()
            savepoint.commit()
        except Exception:
            savepoint.rollback()
            raise

        logger.info(
            "backdate_approval_granted",
            extra={
                "pending_id": str(pending_id),
                "entry_id": str(record.id),
                "approved_by": str(approver.id),
            },
        )
        return record

    def reject(self, pending_id: UUID, approver: Actor, reason: str) -> PendingEntryInfo:
        require_role(approver, self._policy.approval_roles, "reject backdated postings")
        pending = self._load_pending(pending_id)

        pending.status = PendingEntryStatus.REJECTED.value
        pending.decided_by_id = approver.id
        pending.decided_at = self._clock.now()
        pending.rejection_reason = reason
        self.session.flush()

        logger.info(
            "backdate_approval_rejected",
            extra={"pending_id": str(pending_id), "rejected_by": str(approver.id)},
        )
        return PendingEntryInfo.from_model(pending)

    def get(self, pending_id: UUID) -> PendingEntryInfo:
        pending = self.session.get(PendingEntry, pending_id)
        if pending is None:
            raise PendingEntryNotFoundError(str(pending_id))
        return PendingEntryInfo.from_model(pending)

    def list_pending(self) -> list[PendingEntryInfo]:
        rows = self.session.execute(
            select(PendingEntry)
            .where(PendingEntry.status == PendingEntryStatus.PENDING.value)
            .order_by(PendingEntry.created_at)
        ).scalars()
        return [PendingEntryInfo.from_model(row) for row in rows]

    def _load_pending(self, pending_id: UUID) -> PendingEntry:
        pending = self.session.execute(
            select(PendingEntry)
            .where(PendingEntry.id == pending_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if pending is None:
            raise PendingEntryNotFoundError(str(pending_id))
        if not pending.is_pending:
            raise PendingEntryNotPendingError(str(pending_id), pending.status)
        return pending
