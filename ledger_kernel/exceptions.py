"""
Typed exception hierarchy for the ledger kernel.

Every error carries a machine-readable ``code`` class attribute and keeps
its context as attributes, so callers catch by type and render by field
instead of parsing messages.  Messages themselves are written to be shown
to the end user verbatim.

    LedgerKernelError (base)
    |
    +-- ValidationError
    |   +-- TooFewLinesError
    |   +-- InvalidLineError
    |   +-- InvalidAmountError
    |   +-- UnbalancedEntryError
    |   +-- InvalidEntryDateError
    |   +-- InvalidAccountCategoryError
    |
    +-- NotFoundError
    |   +-- AccountNotFoundError
    |   +-- SystemAccountNotFoundError
    |   +-- JournalEntryNotFoundError
    |   +-- PendingEntryNotFoundError
    |   +-- BudgetNotFoundError
    |
    +-- TransientStoreError
    +-- AuthorizationError
    |
    +-- PeriodError
    |   +-- ClosedPeriodError
    |   +-- PeriodAlreadyClosedError
    |
    +-- ApprovalError
    |   +-- BackdateApprovalRequiredError
    |   +-- PendingEntryNotPendingError
    |
    +-- ReversalError
    |   +-- EntryAlreadyReversedError
    |   +-- CannotReverseReversalError
    |
    +-- ImmutabilityViolationError
    |
    +-- ConcurrencyError
        +-- OptimisticLockError

Handling pattern:

    try:
        ledger.post_injection(bank.id, amount, "Seed capital", actor)
    except SystemAccountNotFoundError as e:
        toast(e.message_hint)          # "run the chart of accounts setup"
    except ValidationError as e:
        toast(str(e))                  # verbatim
    except TransientStoreError:
        toast("Transaction failed")    # nothing partial was committed
"""


class LedgerKernelError(Exception):
    """Base exception for all ledger kernel errors."""

    code: str = "LEDGER_KERNEL_ERROR"


# Validation


class ValidationError(LedgerKernelError):
    """A proposed posting is malformed.  Raised before any write."""

    code: str = "VALIDATION_ERROR"


class TooFewLinesError(ValidationError):
    """A journal entry needs at least two lines."""

    code: str = "TOO_FEW_LINES"

    def __init__(self, line_count: int):
        self.line_count = line_count
        super().__init__(
            f"A journal entry needs at least 2 lines, got {line_count}"
        )


class InvalidLineError(ValidationError):
    """A line does not have exactly one strictly positive side."""

    code: str = "INVALID_LINE"

    def __init__(self, line_no: int, reason: str):
        self.line_no = line_no
        self.reason = reason
        super().__init__(f"Line {line_no}: {reason}")


class InvalidAmountError(ValidationError):
    """An amount cannot be represented in currency minor units."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, value: str, reason: str):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid amount {value}: {reason}")


class UnbalancedEntryError(ValidationError):
    """Journal entry debits do not equal credits."""

    code: str = "UNBALANCED_ENTRY"

    def __init__(self, debits: str, credits: str):
        self.debits = debits
        self.credits = credits
        super().__init__(
            f"Entry is not balanced: debits={debits}, credits={credits}"
        )


class InvalidEntryDateError(ValidationError):
    """Entry date is not acceptable (e.g. in the future)."""

    code: str = "INVALID_ENTRY_DATE"

    def __init__(self, entry_date: str, reason: str):
        self.entry_date = entry_date
        self.reason = reason
        super().__init__(f"Invalid entry date {entry_date}: {reason}")


class InvalidAccountCategoryError(ValidationError):
    """Account category is not valid for the requested operation."""

    code: str = "INVALID_ACCOUNT_CATEGORY"

    def __init__(self, account_id: str, category: str, reason: str):
        self.account_id = account_id
        self.category = category
        self.reason = reason
        super().__init__(
            f"Account {account_id} ({category}) cannot be used: {reason}"
        )


# Lookups


class NotFoundError(LedgerKernelError):
    """A referenced record does not exist."""

    code: str = "NOT_FOUND"


class AccountNotFoundError(NotFoundError):
    """Account with given ID was not found."""

    code: str = "ACCOUNT_NOT_FOUND"

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Account not found: {account_id}")


class SystemAccountNotFoundError(NotFoundError):
    """A reserved system account (CAPITAL, BANK, ...) does not exist."""

    code: str = "SYSTEM_ACCOUNT_NOT_FOUND"

    message_hint = (
        "Run the chart of accounts setup or create the account manually."
    )

    def __init__(self, account_code: str, account_name: str | None = None):
        self.account_code = account_code
        self.account_name = account_name
        label = f"'{account_name}' account" if account_name else "account"
        super().__init__(
            f"System {label} (code: {account_code}) not found. "
            f"{self.message_hint}"
        )


class JournalEntryNotFoundError(NotFoundError):
    """Journal entry with given ID was not found."""

    code: str = "JOURNAL_ENTRY_NOT_FOUND"

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Journal entry not found: {entry_id}")


class PendingEntryNotFoundError(NotFoundError):
    """Pending entry with given ID was not found."""

    code: str = "PENDING_ENTRY_NOT_FOUND"

    def __init__(self, pending_id: str):
        self.pending_id = pending_id
        super().__init__(f"Approval request not found: {pending_id}")


class BudgetNotFoundError(NotFoundError):
    """No budget exists for the category and month."""

    code: str = "BUDGET_NOT_FOUND"

    def __init__(self, category: str, month: str):
        self.category = category
        self.month = month
        super().__init__(f"No budget for '{category}' in {month}")


# Store


class TransientStoreError(LedgerKernelError):
    """
    The data store was unavailable.  Nothing was committed, so the
    operation is safe to resubmit.
    """

    code: str = "TRANSIENT_STORE_ERROR"

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Transaction failed during {operation}: {detail}")


# Authorization


class AuthorizationError(LedgerKernelError):
    """Actor does not hold a role allowed to perform the operation."""

    code: str = "NOT_AUTHORIZED"

    def __init__(self, actor_id: str, operation: str, required_roles: tuple[str, ...]):
        self.actor_id = actor_id
        self.operation = operation
        self.required_roles = required_roles
        super().__init__(
            f"User {actor_id} is not allowed to {operation} "
            f"(requires one of: {', '.join(required_roles)})"
        )


# Periods


class PeriodError(LedgerKernelError):
    """Base exception for period-related errors."""

    code: str = "PERIOD_ERROR"


class ClosedPeriodError(PeriodError):
    """Attempted to post into a closed month."""

    code: str = "CLOSED_PERIOD"

    def __init__(self, month: str, entry_date: str):
        self.month = month
        self.entry_date = entry_date
        super().__init__(
            f"Cannot post to closed period {month} (entry date: {entry_date})"
        )


class PeriodAlreadyClosedError(PeriodError):
    """Month is already closed."""

    code: str = "PERIOD_ALREADY_CLOSED"

    def __init__(self, month: str):
        self.month = month
        super().__init__(f"Period {month} is already closed")


# Approvals


class ApprovalError(LedgerKernelError):
    """Base exception for approval workflow errors."""

    code: str = "APPROVAL_ERROR"


class BackdateApprovalRequiredError(ApprovalError):
    """Entry is backdated beyond the window and needs executive approval."""

    code: str = "BACKDATE_APPROVAL_REQUIRED"

    def __init__(self, entry_date: str, days_backdated: int, max_days: int):
        self.entry_date = entry_date
        self.days_backdated = days_backdated
        self.max_days = max_days
        super().__init__(
            f"Backdate approval required: backdating beyond {max_days} days "
            f"({days_backdated} days, entry date {entry_date}). "
            "Please request approval from an executive."
        )


class PendingEntryNotPendingError(ApprovalError):
    """Approval request was already decided."""

    code: str = "REQUEST_ALREADY_PROCESSED"

    def __init__(self, pending_id: str, status: str):
        self.pending_id = pending_id
        self.status = status
        super().__init__(f"Request {pending_id} already processed ({status})")


# Reversals


class ReversalError(LedgerKernelError):
    """Base exception for reversal-related errors."""

    code: str = "REVERSAL_ERROR"


class EntryAlreadyReversedError(ReversalError):
    """Entry has already been reversed."""

    code: str = "ENTRY_ALREADY_REVERSED"

    def __init__(self, entry_id: str, reversal_id: str):
        self.entry_id = entry_id
        self.reversal_id = reversal_id
        super().__init__(
            f"Entry {entry_id} has already been reversed by {reversal_id}"
        )


class CannotReverseReversalError(ReversalError):
    """A reversal entry cannot itself be reversed."""

    code: str = "CANNOT_REVERSE_REVERSAL"

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Entry {entry_id} is a reversal and cannot be reversed")


# Immutability


class ImmutabilityViolationError(LedgerKernelError):
    """Attempted to modify or delete a posted journal row."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )


# Concurrency


class ConcurrencyError(LedgerKernelError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"


class OptimisticLockError(ConcurrencyError):
    """Account row changed under a concurrent balance update."""

    code: str = "OPTIMISTIC_LOCK_CONFLICT"

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(
            f"Optimistic lock conflict on {entity_type} {entity_id}: "
            "entity was modified by another transaction"
        )
