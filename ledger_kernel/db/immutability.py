"""
ORM-level append-only enforcement for journal rows.

SQLAlchemy fires mapper events before UPDATE/DELETE statements reach the
database.  The listeners here reject any change to a flushed JournalEntry
or JournalLine, and any change to an Account's category once lines
reference it.  A violation raises ImmutabilityViolationError and the
flush is aborted.

Entity        | Immutable                         | Why
--------------|-----------------------------------|-------------------------------
JournalEntry  | Always, once flushed              | Entries are create-only
JournalLine   | Always, once flushed              | Lines are part of the entry
Account       | category, once lines reference it | Would flip historical signs

The cached Account.balance is deliberately NOT protected here: the
posting engine and the reconciliation repair are its writers.
"""

from sqlalchemy import event, func, inspect, select

from ledger_kernel.exceptions import ImmutabilityViolationError
from ledger_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _blocked(entity_type: str, entity_id, operation: str, reason: str) -> None:
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": str(entity_id),
            "operation": operation,
        },
    )
    raise ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(entity_id),
        reason=reason,
    )


def _check_journal_entry_update(mapper, connection, target):
    state = inspect(target)
    changed = [
        attr.key
        for attr in mapper.column_attrs
        if state.attrs[attr.key].history.has_changes()
    ]
    if changed:
        _blocked(
            "JournalEntry", target.id, "UPDATE",
            f"Cannot modify field '{changed[0]}' on a posted journal entry",
        )


def _check_journal_entry_delete(mapper, connection, target):
    _blocked("JournalEntry", target.id, "DELETE", "Journal entries cannot be deleted")


def _check_journal_line_update(mapper, connection, target):
    _blocked("JournalLine", target.id, "UPDATE", "Journal lines cannot be modified")


def _check_journal_line_delete(mapper, connection, target):
    _blocked("JournalLine", target.id, "DELETE", "Journal lines cannot be deleted")


def _check_account_category(mapper, connection, target):
    from ledger_kernel.models.journal import JournalLine

    history = inspect(target).attrs.category.history
    if not history.has_changes():
        return

    referenced = connection.execute(
        select(func.count(JournalLine.id)).where(JournalLine.account_id == target.id)
    ).scalar_one()
    if referenced:
        _blocked(
            "Account", target.id, "UPDATE",
            "Account category cannot change once journal lines reference it",
        )


_LISTENERS = (
    ("JournalEntry", "before_update", _check_journal_entry_update),
    ("JournalEntry", "before_delete", _check_journal_entry_delete),
    ("JournalLine", "before_update", _check_journal_line_update),
    ("JournalLine", "before_delete", _check_journal_line_delete),
    ("Account", "before_update", _check_account_category),
)


def _models() -> dict:
    from ledger_kernel.models.account import Account
    from ledger_kernel.models.journal import JournalEntry, JournalLine

    return {"JournalEntry": JournalEntry, "JournalLine": JournalLine, "Account": Account}


def register_immutability_listeners() -> None:
    """Install the listeners (idempotent)."""
    models = _models()
    for name, event_name, fn in _LISTENERS:
        if not event.contains(models[name], event_name, fn):
            event.listen(models[name], event_name, fn)


def unregister_immutability_listeners() -> None:
    """Remove the listeners. Only for tests that need to bypass them."""
    models = _models()
    for name, event_name, fn in _LISTENERS:
        if event.contains(models[name], event_name, fn):
            event.remove(models[name], event_name, fn)
