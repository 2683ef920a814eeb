"""
SQLAlchemy ORM models for the ledger kernel.

Importing this package registers every table on Base.metadata.
"""

from ledger_kernel.models.account import Account
from ledger_kernel.models.budget import Budget
from ledger_kernel.models.journal import JournalEntry, JournalLine
from ledger_kernel.models.pending_entry import PendingEntry, PendingEntryStatus
from ledger_kernel.models.period import ClosedPeriod

__all__ = [
    "Account",
    "Budget",
    "ClosedPeriod",
    "JournalEntry",
    "JournalLine",
    "PendingEntry",
    "PendingEntryStatus",
]
