"""
Read-only query selectors.

Selectors never mutate state; they return DTOs built from ORM rows.
"""

from ledger_kernel.selectors.base import BaseSelector
from ledger_kernel.selectors.journal_selector import JournalSelector, LedgerLine
from ledger_kernel.selectors.ledger_selector import (
    AccountActivity,
    LedgerSelector,
    TrialBalance,
)
from ledger_kernel.selectors.period_selector import PeriodSelector

__all__ = [
    "AccountActivity",
    "BaseSelector",
    "JournalSelector",
    "LedgerLine",
    "LedgerSelector",
    "PeriodSelector",
    "TrialBalance",
]
