"""
Kernel services -- every writer of ledger state.

Services flush within the caller's transaction and never commit.
"""

from ledger_kernel.services.account_repository import AccountRepository
from ledger_kernel.services.approval_service import ApprovalService
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.budget_service import BudgetService
from ledger_kernel.services.chart_of_accounts import ChartOfAccountsService
from ledger_kernel.services.journal_writer import JournalWriter
from ledger_kernel.services.ledger_service import LedgerService
from ledger_kernel.services.period_service import PeriodService
from ledger_kernel.services.reconciliation_service import ReconciliationService

__all__ = [
    "AccountRepository",
    "ApprovalService",
    "BaseService",
    "BudgetService",
    "ChartOfAccountsService",
    "JournalWriter",
    "LedgerService",
    "PeriodService",
    "ReconciliationService",
]
