"""Financial reports derived from the journal."""

from ledger_kernel.reporting.export import JOURNAL_CSV_COLUMNS, export_journal_csv
from ledger_kernel.reporting.models import (
    BalanceSheetReport,
    BudgetVarianceReport,
    IncomeStatementReport,
    LoanFigureSource,
    ReportMetadata,
    ReportType,
    StatementLine,
    TrialBalanceLineItem,
    TrialBalanceReport,
)
from ledger_kernel.reporting.service import ReportingService

__all__ = [
    "BalanceSheetReport",
    "BudgetVarianceReport",
    "IncomeStatementReport",
    "JOURNAL_CSV_COLUMNS",
    "LoanFigureSource",
    "ReportMetadata",
    "ReportType",
    "ReportingService",
    "StatementLine",
    "TrialBalanceLineItem",
    "TrialBalanceReport",
    "export_journal_csv",
]
