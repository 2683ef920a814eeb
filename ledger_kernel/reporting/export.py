"""
CSV export of journal lines.

One row per journal line in the period, ordered by entry date, with the
columns the back office downloads for its spreadsheets.
"""

import csv
import io

from sqlalchemy.orm import Session

from ledger_kernel.domain.amounts import ZERO
from ledger_kernel.domain.periods import Period
from ledger_kernel.logging_config import get_logger
from ledger_kernel.selectors.journal_selector import JournalSelector

logger = get_logger("reporting.export")

JOURNAL_CSV_COLUMNS = ("date", "type", "description", "account", "debit", "credit", "user")


def _amount(value) -> str:
    return str(value) if value != ZERO else ""


def export_journal_csv(session: Session, period: Period) -> str:
    """Journal lines dated in ``period`` as CSV text with a header row."""
    lines = JournalSelector(session).lines_in_period(period)

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(JOURNAL_CSV_COLUMNS)
    for line in lines:
        writer.writerow(
            (
                line.entry_date.isoformat(),
                line.reference_type.value,
                line.description,
                line.account_name,
                _amount(line.debit),
                _amount(line.credit),
                str(line.created_by_id),
            )
        )

    logger.info(
        "journal_exported",
        extra={"period": period.label, "rows": len(lines)},
    )
    return buffer.getvalue()
