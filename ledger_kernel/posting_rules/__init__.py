"""Line builders for the standard microfinance postings."""

from ledger_kernel.posting_rules.lines import (
    disbursement_lines,
    expense_lines,
    injection_lines,
    opening_balance_lines,
    transfer_lines,
    write_off_lines,
)
from ledger_kernel.posting_rules.repayment import (
    FULLY_PAID_TOLERANCE,
    RepaymentAllocation,
    allocate_repayment,
    repayment_lines,
)

__all__ = [
    "FULLY_PAID_TOLERANCE",
    "RepaymentAllocation",
    "allocate_repayment",
    "disbursement_lines",
    "expense_lines",
    "injection_lines",
    "opening_balance_lines",
    "repayment_lines",
    "transfer_lines",
    "write_off_lines",
]
