"""
Pure validation of proposed journal lines.

Runs before the posting engine touches the session.  Checks, in order:

1. at least two lines;
2. each line has exactly one strictly positive side and the other zero;
3. Σdebit == Σcredit, compared exactly on minor-unit Decimals.

Account existence needs the store and is checked by the posting service.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from ledger_kernel.domain.amounts import ZERO, total
from ledger_kernel.domain.types import LineSpec
from ledger_kernel.exceptions import (
    InvalidLineError,
    TooFewLinesError,
    UnbalancedEntryError,
)

MIN_LINES = 2


@dataclass(frozen=True)
class ValidatedLines:
    """Lines that passed shape and balance checks."""

    lines: tuple[LineSpec, ...]
    total: Decimal

    @property
    def account_ids(self) -> frozenset:
        return frozenset(line.account_id for line in self.lines)


def validate_line(line_no: int, line: LineSpec) -> None:
    if line.debit < ZERO or line.credit < ZERO:
        raise InvalidLineError(line_no, "debit and credit cannot be negative")
    if line.debit > ZERO and line.credit > ZERO:
        raise InvalidLineError(line_no, "a line cannot carry both a debit and a credit")
    if line.debit == ZERO and line.credit == ZERO:
        raise InvalidLineError(line_no, "a line needs a non-zero debit or credit")


def validate_lines(lines: Sequence[LineSpec]) -> ValidatedLines:
    """
    Validate line shape and balance.

    Raises:
        TooFewLinesError, InvalidLineError, UnbalancedEntryError
            (all ValidationError subclasses).
    """
    lines = tuple(lines)
    if len(lines) < MIN_LINES:
        raise TooFewLinesError(len(lines))

    for line_no, line in enumerate(lines, start=1):
        validate_line(line_no, line)

    debits = total(line.debit for line in lines)
    credits = total(line.credit for line in lines)
    if debits != credits:
        raise UnbalancedEntryError(debits=str(debits), credits=str(credits))

    return ValidatedLines(lines=lines, total=debits)
