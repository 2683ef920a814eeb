"""
Pure domain layer.

Values, enums, validation and the balance sign convention, with no
dependencies on the ORM, the database or I/O.
"""

from ledger_kernel.domain.amounts import ZERO, to_amount
from ledger_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from ledger_kernel.domain.periods import Period
from ledger_kernel.domain.policy import DEFAULT_POLICY, LedgerPolicy, SystemAccountDef
from ledger_kernel.domain.types import (
    AccountCategory,
    AccountCode,
    Actor,
    LineSpec,
    ReferenceType,
    Role,
)
from ledger_kernel.domain.validation import validate_lines

__all__ = [
    "ZERO",
    "to_amount",
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "Period",
    "DEFAULT_POLICY",
    "LedgerPolicy",
    "SystemAccountDef",
    "AccountCategory",
    "AccountCode",
    "Actor",
    "LineSpec",
    "ReferenceType",
    "Role",
    "validate_lines",
]
